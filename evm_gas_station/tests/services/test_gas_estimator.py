from unittest.mock import AsyncMock, MagicMock

import pytest
from web3.exceptions import ContractLogicError

from evm_gas_station.models.gas_models import GasLimitRequest, TxOverrides
from evm_gas_station.services.gas_estimator import GasEstimator, apply_buffer
from evm_gas_station.tests.fixtures.contracts import SENDER
from evm_gas_station.utils.errors import EstimationError


@pytest.fixture()
def gas_estimator() -> GasEstimator:
    return GasEstimator()


def make_request(contract, **kwargs) -> GasLimitRequest:
    params = {
        'contract': contract,
        'method': 'setYieldFee',
        'args': ('0x0000000000000000000000000000000000000001', 150),
    }
    params.update(kwargs)
    return GasLimitRequest(**params)


@pytest.fixture()
def failing_contract(contract: MagicMock) -> MagicMock:
    contract.functions.setYieldFee.return_value.estimate_gas = AsyncMock(
        side_effect=ContractLogicError('execution reverted')
    )
    return contract


@pytest.mark.parametrize(
    'estimate, buffer, expected',
    [
        (100000, 50, 150000),
        (100000, 0, 100000),
        (33333, 20, 39999),
        (21001, 30, 27301),
        (100000, 100, 200000),
    ],
)
def test_apply_buffer_floors(estimate, buffer, expected):
    assert apply_buffer(estimate, buffer) == expected


def test_request_default_buffer(contract):
    assert make_request(contract).buffer_percentage == 20


@pytest.mark.asyncio()
async def test_estimate_adds_buffer(gas_estimator: GasEstimator, contract: MagicMock):
    request = make_request(contract, buffer_percentage=50, caller=SENDER)

    assert await gas_estimator.estimate(request) == 150000
    contract.functions.setYieldFee.assert_called_once_with(
        '0x0000000000000000000000000000000000000001', 150
    )
    contract.functions.setYieldFee.return_value.estimate_gas.assert_awaited_once_with(
        {'from': SENDER}
    )


@pytest.mark.asyncio()
async def test_estimate_without_caller(gas_estimator: GasEstimator, contract: MagicMock):
    await gas_estimator.estimate(make_request(contract))
    contract.functions.setYieldFee.return_value.estimate_gas.assert_awaited_once_with({})


@pytest.mark.asyncio()
async def test_estimate_falls_back_to_manual_override(
    gas_estimator: GasEstimator, failing_contract: MagicMock, caplog
):
    request = make_request(failing_contract, manual_override=200000)

    assert await gas_estimator.estimate(request) == 200000
    failing_contract.functions.setYieldFee.return_value.estimate_gas.assert_awaited_once()
    assert caplog.text


@pytest.mark.asyncio()
async def test_estimate_without_override_raises(
    gas_estimator: GasEstimator, failing_contract: MagicMock
):
    with pytest.raises(EstimationError) as exc_info:
        await gas_estimator.estimate(make_request(failing_contract))

    assert exc_info.value.source == 'setYieldFee'
    assert isinstance(exc_info.value.__cause__, ContractLogicError)


@pytest.mark.asyncio()
async def test_estimate_network_error_falls_back(
    gas_estimator: GasEstimator, contract: MagicMock
):
    contract.functions.setYieldFee.return_value.estimate_gas = AsyncMock(
        side_effect=ConnectionError('node is down')
    )
    assert await gas_estimator.estimate(make_request(contract, manual_override=50000)) == 50000


@pytest.mark.asyncio()
async def test_overrides_get_estimated_gas_limit(
    gas_estimator: GasEstimator, contract: MagicMock
):
    overrides = TxOverrides(value=10)

    result = await gas_estimator.get_overrides_with_estimated_gas_limit(
        make_request(contract), overrides
    )

    assert result.to_tx_params() == {'gas': 120000, 'value': 10}
    assert overrides.gas_limit is None


@pytest.mark.asyncio()
async def test_explicit_gas_limit_wins(gas_estimator: GasEstimator, contract: MagicMock):
    overrides = TxOverrides(gas_limit=75000, gas_price=3)

    result = await gas_estimator.get_overrides_with_estimated_gas_limit(
        make_request(contract, manual_override=200000), overrides
    )

    assert result.to_tx_params() == {'gas': 75000, 'gasPrice': 3}
    contract.functions.setYieldFee.return_value.estimate_gas.assert_not_awaited()


@pytest.mark.asyncio()
async def test_overrides_default_to_empty(gas_estimator: GasEstimator, contract: MagicMock):
    result = await gas_estimator.get_overrides_with_estimated_gas_limit(make_request(contract))
    assert result.to_tx_params() == {'gas': 120000}
