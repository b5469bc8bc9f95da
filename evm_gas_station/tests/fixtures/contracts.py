from unittest.mock import AsyncMock, MagicMock

import pytest

SENDER = '0x00000000000000000000000000000000000000aa'
CONTRACT_ADDRESS = '0x0730AA138062D8Cc54510aa939b533ba7c30f26B'


@pytest.fixture()
def contract() -> MagicMock:
    """
    Stand-in for web3 AsyncContract: contract.functions.<method>(*args)
    returns a function mock with awaitable estimate_gas and transact.
    """
    contract = MagicMock()
    contract.address = CONTRACT_ADDRESS
    contract.functions.setYieldFee.return_value.estimate_gas = AsyncMock(return_value=100000)
    contract.functions.setYieldFee.return_value.transact = AsyncMock(return_value=b'\x01' * 32)
    return contract


@pytest.fixture()
def web3_client() -> MagicMock:
    web3_client = MagicMock()
    web3_client.uri = 'http://localhost:8545'
    web3_client.w3.eth.fee_history = AsyncMock()
    return web3_client
