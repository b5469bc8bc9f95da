from evm_gas_station.utils.errors import (
    ConfigurationError,
    EstimationError,
    UnsupportedChainError,
    UpstreamFetchError,
)
from evm_gas_station.utils.logger import LogArgs


def test_error_owners():
    assert UpstreamFetchError('infura').error_owner == 'provider'
    assert EstimationError('setYieldFee').error_owner == 'user'
    assert UnsupportedChainError('chains').error_owner == 'user'
    assert ConfigurationError('etherscan').error_owner == 'evm_gas_station'
    assert not hasattr(UpstreamFetchError('infura'), 'code')


def test_error_str_and_dict():
    exc = UpstreamFetchError('etherscan', 'Invalid API Key', mode='fast')

    assert str(exc) == 'Cannot fetch gas price quote: Invalid API Key. Source: etherscan'
    assert exc.to_dict() == {
        'source': 'etherscan',
        'reason': 'Invalid API Key',
        'error_owner': 'provider',
        'mode': 'fast',
    }


def test_error_log_args():
    msg, args = ConfigurationError('infura').to_log_args()
    assert msg % args == 'missing configuration. Source: infura'
    assert args == {LogArgs.source: 'infura'}
