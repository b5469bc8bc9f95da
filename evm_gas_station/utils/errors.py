from abc import abstractmethod

from evm_gas_station.utils.logger import LogArgs


class UserMistakes:
    error_owner = 'user'


class OurMistakes:
    error_owner = 'evm_gas_station'


class ProviderMistakes:
    error_owner = 'provider'


class BaseGasStationError(Exception):
    """common error for gas station components"""

    @property
    @abstractmethod
    def msg_to_log(self):
        ...

    @property
    @abstractmethod
    def error_owner(self):
        ...

    def __init__(self, source: str, message: str = None, **kwargs):
        super().__init__(source, message)
        self.source = source
        self.message = message
        self.kwargs = kwargs

    def __str__(self):
        if self.message:
            return f'{self.msg_to_log}: {self.message}. Source: {self.source}'
        return f'{self.msg_to_log}. Source: {self.source}'

    def __repr__(self):
        return f'{self.__class__.__name__}({self.source}, {self.message}, {self.kwargs})'

    def to_dict(self):
        return {
            'source': self.source,
            'reason': self.message,
            'error_owner': self.error_owner,
            **self.kwargs,
        }

    def to_log_args(self):
        return (
            f'{self.msg_to_log.lower()}. Source: %({LogArgs.source})s',
            {LogArgs.source: self.source},
        )


class UpstreamFetchError(ProviderMistakes, BaseGasStationError):
    """Upstream price quote service failed or returned something we cannot parse"""
    msg_to_log = 'Cannot fetch gas price quote'


class EstimationError(UserMistakes, BaseGasStationError):
    """Simulation of the contract call failed and no manual gas limit was given"""
    msg_to_log = 'Cannot estimate gas limit'


class ConfigurationError(OurMistakes, BaseGasStationError):
    """A required configuration value (api key, address, signer) was never supplied"""
    msg_to_log = 'Missing configuration'


class UnsupportedChainError(UserMistakes, BaseGasStationError):
    """Chain id is not in the chain registry"""
    msg_to_log = 'Unsupported chain'
