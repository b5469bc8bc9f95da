from pydantic_settings import BaseSettings

from evm_gas_station.models.gas_models import GasOracleMode


class GasStationConfig(BaseSettings):
    # static | fixed | infura | alchemy | etherscan | node
    GAS_ORACLE: str = 'static'
    GAS_CACHE_VALIDITY_MS: int = 10000
    GAS_ORACLE_MODE: GasOracleMode = GasOracleMode.FAST
    GAS_REFRESH_SINGLE_FLIGHT: bool = False
    FIXED_GAS_PRICE: int = 10**12
    INFURA_API_KEY: str = ''
    ALCHEMY_API_KEY: str = ''
    ETHERSCAN_API_KEY: str = ''
    UPSTREAM_REQUEST_TIMEOUT: float = 7
    GAS_LIMIT_BUFFER_PERCENTAGE: int = 20
