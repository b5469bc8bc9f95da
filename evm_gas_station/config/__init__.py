from pydantic_settings import SettingsConfigDict

from evm_gas_station.config.apm import APMConfig
from evm_gas_station.config.cache import CacheConfig
from evm_gas_station.config.gas import GasStationConfig
from evm_gas_station.config.logger import LoggerConfig


class Config(APMConfig, LoggerConfig, CacheConfig, GasStationConfig):
    VERSION: str = '0.1.0'
    WEB3_URL: str = 'http://localhost:8545'
    WEB3_TIMEOUT: int = 10
    # adapter name -> contract address, e.g. {"pyth": "0x..."}
    ADAPTER_ADDRESSES: dict[str, str] = {}

    model_config = SettingsConfigDict(env_file='.env', extra='ignore')


config = Config()
