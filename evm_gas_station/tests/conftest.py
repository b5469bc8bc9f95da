import pytest

from evm_gas_station.config import Config
from evm_gas_station.services.chains import ChainsConfig
from evm_gas_station.tests.fixtures import *  # noqa: F401, F403


@pytest.fixture()
def config() -> Config:
    return Config(
        GAS_ORACLE='static',
        GAS_CACHE_VALIDITY_MS=10000,
        INFURA_API_KEY='infura-key',
        ALCHEMY_API_KEY='alchemy-key',
        ETHERSCAN_API_KEY='etherscan-key',
        ADAPTER_ADDRESSES={'pyth': '0x0000000000000000000000000000000000000a11'},
    )


@pytest.fixture()
def chains() -> ChainsConfig:
    return ChainsConfig()
