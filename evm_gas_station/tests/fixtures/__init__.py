from evm_gas_station.tests.fixtures.aiohttp_session import *  # noqa: F401, F403
from evm_gas_station.tests.fixtures.clock import *  # noqa: F401, F403
from evm_gas_station.tests.fixtures.contracts import *  # noqa: F401, F403
