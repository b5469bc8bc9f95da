import asyncio
from abc import abstractmethod
from decimal import Decimal, InvalidOperation
from statistics import mean
from typing import Optional, Union

import ujson
from aiohttp import ClientError, ClientResponse, ClientSession, ClientTimeout
from pydantic import ValidationError
from web3 import Web3
from web3.exceptions import Web3Exception

from evm_gas_station.clients.blockchain.web3_client import Web3Client
from evm_gas_station.config import Config
from evm_gas_station.models.chain import ChainModel
from evm_gas_station.models.gas_models import GasOracleMode, GasQuote
from evm_gas_station.models.provider_response_models import (
    EtherscanGasOracleResponse,
    JsonRpcResponse,
)
from evm_gas_station.utils import httputils
from evm_gas_station.utils.errors import ConfigurationError, UpstreamFetchError
from evm_gas_station.utils.logger import LogArgs, capture_exception, get_logger

logger = get_logger(__name__)

FETCH_EXCEPTIONS = (
    ClientError,
    asyncio.TimeoutError,
    ValueError,  # includes pydantic ValidationError and json decode errors
    KeyError,
    InvalidOperation,
)


class BasePriceFetcher:
    """Source of gas price quotes plugged into a GasPriceCache."""

    FETCHER_NAME = 'base_fetcher'

    @abstractmethod
    async def fetch_quote(self) -> GasQuote:
        """
        Ask the upstream source for a fresh quote.

        Returns:
            A GasQuote populated with the fields this source knows about.
        Raises:
            UpstreamFetchError: the upstream call failed or returned garbage.
            ConfigurationError: a value required by this source was never supplied.
        """

    def handle_exception(self, exception: Exception, **kwargs) -> UpstreamFetchError:
        capture_exception((type(exception), exception, exception.__traceback__))
        if isinstance(exception, ValidationError):
            message = f'Malformed response: {exception}'
        elif isinstance(exception, asyncio.TimeoutError):
            message = 'Request timed out'
        else:
            message = str(exception) or type(exception).__name__
        exc = UpstreamFetchError(self.FETCHER_NAME, message, **kwargs)
        logger.warning(*exc.to_log_args(), extra={LogArgs.ex: message})
        return exc


class StaticPriceFetcher(BasePriceFetcher):
    """Used when no live gas price service is configured: network defaults apply."""

    FETCHER_NAME = 'static'

    async def fetch_quote(self) -> GasQuote:
        return GasQuote()


class FixedPriceFetcher(BasePriceFetcher):
    """Constant legacy gas price, for low fee chains where no oracle is needed."""

    FETCHER_NAME = 'fixed'

    def __init__(self, gas_price: int):
        if gas_price <= 0:
            raise ValueError('gas_price must be positive')
        self.gas_price = gas_price

    async def fetch_quote(self) -> GasQuote:
        return GasQuote(gas_price=self.gas_price)


class HttpPriceFetcher(BasePriceFetcher):
    REQUEST_TIMEOUT = 7

    def __init__(
        self,
        api_key: str = '',
        session: Optional[ClientSession] = None,
        request_timeout: Optional[float] = None,
    ):
        self.api_key = api_key
        self.request_timeout = request_timeout or self.REQUEST_TIMEOUT
        self._session = session

    @property
    def aiohttp_session(self) -> ClientSession:
        session = self._session
        if session is None:
            session = getattr(httputils, 'CLIENT_SESSION', None)
        if session is None or session.closed:
            raise ConfigurationError(
                self.FETCHER_NAME, 'HTTP session is not set up', field='session'
            )
        return session

    def ensure_api_key(self) -> str:
        if not self.api_key:
            raise ConfigurationError(
                self.FETCHER_NAME, 'API key is not set', field='api_key'
            )
        return self.api_key

    async def _read_json(self, response: ClientResponse) -> Union[dict, list]:
        response.raise_for_status()
        # some oracles answer with text/html content type on errors
        return await response.json(loads=ujson.loads, content_type=None)

    async def _get_response(self, url: str, params: Optional[dict] = None) -> dict:
        async with self.aiohttp_session.get(
            url, params=params, timeout=ClientTimeout(total=self.request_timeout)
        ) as response:
            logger.debug('Request GET %s', self.FETCHER_NAME)
            return await self._read_json(response)

    async def _post_response(self, url: str, payload: dict) -> dict:
        async with self.aiohttp_session.post(
            url,
            json=payload,
            headers={'accept': 'application/json'},
            timeout=ClientTimeout(total=self.request_timeout),
        ) as response:
            logger.debug('Request POST %s', self.FETCHER_NAME)
            return await self._read_json(response)


class JsonRpcPriorityFeeFetcher(HttpPriceFetcher):
    """Asks a JSON-RPC node provider for its eth_maxPriorityFeePerGas recommendation."""

    FETCHER_NAME = 'json_rpc'
    RPC_URL_TEMPLATE: str = ''

    @property
    def url(self) -> str:
        return self.RPC_URL_TEMPLATE.format(api_key=self.ensure_api_key())

    def build_payload(self) -> dict:
        return {'id': 1, 'jsonrpc': '2.0', 'method': 'eth_maxPriorityFeePerGas'}

    async def fetch_quote(self) -> GasQuote:
        url = self.url
        try:
            data = await self._post_response(url, self.build_payload())
            response = JsonRpcResponse.model_validate(data)
        except FETCH_EXCEPTIONS as e:
            raise self.handle_exception(e) from e

        if response.error is not None:
            raise self.handle_exception(
                ValueError(response.error.message), rpc_error_code=response.error.code
            )
        if response.result is None:
            raise self.handle_exception(ValueError('Empty result'))
        return GasQuote(max_priority_fee_per_gas=int(response.result, 16))


class InfuraPriorityFeeFetcher(JsonRpcPriorityFeeFetcher):
    FETCHER_NAME = 'infura'
    RPC_URL_TEMPLATE = 'https://mainnet.infura.io/v3/{api_key}'


class AlchemyPriorityFeeFetcher(JsonRpcPriorityFeeFetcher):
    FETCHER_NAME = 'alchemy'
    RPC_URL_TEMPLATE = 'https://arb-mainnet.g.alchemy.com/v2/{api_key}'

    def build_payload(self) -> dict:
        return {**super().build_payload(), 'params': []}


class EtherscanGasOracleFetcher(HttpPriceFetcher):
    """
    Docs: https://docs.etherscan.io/api-endpoints/gas-tracker
    Gas oracle answers with three legacy price tiers in gwei,
    `mode` selects which one becomes the quote.
    """

    FETCHER_NAME = 'etherscan'
    API_URL = 'https://api.etherscan.io/api'
    UNIT = 'gwei'

    def __init__(
        self,
        api_key: str = '',
        session: Optional[ClientSession] = None,
        request_timeout: Optional[float] = None,
        mode: GasOracleMode = GasOracleMode.FAST,
    ):
        super().__init__(api_key=api_key, session=session, request_timeout=request_timeout)
        self.mode = GasOracleMode(mode)

    def set_mode(self, mode: Union[GasOracleMode, str]) -> None:
        self.mode = GasOracleMode(mode)

    async def fetch_quote(self) -> GasQuote:
        params = {
            'module': 'gastracker',
            'action': 'gasoracle',
            'apikey': self.ensure_api_key(),
        }
        mode = self.mode
        try:
            data = await self._get_response(self.API_URL, params)
            result = EtherscanGasOracleResponse.model_validate(data).result
            price = getattr(result, mode.value)
            return GasQuote(gas_price=Web3.to_wei(Decimal(price), self.UNIT))
        except FETCH_EXCEPTIONS as e:
            raise self.handle_exception(e, mode=mode.value) from e


class NodeFeeHistoryFetcher(BasePriceFetcher):
    """
    Quotes straight from the chain's own node.
    EIP-1559 chains get tip and cap from recent fee history,
    legacy chains get eth_gasPrice.
    """

    FETCHER_NAME = 'node'
    FEE_HISTORY_BLOCKS = 4
    REWARD_PERCENTILE = 60

    def __init__(self, web3_client: Web3Client, eip1559: bool = True):
        self.web3_client = web3_client
        self.eip1559 = eip1559

    async def fetch_quote(self) -> GasQuote:
        try:
            if self.eip1559:
                return await self._fetch_eip1559()
            return await self._fetch_legacy()
        except FETCH_EXCEPTIONS + (Web3Exception,) as e:
            raise self.handle_exception(e, web3_url=self.web3_client.uri) from e

    async def _fetch_eip1559(self) -> GasQuote:
        gas_history = await self.web3_client.w3.eth.fee_history(
            self.FEE_HISTORY_BLOCKS, 'latest', [self.REWARD_PERCENTILE]
        )
        # baseFee for next block
        base_fee = gas_history['baseFeePerGas'][-1]
        priority_fee = int(mean(_[0] for _ in gas_history['reward']))
        return GasQuote(
            max_priority_fee_per_gas=priority_fee,
            max_fee_per_gas=base_fee + priority_fee,
        )

    async def _fetch_legacy(self) -> GasQuote:
        return GasQuote(gas_price=await self.web3_client.w3.eth.gas_price)


def build_price_fetcher(
    config: Config,
    session: Optional[ClientSession] = None,
    web3_client: Optional[Web3Client] = None,
    chain: Optional[ChainModel] = None,
) -> BasePriceFetcher:
    """
    Pick the price fetcher named by config.GAS_ORACLE.
    Missing api keys are reported on first fetch, missing web3 client right away.
    """
    oracle = config.GAS_ORACLE.lower()
    http_kwargs = {'session': session, 'request_timeout': config.UPSTREAM_REQUEST_TIMEOUT}
    if oracle == StaticPriceFetcher.FETCHER_NAME:
        return StaticPriceFetcher()
    if oracle == FixedPriceFetcher.FETCHER_NAME:
        return FixedPriceFetcher(config.FIXED_GAS_PRICE)
    if oracle == InfuraPriorityFeeFetcher.FETCHER_NAME:
        return InfuraPriorityFeeFetcher(api_key=config.INFURA_API_KEY, **http_kwargs)
    if oracle == AlchemyPriorityFeeFetcher.FETCHER_NAME:
        return AlchemyPriorityFeeFetcher(api_key=config.ALCHEMY_API_KEY, **http_kwargs)
    if oracle == EtherscanGasOracleFetcher.FETCHER_NAME:
        return EtherscanGasOracleFetcher(
            api_key=config.ETHERSCAN_API_KEY, mode=config.GAS_ORACLE_MODE, **http_kwargs
        )
    if oracle == NodeFeeHistoryFetcher.FETCHER_NAME:
        if web3_client is None:
            raise ConfigurationError(oracle, 'Web3 client is required', field='web3_client')
        return NodeFeeHistoryFetcher(web3_client, eip1559=chain.eip1559 if chain else True)
    raise ConfigurationError('gas_station', f'Unknown gas oracle {config.GAS_ORACLE}', field='GAS_ORACLE')
