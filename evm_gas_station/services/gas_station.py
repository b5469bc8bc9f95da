import asyncio
from time import monotonic
from typing import Callable, Optional

from aiohttp import ClientSession

from evm_gas_station.clients.blockchain.web3_client import Web3Client
from evm_gas_station.config import Config
from evm_gas_station.models.chain import ChainModel
from evm_gas_station.models.gas_models import GasQuote
from evm_gas_station.services.price_fetchers import (
    BasePriceFetcher,
    StaticPriceFetcher,
    build_price_fetcher,
)
from evm_gas_station.utils.logger import LogArgs, get_logger

DEFAULT_VALIDITY_WINDOW_MS = 10000

logger = get_logger(__name__)


def monotonic_ms() -> float:
    return monotonic() * 1000


class GasPriceCache:
    """
    Keeps the last gas price quote for `validity_window_ms` and refreshes it
    lazily from the injected fetcher when a caller asks for a stale price.

    One instance is shared by every call site of one network client.
    Concurrent stale readers may each trigger a refresh unless
    `single_flight` is set, in which case refreshes are serialized and
    callers waiting on the lock reuse the fresh value.
    """

    def __init__(
        self,
        fetcher: Optional[BasePriceFetcher] = None,
        validity_window_ms: int = DEFAULT_VALIDITY_WINDOW_MS,
        single_flight: bool = False,
        clock: Callable[[], float] = monotonic_ms,
    ):
        if validity_window_ms <= 0:
            raise ValueError('validity_window_ms must be positive')
        self.fetcher = fetcher or StaticPriceFetcher()
        self.validity_window_ms = validity_window_ms
        self._clock = clock
        self._last_value: Optional[GasQuote] = None
        self._last_updated_at: Optional[float] = None
        self._refresh_lock = asyncio.Lock() if single_flight else None

    @classmethod
    def from_config(
        cls,
        config: Config,
        session: Optional[ClientSession] = None,
        web3_client: Optional[Web3Client] = None,
        chain: Optional[ChainModel] = None,
    ) -> 'GasPriceCache':
        return cls(
            fetcher=build_price_fetcher(config, session, web3_client, chain),
            validity_window_ms=config.GAS_CACHE_VALIDITY_MS,
            single_flight=config.GAS_REFRESH_SINGLE_FLIGHT,
        )

    @property
    def last_value(self) -> Optional[GasQuote]:
        return self._last_value

    @property
    def last_updated_at(self) -> Optional[float]:
        return self._last_updated_at

    def is_valid(self) -> bool:
        return (
            self._last_updated_at is not None
            and self._clock() - self._last_updated_at < self.validity_window_ms
        )

    def purge(self) -> None:
        self._last_value = None
        self._last_updated_at = None

    async def refresh(self) -> None:
        """
        Fetch a new quote and store it together with its timestamp.
        Fetch errors propagate as is and leave the previous state untouched.
        """
        quote = await self.fetcher.fetch_quote()
        if quote is None:
            quote = GasQuote()
        self._last_value, self._last_updated_at = quote, self._clock()
        log_args = {
            LogArgs.gas_oracle: self.fetcher.FETCHER_NAME,
            LogArgs.gas_quote: quote.to_tx_params(),
        }
        logger.debug(
            f'Gas price refreshed from %({LogArgs.gas_oracle})s: %({LogArgs.gas_quote})s',
            log_args,
            extra=log_args,
        )

    async def get_price(self) -> GasQuote:
        if not self.is_valid():
            if self._refresh_lock is None:
                await self.refresh()
            else:
                async with self._refresh_lock:
                    # another caller may have refreshed while we waited
                    if not self.is_valid():
                        await self.refresh()
        return self._last_value if self._last_value is not None else GasQuote()
