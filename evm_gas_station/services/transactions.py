from typing import Optional, Sequence

from aiocache import cached
from hexbytes import HexBytes
from web3 import AsyncWeb3
from web3.contract import AsyncContract

from evm_gas_station.clients.blockchain.web3_client import Web3Client
from evm_gas_station.config import Config, config
from evm_gas_station.models.chain import ChainModel
from evm_gas_station.models.gas_models import GasLimitRequest, TxOverrides
from evm_gas_station.services.chains import ChainsConfig
from evm_gas_station.services.gas_estimator import GasEstimator
from evm_gas_station.services.gas_station import GasPriceCache
from evm_gas_station.utils.cache import get_cache_config
from evm_gas_station.utils.errors import ConfigurationError
from evm_gas_station.utils.logger import LogArgs, get_logger

logger = get_logger(__name__)


@cached(ttl=config.CHAIN_ID_CACHE_TTL, **get_cache_config(config))
async def get_chain_id(web3_client: Web3Client) -> int:
    chain_id = await web3_client.w3.eth.chain_id
    log_args = {LogArgs.chain_id: chain_id, LogArgs.web3_url: web3_client.uri}
    logger.debug(
        f'Connected to chain %({LogArgs.chain_id})s at %({LogArgs.web3_url})s',
        log_args,
        extra=log_args,
    )
    return chain_id


class TransactionService:
    """
    Prepares and submits state changing contract calls.
    Transaction params are merged in this order, later wins:
    gas station quote, estimated gas limit, caller overrides.
    """

    def __init__(
        self,
        web3_client: Web3Client,
        gas_station: GasPriceCache,
        gas_estimator: GasEstimator,
        chains: ChainsConfig,
        config: Config,
        sender: Optional[str] = None,
    ):
        self.web3_client = web3_client
        self.gas_station = gas_station
        self.gas_estimator = gas_estimator
        self.chains = chains
        self.config = config
        self._sender = AsyncWeb3.to_checksum_address(sender) if sender else None

    @property
    def sender(self) -> str:
        if self._sender is None:
            raise ConfigurationError('transactions', 'Sender is not defined', field='sender')
        return self._sender

    def set_sender(self, sender: str) -> None:
        self._sender = AsyncWeb3.to_checksum_address(sender)

    async def get_chain(self) -> ChainModel:
        chain_id = await get_chain_id(self.web3_client)
        return self.chains.get_chain_by_id(chain_id)

    def load_contract(self, address: str, abi: list) -> AsyncContract:
        return self.web3_client.get_contract(address, abi)

    def load_erc20(self, address: str) -> AsyncContract:
        return self.web3_client.get_erc20_contract(address)

    def load_adapter(self, name: str, abi: list) -> AsyncContract:
        address = self.config.ADAPTER_ADDRESSES.get(name)
        if not address:
            raise ConfigurationError(
                'transactions', f'{name} adapter address is not defined', field=name
            )
        return self.load_contract(address, abi)

    async def get_buffer_percentage(self) -> int:
        chain = await self.get_chain()
        if chain.gas_limit_buffer_percentage is not None:
            return chain.gas_limit_buffer_percentage
        return self.config.GAS_LIMIT_BUFFER_PERCENTAGE

    async def build_tx_params(
        self,
        contract: AsyncContract,
        method: str,
        args: Sequence = (),
        overrides: Optional[TxOverrides] = None,
        buffer_percentage: Optional[int] = None,
        manual_gas_limit: Optional[int] = None,
    ) -> dict:
        if buffer_percentage is None:
            buffer_percentage = await self.get_buffer_percentage()
        quote = await self.gas_station.get_price()
        request = GasLimitRequest(
            contract=contract,
            method=method,
            args=tuple(args),
            caller=self._sender,
            manual_override=manual_gas_limit,
            buffer_percentage=buffer_percentage,
        )
        estimated = await self.gas_estimator.get_overrides_with_estimated_gas_limit(
            request, overrides
        )
        tx_params = {**quote.to_tx_params(), **estimated.to_tx_params()}
        if self._sender:
            tx_params['from'] = self._sender
        return tx_params

    async def transact(
        self,
        contract: AsyncContract,
        method: str,
        args: Sequence = (),
        overrides: Optional[TxOverrides] = None,
        buffer_percentage: Optional[int] = None,
        manual_gas_limit: Optional[int] = None,
    ) -> HexBytes:
        self.sender  # Ensure sender is configured before any network call
        tx_params = await self.build_tx_params(
            contract, method, args, overrides, buffer_percentage, manual_gas_limit
        )
        log_args = {LogArgs.contract_method: method, LogArgs.gas_limit: tx_params.get('gas')}
        logger.info(
            f'Sending %({LogArgs.contract_method})s with gas limit %({LogArgs.gas_limit})s',
            log_args,
            extra=log_args,
        )
        return await getattr(contract.functions, method)(*args).transact(tx_params)

    async def approve_erc20(
        self,
        asset: str,
        spender: str,
        amount: int,
        overrides: Optional[TxOverrides] = None,
    ) -> HexBytes:
        erc20 = self.load_erc20(asset)
        return await self.transact(
            erc20,
            'approve',
            [AsyncWeb3.to_checksum_address(spender), amount],
            overrides,
        )
