from pathlib import Path
from typing import Optional

import ujson
from aiohttp import ClientTimeout
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.contract import AsyncContract

from evm_gas_station.config import Config
from evm_gas_station.utils.logger import LogArgs, get_logger

ERC20_ABI_PATH = Path(__file__).parent / 'abi' / 'ERC20.json'

logger = get_logger(__name__)


class Web3Client:
    def __init__(self, uri: str, config: Config):
        self.uri = uri
        self.w3 = AsyncWeb3(
            AsyncHTTPProvider(
                endpoint_uri=uri,
                request_kwargs={'timeout': ClientTimeout(total=config.WEB3_TIMEOUT)},
            )
        )
        log_args = {LogArgs.web3_url: uri}
        logger.debug(f'Created web3 client: %({LogArgs.web3_url})s', log_args, extra=log_args)

        with open(ERC20_ABI_PATH) as fh:
            self.erc20_abi = ujson.load(fh)

    def get_contract(self, address: str, abi: list) -> AsyncContract:
        return self.w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(address), abi=abi
        )

    def get_erc20_contract(self, address: Optional[str] = None) -> AsyncContract:
        params = {'abi': self.erc20_abi}
        if address:
            params['address'] = AsyncWeb3.to_checksum_address(address)
        return self.w3.eth.contract(**params)
