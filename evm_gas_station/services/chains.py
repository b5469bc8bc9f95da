from pathlib import Path

import ujson

from evm_gas_station.models.chain import ChainModel
from evm_gas_station.utils.errors import UnsupportedChainError

CHAINS_CONFIG_PATH = Path(__file__).parent.parent / 'config' / 'chains.json'


class ChainsConfig:
    """
    All supported chains are defined in config/chains.json.
    Chain object contains name, chain_id, eip1559 flag, well-known token
    addresses and the default gas limit buffer for that chain.
    Usage:
        chains = ChainsConfig()
        chain = chains.get_chain_by_id(1)
        chain.tokens['stETH']
        # '0xae7ab96520DE3A18E5e111B5EaAb095312D7fE84'
    """

    def __init__(self, path: Path = CHAINS_CONFIG_PATH):
        with open(path) as f:
            self.chains = {
                chain['chain_id']: ChainModel.model_validate(chain)
                for chain in ujson.load(f)
            }

    def __contains__(self, chain_id: int) -> bool:
        return chain_id in self.chains

    def __iter__(self):
        return iter(self.chains.values())

    def is_valid_chain(self, chain_id: int) -> bool:
        return chain_id in self

    def get_chain_by_id(self, chain_id: int) -> ChainModel:
        try:
            return self.chains[chain_id]
        except KeyError:
            raise UnsupportedChainError(
                'chains', f'Chain id {chain_id} not found', chain_id=chain_id
            )

    def get_chain_by_name(self, name: str) -> ChainModel:
        for chain in self.chains.values():
            if chain.name == name:
                return chain
        raise UnsupportedChainError('chains', f'Chain {name} not found', name=name)


chains = ChainsConfig()
