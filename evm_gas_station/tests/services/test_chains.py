import pytest

from evm_gas_station.models.chain import NetworkName
from evm_gas_station.services.chains import ChainsConfig
from evm_gas_station.utils.errors import UnsupportedChainError


def test_get_chain_by_id(chains: ChainsConfig):
    chain = chains.get_chain_by_id(1)
    assert chain.name == NetworkName.ETHEREUM_MAINNET
    assert chain.eip1559
    assert chain.tokens['stETH'] == '0xae7ab96520DE3A18E5e111B5EaAb095312D7fE84'


def test_arbitrum_has_no_steth(chains: ChainsConfig):
    assert 'stETH' not in chains.get_chain_by_id(42161).tokens


def test_unknown_chain(chains: ChainsConfig):
    assert not chains.is_valid_chain(56)
    assert 56 not in chains
    with pytest.raises(UnsupportedChainError) as exc_info:
        chains.get_chain_by_id(56)
    assert exc_info.value.kwargs == {'chain_id': 56}


def test_get_chain_by_name(chains: ChainsConfig):
    assert chains.get_chain_by_name('arbitrum-one-mainnet').chain_id == 42161
    with pytest.raises(UnsupportedChainError):
        chains.get_chain_by_name('polygon')


def test_iterates_all_chains(chains: ChainsConfig):
    assert sorted(chain.chain_id for chain in chains) == [1, 42161]
