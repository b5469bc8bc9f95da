from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class NetworkName(str, Enum):
    ETHEREUM_MAINNET = 'ethereum-mainnet'
    ARBITRUM_ONE_MAINNET = 'arbitrum-one-mainnet'


class ChainModel(BaseModel):
    name: NetworkName
    chain_id: int
    description: str
    eip1559: bool
    tokens: dict[str, str] = {}
    gas_limit_buffer_percentage: Optional[int] = Field(None, ge=0)
