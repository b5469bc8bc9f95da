from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class GasOracleMode(str, Enum):
    SLOW = 'slow'
    AVERAGE = 'average'
    FAST = 'fast'


class GasQuote(BaseModel):
    """
    One pricing recommendation for a pending transaction, amounts in wei.
    Fetchers populate whichever fields fit the chain fee model,
    an empty quote means "use network defaults".
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    gas_price: Optional[int] = Field(None, alias='gasPrice', ge=0)
    max_priority_fee_per_gas: Optional[int] = Field(None, alias='maxPriorityFeePerGas', ge=0)
    max_fee_per_gas: Optional[int] = Field(None, alias='maxFeePerGas', ge=0)

    def is_empty(self) -> bool:
        return not self.to_tx_params()

    def to_tx_params(self) -> dict[str, int]:
        return self.model_dump(by_alias=True, exclude_none=True)


class TxOverrides(BaseModel):
    """Caller supplied transaction overrides. Explicit values always win."""

    model_config = ConfigDict(populate_by_name=True)

    gas_limit: Optional[int] = Field(None, alias='gas')
    gas_price: Optional[int] = Field(None, alias='gasPrice')
    max_fee_per_gas: Optional[int] = Field(None, alias='maxFeePerGas')
    max_priority_fee_per_gas: Optional[int] = Field(None, alias='maxPriorityFeePerGas')
    value: Optional[int] = None

    def to_tx_params(self) -> dict[str, int]:
        return self.model_dump(by_alias=True, exclude_none=True)


class GasLimitRequest(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    contract: Any
    method: str
    args: tuple = ()
    caller: Optional[str] = None
    manual_override: Optional[int] = Field(None, gt=0)
    buffer_percentage: int = Field(20, ge=0)

    def simulation_params(self) -> dict:
        return {'from': self.caller} if self.caller else {}
