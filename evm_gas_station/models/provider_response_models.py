import re
from typing import Optional, Union

from pydantic import BaseModel, Field, field_validator

HEX_QUANTITY = re.compile(r'0x[0-9a-fA-F]+')


class JsonRpcError(BaseModel):
    code: int
    message: str


class JsonRpcResponse(BaseModel):
    id: Optional[Union[int, str]] = None
    jsonrpc: str = '2.0'
    result: Optional[str] = None
    error: Optional[JsonRpcError] = None

    @field_validator('result')
    @classmethod
    def result_is_hex(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not HEX_QUANTITY.fullmatch(value):
            raise ValueError(f'Not a hex quantity: {value}')
        return value


class EtherscanGasOracleResult(BaseModel):
    """Prices are decimal strings in gwei."""

    slow: str = Field(alias='SlowGasPrice')
    average: str = Field(alias='ProposeGasPrice')
    fast: str = Field(alias='FastGasPrice')
    last_block: Optional[str] = Field(None, alias='LastBlock')
    suggested_base_fee: Optional[str] = Field(None, alias='suggestBaseFee')


class EtherscanGasOracleResponse(BaseModel):
    status: Optional[str] = None
    message: Optional[str] = None
    result: EtherscanGasOracleResult
