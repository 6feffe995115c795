from decimal import Decimal
from pydantic import BaseModel, Field, field_validator


class SwapTokenRequest(BaseModel):
    from_denom: str = Field(min_length=1, description="Denom of the asset to spend")
    to_denom: str = Field(min_length=1, description="Denom of the asset to receive")
    amount: Decimal = Field(gt=0, description="Amount of the source asset, in human units")
    slippage: Decimal = Field(default=Decimal("1"), ge=0, le=100, description="Slippage tolerance in percent")

    @field_validator("amount", "slippage", mode="before")
    @classmethod
    def _float_via_str(cls, value):
        # 0.1 must mean Decimal("0.1"), not the binary float expansion
        if isinstance(value, float):
            return str(value)
        return value
