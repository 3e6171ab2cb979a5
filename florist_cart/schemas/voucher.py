import enum
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from florist_cart.schemas.common import Money


class VoucherType(str, enum.Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED = "FIXED"


class Voucher(BaseModel):
    # Left as a plain string: unknown or missing types are priced at zero instead of rejected.
    type: str
    discount: Money = Field(ge=0)
    max_discount: Optional[Money] = Field(default=None, alias="maxDiscount")
    min_purchase: Optional[Money] = Field(default=None, alias="minPurchase")
    id: Optional[str] = None
    code: Optional[str] = None

    class Config:
        populate_by_name = True
        coerce_numbers_to_str = True

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return ""


class VoucherDiscount(BaseModel):
    amount: Money = Decimal("0")
    applied: bool = False
    reason: Optional[str] = None
