import enum
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from florist_cart.schemas.common import Money, UtcDatetime


class ProductSnapshot(BaseModel):
    """Catalog data captured when a product is put in the cart."""
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    price: Money = Field(ge=0)
    image: str
    category: str
    stock: int = Field(ge=0)

    class Config:
        coerce_numbers_to_str = True


class CartItem(BaseModel):
    id: str
    product_id: str = Field(alias="productId")
    name: str
    price: Money
    quantity: int = Field(ge=1)
    image: str = ""
    category: str = ""
    stock: int
    created_at: Optional[UtcDatetime] = Field(default=None, alias="createdAt")

    class Config:
        populate_by_name = True
        coerce_numbers_to_str = True
        validate_assignment = True

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity


class CartEnvelope(BaseModel):
    """Persisted shape of the cart under the cart storage key."""
    items: List[CartItem] = []
    expiry: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = Field(default=None, alias="updatedAt")

    class Config:
        populate_by_name = True


class ReadStatus(str, enum.Enum):
    OK = "ok"
    EMPTY = "empty"
    LEGACY = "legacy"
    EXPIRED = "expired"
    MALFORMED = "malformed"
    UNAVAILABLE = "unavailable"


class CartReadResult(BaseModel):
    items: List[CartItem] = []
    status: ReadStatus
    reason: Optional[str] = None

    @property
    def degraded(self) -> bool:
        """True when stored data existed but could not be used."""
        return self.status in (ReadStatus.EXPIRED, ReadStatus.MALFORMED, ReadStatus.UNAVAILABLE)


class CartSummary(BaseModel):
    item_count: int = Field(alias="itemCount")
    subtotal: Money
    formatted_subtotal: str = Field(alias="formattedSubtotal")
    items: List[CartItem] = []

    class Config:
        populate_by_name = True


class StockValidation(BaseModel):
    valid: bool
    message: Optional[str] = None
