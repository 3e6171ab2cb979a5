from typing import List, Optional

from pydantic import BaseModel, Field

from florist_cart.schemas.common import Money


class CheckoutItem(BaseModel):
    product_id: str = Field(alias="productId")
    name: str
    price: Money
    quantity: int
    image: str = ""
    category: str = ""
    stock: int

    class Config:
        populate_by_name = True


class AppliedVoucher(BaseModel):
    id: Optional[str] = None
    code: Optional[str] = None
    discount_amount: Money = Field(alias="discountAmount")

    class Config:
        populate_by_name = True


class CheckoutData(BaseModel):
    """Hand-off record read by the checkout flow to create an order."""
    items: List[CheckoutItem]
    subtotal: Money
    shipping_fee: Money = Field(alias="shippingFee")
    voucher_discount: Money = Field(alias="voucherDiscount")
    total: Money
    voucher_data: Optional[AppliedVoucher] = Field(default=None, alias="voucherData")

    class Config:
        populate_by_name = True
