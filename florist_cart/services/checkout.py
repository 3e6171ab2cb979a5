import json
import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional, Union

from pydantic import ValidationError

from florist_cart.schemas.checkout import AppliedVoucher, CheckoutData, CheckoutItem
from florist_cart.schemas.voucher import Voucher
from florist_cart.services.cart import CartStore, calculate_total, validate_cart_stock
from florist_cart.services.voucher import apply_voucher, calculate_shipping_fee

logger = logging.getLogger(__name__)


class CheckoutError(Exception):
    """Selected items cannot be handed to checkout."""


class CheckoutService:
    """
    Builds the checkout hand-off from a selection of cart lines.

    The hand-off is stored beside the cart under the checkout key, which
    clearing the cart also removes.
    """

    def __init__(
        self,
        store: CartStore,
        shipping_fee: Optional[Decimal] = None,
        free_shipping_threshold: Optional[Decimal] = None
    ):
        self.store = store
        self.shipping_fee = shipping_fee
        self.free_shipping_threshold = free_shipping_threshold

    def prepare(
        self,
        selected_ids: Iterable[str],
        voucher: Optional[Union[Voucher, Dict[str, Any]]] = None
    ) -> CheckoutData:
        selected = set(selected_ids)
        if not selected:
            raise CheckoutError("Silakan pilih minimal satu produk untuk checkout")

        items = [item for item in self.store.get_cart() if item.id in selected]
        if not items:
            raise CheckoutError("Produk yang dipilih tidak ada di keranjang")

        validation = validate_cart_stock(items)
        if not validation.valid:
            raise CheckoutError(validation.message)

        subtotal = calculate_total(items)
        shipping_fee = calculate_shipping_fee(subtotal, self.shipping_fee, self.free_shipping_threshold)
        discount = apply_voucher(subtotal, voucher)

        voucher_data = None
        if discount.applied:
            voucher = voucher if isinstance(voucher, Voucher) else Voucher.model_validate(voucher)
            voucher_data = AppliedVoucher(id=voucher.id, code=voucher.code, discount_amount=discount.amount)
        elif voucher is not None:
            logger.info(f"Voucher dropped from checkout: {discount.reason}")

        data = CheckoutData(
            items=[
                CheckoutItem(
                    product_id=item.product_id,
                    name=item.name,
                    price=item.price,
                    quantity=item.quantity,
                    image=item.image,
                    category=item.category,
                    stock=item.stock
                )
                for item in items
            ],
            subtotal=subtotal,
            shipping_fee=shipping_fee,
            voucher_discount=discount.amount,
            total=max(Decimal("0"), subtotal + shipping_fee - discount.amount),
            voucher_data=voucher_data
        )

        self.store.storage.set_item(self.store.checkout_key, data.model_dump_json(by_alias=True))
        logger.info(f"Checkout prepared: {len(items)} items, total={data.total}")
        return data

    def load(self) -> Optional[CheckoutData]:
        """Stored hand-off, or None when it is missing or unreadable."""
        raw = self.store.storage.get_item(self.store.checkout_key)
        if raw is None:
            return None
        try:
            return CheckoutData.model_validate(json.loads(raw))
        except (ValueError, ValidationError) as e:
            logger.warning(f"Discarding unreadable checkout data: {e}")
            return None

    def complete(self) -> None:
        """Order created: the cart and the hand-off are no longer needed."""
        self.store.clear_cart()
        logger.info("Checkout completed, cart cleared")
