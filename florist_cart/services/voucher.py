import logging
from decimal import Decimal
from typing import Any, Dict, Optional, Union

from florist_cart.core.config import settings
from florist_cart.schemas.voucher import Voucher, VoucherType, VoucherDiscount
from florist_cart.utils.formatting import format_rupiah

logger = logging.getLogger(__name__)

Amount = Union[Decimal, int, float]
ZERO = Decimal("0")


def _as_decimal(amount: Amount) -> Decimal:
    return amount if isinstance(amount, Decimal) else Decimal(str(amount))


def _as_voucher(voucher: Union[Voucher, Dict[str, Any]]) -> Voucher:
    return voucher if isinstance(voucher, Voucher) else Voucher.model_validate(voucher)


def calculate_voucher_discount(subtotal: Amount, voucher: Union[Voucher, Dict[str, Any]]) -> Decimal:
    """
    Discount a voucher grants on `subtotal`.

    FIXED takes the voucher amount, PERCENTAGE takes a share of the subtotal
    capped at maxDiscount when one is set. The result never exceeds the
    subtotal. Unrecognized voucher types grant nothing.
    """
    subtotal = _as_decimal(subtotal)
    voucher = _as_voucher(voucher)

    if subtotal <= 0:
        return ZERO

    if voucher.type == VoucherType.FIXED:
        return min(voucher.discount, subtotal)

    if voucher.type == VoucherType.PERCENTAGE:
        discount = subtotal * voucher.discount / Decimal(100)
        if voucher.max_discount and discount > voucher.max_discount:
            discount = voucher.max_discount
        return min(discount, subtotal)

    logger.warning(f"Unknown voucher type '{voucher.type}', no discount applied")
    return ZERO


def apply_voucher(subtotal: Amount, voucher: Optional[Union[Voucher, Dict[str, Any]]]) -> VoucherDiscount:
    """Discount plus the minimum-purchase rule the backend enforces when validating a code."""
    if voucher is None:
        return VoucherDiscount()

    subtotal = _as_decimal(subtotal)
    voucher = _as_voucher(voucher)

    if voucher.min_purchase and subtotal < voucher.min_purchase:
        reason = f"Minimal pembelian {format_rupiah(voucher.min_purchase)} untuk menggunakan voucher ini"
        logger.info(f"Voucher {voucher.code or voucher.id} not applied: subtotal {subtotal} below {voucher.min_purchase}")
        return VoucherDiscount(reason=reason)

    amount = calculate_voucher_discount(subtotal, voucher)
    if amount <= 0:
        return VoucherDiscount(reason="Voucher tidak memberikan potongan")
    return VoucherDiscount(amount=amount, applied=True)


def calculate_shipping_fee(
    subtotal: Amount,
    fee: Optional[Amount] = None,
    free_threshold: Optional[Amount] = None
) -> Decimal:
    """Flat shipping fee, waived from the free-shipping threshold upwards."""
    fee = _as_decimal(settings.SHIPPING_FEE if fee is None else fee)
    free_threshold = _as_decimal(settings.FREE_SHIPPING_THRESHOLD if free_threshold is None else free_threshold)
    if _as_decimal(subtotal) >= free_threshold:
        return ZERO
    return fee
