"""
Client-side shopping cart.

The cart is one JSON envelope ({items, expiry, updatedAt}) kept under a single
storage key. Every write pushes the expiry out by the retention window; reads
drop an expired envelope. A bare JSON array is still read as an item list from
before the envelope existed.
"""
import json
import logging
import threading
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from pydantic import TypeAdapter, ValidationError

from florist_cart.core.config import settings
from florist_cart.schemas.cart import (
    CartEnvelope,
    CartItem,
    CartReadResult,
    CartSummary,
    ProductSnapshot,
    ReadStatus,
    StockValidation,
)
from florist_cart.services.events import CartEventBus
from florist_cart.services.storage import StorageBackend
from florist_cart.utils.formatting import format_rupiah

logger = logging.getLogger(__name__)

_item_list = TypeAdapter(List[CartItem])


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_item_id(now: datetime) -> str:
    return f"cart_{int(now.timestamp() * 1000)}_{uuid.uuid4().hex[:9]}"


def calculate_total(items: Iterable[CartItem]) -> Decimal:
    return sum((item.subtotal for item in items), Decimal("0"))


def _whole_quantity(quantity: Any) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValueError(f"Quantity must be a whole number, got {quantity!r}")
    return quantity


def validate_cart_stock(items: Iterable[CartItem]) -> StockValidation:
    """Report the first item whose quantity exceeds its recorded stock."""
    for item in items:
        if item.quantity > item.stock:
            return StockValidation(
                valid=False,
                message=(
                    f'Stok "{item.name}" tidak mencukupi. '
                    f"Stok tersedia: {item.stock}, jumlah dipesan: {item.quantity}"
                )
            )
    return StockValidation(valid=True)


class CartStore:
    """
    Cart for one browsing client, persisted through a StorageBackend.

    Each mutation runs read, modify, write and notify under one lock, so
    concurrent callers in the same process never lose each other's updates.
    Listeners are notified after the write has been committed.
    """

    def __init__(
        self,
        storage: StorageBackend,
        events: Optional[CartEventBus] = None,
        clock: Optional[Callable[[], datetime]] = None,
        storage_key: Optional[str] = None,
        checkout_key: Optional[str] = None,
        expiry_days: Optional[int] = None,
        event_name: Optional[str] = None
    ):
        self.storage = storage
        self.events = events or CartEventBus()
        self.clock = clock or utcnow
        self.storage_key = storage_key or settings.CART_STORAGE_KEY
        self.checkout_key = checkout_key or settings.CHECKOUT_STORAGE_KEY
        self.expiry_days = expiry_days if expiry_days is not None else settings.CART_EXPIRY_DAYS
        self.event_name = event_name or settings.CART_UPDATED_EVENT
        self._lock = threading.RLock()

    # Persistence

    def load(self) -> CartReadResult:
        """Read the stored cart, reporting why it came back empty when it did."""
        with self._lock:
            try:
                raw = self.storage.get_item(self.storage_key)
            except Exception as e:
                logger.exception("Cart storage could not be read")
                return CartReadResult(status=ReadStatus.UNAVAILABLE, reason=str(e))

            if raw is None:
                return CartReadResult(status=ReadStatus.EMPTY)

            try:
                parsed = json.loads(raw)
            except ValueError as e:
                logger.warning(f"Discarding malformed cart data: {e}")
                return CartReadResult(status=ReadStatus.MALFORMED, reason=f"Invalid JSON: {e}")

            if isinstance(parsed, list):
                try:
                    items = _item_list.validate_python(parsed)
                except ValidationError as e:
                    logger.warning(f"Discarding legacy cart with invalid items: {e.error_count()} errors")
                    return CartReadResult(status=ReadStatus.MALFORMED, reason=str(e))
                return CartReadResult(items=items, status=ReadStatus.LEGACY)

            if not isinstance(parsed, dict) or not isinstance(parsed.get("items"), list):
                logger.warning("Discarding cart data with unrecognized shape")
                return CartReadResult(status=ReadStatus.MALFORMED, reason="Unrecognized cart shape")

            try:
                envelope = CartEnvelope.model_validate(parsed)
            except ValidationError as e:
                logger.warning(f"Discarding cart with invalid items: {e.error_count()} errors")
                return CartReadResult(status=ReadStatus.MALFORMED, reason=str(e))

            if envelope.expiry and envelope.expiry < self.clock():
                logger.info(f"Cart expired at {envelope.expiry.isoformat()}, removing it")
                try:
                    self.storage.remove_item(self.storage_key)
                except Exception:
                    logger.exception("Expired cart could not be removed")
                return CartReadResult(
                    status=ReadStatus.EXPIRED,
                    reason=f"Expired at {envelope.expiry.isoformat()}"
                )

            return CartReadResult(items=envelope.items, status=ReadStatus.OK)

    def get_cart(self) -> List[CartItem]:
        return self.load().items

    def save(self, items: List[CartItem]) -> bool:
        """Write `items` with a fresh expiry and notify listeners."""
        with self._lock:
            now = self.clock()
            envelope = CartEnvelope(
                items=items,
                expiry=now + timedelta(days=self.expiry_days),
                updated_at=now
            )
            try:
                self.storage.set_item(self.storage_key, envelope.model_dump_json(by_alias=True))
            except Exception:
                logger.exception("Cart could not be saved")
                return False
            self._notify()
            return True

    def _notify(self) -> None:
        self.events.emit(self.event_name)

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Listen for cart changes; returns the unsubscribe callable."""
        return self.events.subscribe(self.event_name, listener)

    # Mutations

    def add_item(
        self,
        product: Union[ProductSnapshot, Dict[str, Any]],
        quantity: int = 1
    ) -> List[CartItem]:
        if not isinstance(product, ProductSnapshot):
            product = ProductSnapshot.model_validate(product)
        quantity = _whole_quantity(quantity)
        if quantity < 1:
            raise ValueError("Quantity must be at least 1")

        with self._lock:
            items = self.get_cart()
            existing = next((item for item in items if item.product_id == product.id), None)

            if existing:
                merged = min(existing.quantity + quantity, product.stock)
                if merged < 1:
                    items.remove(existing)
                    logger.info(f"Product {product.id} is out of stock, removed from cart")
                else:
                    existing.quantity = merged
                    existing.stock = product.stock
                    logger.info(f"Cart line {existing.id} for product {product.id} now at {existing.quantity}")
            else:
                clamped = min(quantity, product.stock)
                if clamped < 1:
                    logger.warning(f"Product {product.id} is out of stock, not added to cart")
                    return items
                now = self.clock()
                items.append(CartItem(
                    id=generate_item_id(now),
                    product_id=product.id,
                    name=product.name,
                    price=product.price,
                    quantity=clamped,
                    image=product.image,
                    category=product.category,
                    stock=product.stock,
                    created_at=now
                ))
                logger.info(f"Added to cart: product_id={product.id}, quantity={clamped}")

            self.save(items)
            return items

    def update_item_quantity(self, item_id: str, quantity: int) -> List[CartItem]:
        quantity = _whole_quantity(quantity)
        with self._lock:
            items = self.get_cart()
            item = next((ci for ci in items if ci.id == item_id), None)
            if item is None:
                return items

            clamped = min(quantity, item.stock)
            if clamped <= 0:
                items.remove(item)
                logger.info(f"Removed cart line {item_id} by setting quantity {quantity}")
            else:
                item.quantity = clamped
                logger.info(f"Updated cart line {item_id}: quantity={clamped}")

            self.save(items)
            return items

    def remove_item(self, item_id: str) -> List[CartItem]:
        with self._lock:
            items = self.get_cart()
            remaining = [ci for ci in items if ci.id != item_id]
            if len(remaining) == len(items):
                return items

            self.save(remaining)
            logger.info(f"Removed cart line {item_id}")
            return remaining

    def clear_cart(self) -> None:
        """Drop the stored cart and any pending checkout selection."""
        with self._lock:
            try:
                self.storage.remove_item(self.storage_key)
            except Exception:
                logger.exception("Cart could not be cleared")
                return
            try:
                self.storage.remove_item(self.checkout_key)
            except Exception:
                logger.exception("Checkout selection could not be cleared")
            logger.info("Cart cleared")
            self._notify()

    # Queries

    def get_total(self, items: Optional[Iterable[CartItem]] = None) -> Decimal:
        return calculate_total(self.get_cart() if items is None else items)

    def get_selected_total(self, item_ids: Iterable[str]) -> Decimal:
        selected = set(item_ids)
        return calculate_total(item for item in self.get_cart() if item.id in selected)

    def get_item_count(self) -> int:
        return sum(item.quantity for item in self.get_cart())

    def contains_product(self, product_id: str) -> bool:
        return any(item.product_id == str(product_id) for item in self.get_cart())

    def get_summary(self) -> CartSummary:
        with self._lock:
            items = self.get_cart()
        subtotal = calculate_total(items)
        return CartSummary(
            item_count=sum(item.quantity for item in items),
            subtotal=subtotal,
            formatted_subtotal=format_rupiah(subtotal),
            items=items
        )

    def validate_stock(self, items: Optional[Iterable[CartItem]] = None) -> StockValidation:
        return validate_cart_stock(self.get_cart() if items is None else items)
