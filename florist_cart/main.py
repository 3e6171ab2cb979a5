import logging
from typing import Optional

from florist_cart.core.config import settings
from florist_cart.db.session import SessionLocal, init_db
from florist_cart.services.cart import CartStore
from florist_cart.services.checkout import CheckoutService
from florist_cart.services.events import CartEventBus
from florist_cart.services.storage import MemoryStorage, SQLStorage, StorageBackend

logger = logging.getLogger(__name__)


def configure_logging(level: Optional[str] = None):
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def create_cart_store(
    storage: Optional[StorageBackend] = None,
    client_id: Optional[str] = None,
    events: Optional[CartEventBus] = None
) -> CartStore:
    """
    Build the cart store for one application context.

    An explicit storage backend wins; otherwise a client id selects the SQL
    backend and no client id keeps the cart in memory.
    """
    if storage is None:
        if client_id:
            init_db()
            storage = SQLStorage(SessionLocal, client_id)
        else:
            storage = MemoryStorage()

    logger.info(f"Cart store ready with {type(storage).__name__} under key '{settings.CART_STORAGE_KEY}'")
    return CartStore(storage, events=events or CartEventBus())


def create_checkout_service(store: CartStore) -> CheckoutService:
    return CheckoutService(
        store,
        shipping_fee=settings.SHIPPING_FEE,
        free_shipping_threshold=settings.FREE_SHIPPING_THRESHOLD
    )
