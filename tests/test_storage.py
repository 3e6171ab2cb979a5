import pytest
from sqlalchemy import select

from florist_cart.db.models import StorageEntry
from florist_cart.schemas.cart import ReadStatus
from florist_cart.services.cart import CartStore
from florist_cart.services.storage import MemoryStorage, SQLStorage


def test_memory_storage_basic_operations():
    storage = MemoryStorage()

    assert storage.get_item("florist_cart") is None
    storage.set_item("florist_cart", "[]")
    assert storage.get_item("florist_cart") == "[]"
    storage.remove_item("florist_cart")
    storage.remove_item("florist_cart")
    assert storage.get_item("florist_cart") is None


def test_memory_storage_wraps_session_mapping(rose, clock):
    session = {"user": "guest"}
    store = CartStore(MemoryStorage(session), clock=clock)

    store.add_item(rose)

    assert "florist_cart" in session
    assert session["user"] == "guest"


def test_sql_storage_requires_client_id(session_factory):
    with pytest.raises(ValueError, match="client_id"):
        SQLStorage(session_factory, "")


def test_sql_storage_set_get_remove(session_factory):
    storage = SQLStorage(session_factory, "client-1")

    storage.set_item("florist_cart", "first")
    storage.set_item("florist_cart", "second")

    assert storage.get_item("florist_cart") == "second"

    with session_factory() as db:
        rows = db.execute(select(StorageEntry)).scalars().all()
    assert len(rows) == 1
    assert rows[0].client_id == "client-1"

    storage.remove_item("florist_cart")
    assert storage.get_item("florist_cart") is None


def test_sql_storage_is_scoped_per_client(session_factory):
    alice = SQLStorage(session_factory, "alice")
    bob = SQLStorage(session_factory, "bob")

    alice.set_item("florist_cart", "alice-cart")

    assert bob.get_item("florist_cart") is None
    bob.remove_item("florist_cart")
    assert alice.get_item("florist_cart") == "alice-cart"


def test_cart_store_over_sql_storage(session_factory, rose, lily, clock):
    store = CartStore(SQLStorage(session_factory, "client-1"), clock=clock)
    store.add_item(rose, 2)
    store.add_item(lily)

    reopened = CartStore(SQLStorage(session_factory, "client-1"), clock=clock)
    result = reopened.load()

    assert result.status == ReadStatus.OK
    assert [item.product_id for item in result.items] == ["p1", "p2"]
    assert reopened.get_total() == 200000

    reopened.clear_cart()
    assert store.get_cart() == []


class BrokenStorage(MemoryStorage):
    def get_item(self, key):
        raise OSError("disk unavailable")

    def set_item(self, key, value):
        raise OSError("disk full")


def test_unreadable_storage_reads_empty(clock):
    store = CartStore(BrokenStorage(), clock=clock)

    result = store.load()

    assert result.items == []
    assert result.status == ReadStatus.UNAVAILABLE
    assert "disk unavailable" in result.reason


def test_failed_write_does_not_notify(clock):
    store = CartStore(BrokenStorage(), clock=clock)
    calls = []
    store.subscribe(lambda: calls.append(1))

    assert store.save([]) is False
    assert calls == []
