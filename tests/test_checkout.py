import json

import pytest

from florist_cart.services.checkout import CheckoutError, CheckoutService


@pytest.fixture
def checkout(store):
    return CheckoutService(store)


def test_prepare_selected_items(checkout, store, storage, rose, lily):
    rose_id = store.add_item(rose, 2)[0].id
    store.add_item(lily, 1)

    data = checkout.prepare([rose_id])

    assert [item.product_id for item in data.items] == ["p1"]
    assert data.subtotal == 100000
    assert data.shipping_fee == 15000
    assert data.voucher_discount == 0
    assert data.total == 115000
    assert data.voucher_data is None

    stored = json.loads(storage.get_item("checkout_items"))
    assert stored["shippingFee"] == 15000
    assert stored["items"][0]["productId"] == "p1"


def test_prepare_with_voucher_and_free_shipping(checkout, store, rose, lily):
    ids = [store.add_item(lily, 5)[-1].id, store.add_item(rose, 1)[-1].id]
    voucher = {"id": "v1", "code": "SPRING10", "type": "PERCENTAGE", "discount": 10, "maxDiscount": 20000}

    data = checkout.prepare(ids, voucher)

    assert data.subtotal == 550000
    assert data.shipping_fee == 0
    assert data.voucher_discount == 20000
    assert data.total == 530000
    assert data.voucher_data.code == "SPRING10"
    assert data.voucher_data.discount_amount == 20000


def test_prepare_drops_voucher_below_minimum(checkout, store, rose):
    item_id = store.add_item(rose)[0].id
    voucher = {"code": "BIG", "type": "FIXED", "discount": 50000, "minPurchase": 200000}

    data = checkout.prepare([item_id], voucher)

    assert data.voucher_data is None
    assert data.voucher_discount == 0
    assert data.total == 65000


def test_prepare_requires_selection(checkout, store, rose):
    store.add_item(rose)

    with pytest.raises(CheckoutError, match="minimal satu produk"):
        checkout.prepare([])

    with pytest.raises(CheckoutError):
        checkout.prepare(["unknown"])


def test_prepare_rejects_insufficient_stock(checkout, store):
    store.storage.set_item("florist_cart", json.dumps({
        "items": [{"id": "cart_1", "productId": "p1", "name": "Rose", "price": 50000,
                   "quantity": 5, "image": "", "category": "Bouquet", "stock": 3}],
        "expiry": "2030-01-01T00:00:00Z",
        "updatedAt": "2025-03-10T08:00:00Z"
    }))

    with pytest.raises(CheckoutError, match="Rose"):
        checkout.prepare(["cart_1"])


def test_load_round_trips_prepared_data(checkout, store, rose):
    item_id = store.add_item(rose, 3)[0].id
    data = checkout.prepare([item_id])

    assert checkout.load() == data


def test_load_tolerates_missing_or_broken_data(checkout, storage):
    assert checkout.load() is None

    storage.set_item("checkout_items", "{oops")
    assert checkout.load() is None


def test_complete_clears_cart_and_handoff(checkout, store, storage, rose):
    item_id = store.add_item(rose)[0].id
    checkout.prepare([item_id])
    notified = []
    store.subscribe(lambda: notified.append(True))

    checkout.complete()

    assert store.get_cart() == []
    assert storage.get_item("checkout_items") is None
    assert notified == [True]
