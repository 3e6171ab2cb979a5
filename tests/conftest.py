from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from florist_cart.db.base import Base
from florist_cart.schemas.cart import ProductSnapshot
from florist_cart.services.cart import CartStore
from florist_cart.services.events import CartEventBus
from florist_cart.services.storage import MemoryStorage


DATABASE_URL = "sqlite:///:memory:"


class FrozenClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def engine():
    engine = create_engine(
        DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def clock():
    return FrozenClock(datetime(2025, 3, 10, 8, 0, tzinfo=timezone.utc))


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def events():
    return CartEventBus()


@pytest.fixture
def store(storage, events, clock):
    return CartStore(storage, events=events, clock=clock)


@pytest.fixture
def rose():
    return ProductSnapshot(
        id="p1",
        name="Rose",
        price=50000,
        image="/uploads/products/rose.jpg",
        category="Bouquet",
        stock=3
    )


@pytest.fixture
def lily():
    return ProductSnapshot(
        id="p2",
        name="Lily",
        price=100000,
        image="/uploads/products/lily.jpg",
        category="Vase",
        stock=10
    )
