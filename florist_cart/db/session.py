from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from florist_cart.core.config import settings
from florist_cart.db.base import Base

engine = create_engine(settings.DATABASE_URL, echo=False)
SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)


def init_db(bind=None):
    """Create the storage tables if they do not exist yet."""
    Base.metadata.create_all(bind=bind or engine)
