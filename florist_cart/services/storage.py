"""
Client-scoped key/value storage backends for the cart.

Every backend exposes the same three operations as browser localStorage:
get_item, set_item and remove_item, all on string values.
"""
import logging
from abc import ABC, abstractmethod
from typing import MutableMapping, Optional

from sqlalchemy import select, delete
from sqlalchemy.orm import Session, sessionmaker

from florist_cart.db.models import StorageEntry

logger = logging.getLogger(__name__)


class StorageBackend(ABC):

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored string or None when the key is absent."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store `value` under `key`, replacing any previous value."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete `key`. Removing a missing key is not an error."""


class MemoryStorage(StorageBackend):
    """
    Storage over a mutable mapping.

    Without an argument it keeps its own dict. Passing a server-side session
    mapping (for example Starlette's `request.session`) scopes the cart to that
    session.
    """

    def __init__(self, data: Optional[MutableMapping[str, str]] = None):
        self.data = data if data is not None else {}

    def get_item(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove_item(self, key: str) -> None:
        self.data.pop(key, None)


class SQLStorage(StorageBackend):
    """Durable storage in the `cart_storage` table, one row per (client_id, key)."""

    def __init__(self, session_factory: sessionmaker, client_id: str):
        if not client_id:
            raise ValueError("client_id is required")
        self.session_factory = session_factory
        self.client_id = client_id

    def _find(self, db: Session, key: str) -> Optional[StorageEntry]:
        result = db.execute(
            select(StorageEntry).where(
                StorageEntry.client_id == self.client_id,
                StorageEntry.key == key
            )
        )
        return result.scalar_one_or_none()

    def get_item(self, key: str) -> Optional[str]:
        with self.session_factory() as db:
            entry = self._find(db, key)
            return entry.value if entry else None

    def set_item(self, key: str, value: str) -> None:
        with self.session_factory() as db:
            entry = self._find(db, key)
            if entry:
                entry.value = value
            else:
                db.add(StorageEntry(client_id=self.client_id, key=key, value=value))
            db.commit()
        logger.debug(f"Stored '{key}' for client {self.client_id}")

    def remove_item(self, key: str) -> None:
        with self.session_factory() as db:
            db.execute(
                delete(StorageEntry).where(
                    StorageEntry.client_id == self.client_id,
                    StorageEntry.key == key
                )
            )
            db.commit()
        logger.debug(f"Removed '{key}' for client {self.client_id}")
