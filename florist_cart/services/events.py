import logging
from collections import defaultdict
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class CartEventBus:
    """
    Synchronous named-signal dispatcher.

    Signals carry no payload; listeners re-query the store. A listener that
    raises is logged and skipped so the remaining listeners still run.
    """

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = defaultdict(list)

    def subscribe(self, event: str, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        self._listeners[event].append(listener)

        def unsubscribe() -> None:
            self.unsubscribe(event, listener)

        return unsubscribe

    def unsubscribe(self, event: str, listener: Listener) -> bool:
        listeners = self._listeners.get(event, [])
        if listener in listeners:
            listeners.remove(listener)
            return True
        return False

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    def emit(self, event: str) -> int:
        """Call every listener of `event` once, returning how many completed."""
        delivered = 0
        for listener in list(self._listeners.get(event, [])):
            try:
                listener()
                delivered += 1
            except Exception:
                logger.exception(f"Listener {listener!r} failed while handling '{event}'")
        return delivered
