"""
Session event bus.

The shell layer (theme sync, navigation refresh, UI badges) subscribes
here instead of polling the SessionStore. Delivery is synchronous, on the
publisher's thread, in subscription order. A failing handler is logged
and skipped; the session change it reacts to has already happened.
"""

import logging
from typing import Callable, Dict, List

from auth.events import SessionEvent

logger = logging.getLogger(__name__)

Handler = Callable[[SessionEvent], None]


class EventBus:
    """Pub/sub keyed by event class name, e.g. 'SessionEnded'."""

    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = {}

    def subscribe(self, event_type: str, callback: Handler) -> Callable[[], None]:
        """
        Register `callback` for events named `event_type`.

        Returns:
            Unsubscribe function; calling it more than once is harmless.
        """
        self._handlers.setdefault(event_type, []).append(callback)

        def unsubscribe() -> None:
            handlers = self._handlers.get(event_type, [])
            if callback in handlers:
                handlers.remove(callback)

        return unsubscribe

    def publish(self, event: SessionEvent) -> None:
        """Deliver `event` to every handler subscribed to its class name."""
        event_type = type(event).__name__

        # Copy so handlers may unsubscribe while being called
        for handler in list(self._handlers.get(event_type, [])):
            try:
                handler(event)
            except Exception:
                logger.exception(
                    "Session event handler %s failed for %s (event_id=%s)",
                    getattr(handler, "__name__", repr(handler)),
                    event_type,
                    event.event_id,
                )
