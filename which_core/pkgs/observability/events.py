"""In-process event bus used to report run and batch progress."""

import logging
import threading
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

RUN_COMPLETED = "run.completed"
BATCH_PROGRESS = "batch.progress"
BATCH_COMPLETED = "batch.completed"


class EventBus:
    """Publish/subscribe by event name.

    A failing subscriber is logged and skipped; it never breaks the
    publisher.
    """

    def __init__(self):
        self.listeners: Dict[str, List[Callable[[Any], None]]] = {}
        self._lock = threading.Lock()

    def subscribe(self, event_type: str, callback: Callable[[Any], None]):
        with self._lock:
            self.listeners.setdefault(event_type, []).append(callback)
        logger.debug(f"Subscribed to event: {event_type}")

    def publish(self, event_type: str, data: Any = None):
        with self._lock:
            callbacks = list(self.listeners.get(event_type, []))
        for callback in callbacks:
            try:
                callback(data)
            except Exception as e:
                logger.error(f"Error in event callback for {event_type}: {e}")
