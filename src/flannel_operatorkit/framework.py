"""Event processor dispatching informer streams to resource handlers."""

from __future__ import annotations

import logging
import queue
from threading import Event
from typing import Any, Dict, Optional

from .events import ObjectDelete, ObjectUpdate, WatchError
from .resources import Resource

LOG = logging.getLogger(__name__)


class Framework:
    """Dispatch object events to registered resource handlers.

    Handlers are invoked in registration order. A handler raising an
    exception is logged and skipped.
    """

    def __init__(self, poll_interval: float = 0.5) -> None:
        self._resources: Dict[str, Resource] = {}
        self._poll_interval = poll_interval

    def register(self, name: str, resource: Resource) -> None:
        if name in self._resources:
            raise ValueError(f"resource '{name}' already registered")
        self._resources[name] = resource

    def unregister(self, name: str) -> None:
        self._resources.pop(name, None)

    def handle(self, event: ObjectUpdate | ObjectDelete) -> None:
        if isinstance(event, ObjectUpdate):
            self._on_update(event)
        elif isinstance(event, ObjectDelete):
            self._on_delete(event)
        else:
            raise TypeError(f"Unsupported event type: {type(event)!r}")

    def _on_update(self, event: ObjectUpdate) -> None:
        for name, resource in self._resources.items():
            try:
                resource.on_update(event.obj)
            except Exception:
                LOG.exception("resource %s failed to handle update", name)

    def _on_delete(self, event: ObjectDelete) -> None:
        for name, resource in self._resources.items():
            try:
                resource.on_delete(event.obj)
            except Exception:
                LOG.exception("resource %s failed to handle delete", name)

    def process_events(
        self,
        delete_events: "queue.Queue[Any]",
        update_events: "queue.Queue[Any]",
        error_events: "queue.Queue[WatchError]",
        stop_event: Optional[Event] = None,
    ) -> None:
        """Consume the three informer streams until ``stop_event`` is set.

        Without a stop event the loop runs for the lifetime of the process.
        Each stream is drained in its own order; no ordering is implied
        between deletes, updates and errors.
        """

        stop = stop_event or Event()
        LOG.info("processing events for %d resources", len(self._resources))
        while not stop.is_set():
            handled = self.drain(delete_events, update_events, error_events)
            if not handled:
                stop.wait(self._poll_interval)
        LOG.info("event processing stopped")

    def drain(
        self,
        delete_events: "queue.Queue[Any]",
        update_events: "queue.Queue[Any]",
        error_events: "queue.Queue[WatchError]",
    ) -> int:
        """Handle every event currently queued and return how many there were."""

        handled = 0
        for obj in _pending(delete_events):
            self.handle(ObjectDelete(obj))
            handled += 1
        for obj in _pending(update_events):
            self.handle(ObjectUpdate(obj))
            handled += 1
        for err in _pending(error_events):
            LOG.error("watch stream reported an error: %s", err.message)
            handled += 1
        return handled

    def list_resources(self) -> Dict[str, Resource]:
        return dict(self._resources)


def _pending(events: "queue.Queue[Any]"):
    while True:
        try:
            yield events.get_nowait()
        except queue.Empty:
            return
