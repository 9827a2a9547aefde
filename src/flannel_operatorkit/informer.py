"""List/watch informer turning cluster API events into three queues."""

from __future__ import annotations

import logging
import queue
from dataclasses import dataclass
from threading import Event, Thread
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from kubernetes import client, watch
from kubernetes.client.exceptions import ApiException

from .crd import WatchEndpoint
from .events import WatchError

LOG = logging.getLogger(__name__)

EventQueues = Tuple["queue.Queue[Any]", "queue.Queue[Any]", "queue.Queue[WatchError]"]


@dataclass(frozen=True)
class ZeroObjectFactory:
    """Decoders turning raw API payloads into typed objects.

    ``new_object`` receives a single object mapping, ``new_object_list`` the
    mapping returned by a list call. The list type must expose ``items`` and
    ``resource_version`` attributes and may expose ``errors``, a list of
    messages for items that failed to decode.
    """

    new_object: Callable[[Mapping[str, Any]], Any]
    new_object_list: Callable[[Mapping[str, Any]], Any]


class Informer:
    """Produce delete/update/error streams for a custom resource type.

    Parameters
    ----------
    api:
        A ``CustomObjectsApi`` instance used for list and watch calls.
    resync_period:
        Server side timeout of a single watch stream. The stream is reopened
        from the last seen resource version once it expires.
    stop_timeout:
        Upper bound on the server side timeout, and so on how long a quiet
        stream keeps the thread alive after the stop event is set.
    retry_interval:
        Pause between reconnect attempts after a failed list or watch.
    """

    def __init__(
        self,
        api: client.CustomObjectsApi,
        *,
        resync_period: float = 60.0,
        stop_timeout: float = 5.0,
        retry_interval: float = 1.0,
        watch_factory: Callable[[], watch.Watch] = watch.Watch,
    ) -> None:
        self._api = api
        self._resync_period = resync_period
        self._stop_timeout = stop_timeout
        self._retry_interval = retry_interval
        self._watch_factory = watch_factory

    def watch(
        self,
        endpoint: WatchEndpoint,
        factory: ZeroObjectFactory,
        stop_event: Optional[Event] = None,
    ) -> EventQueues:
        delete_events: "queue.Queue[Any]" = queue.Queue()
        update_events: "queue.Queue[Any]" = queue.Queue()
        error_events: "queue.Queue[WatchError]" = queue.Queue()

        thread = WatchThread(
            api=self._api,
            endpoint=endpoint,
            factory=factory,
            queues=(delete_events, update_events, error_events),
            stop_event=stop_event or Event(),
            resync_period=self._resync_period,
            stop_timeout=self._stop_timeout,
            retry_interval=self._retry_interval,
            watch_factory=self._watch_factory,
        )
        LOG.info(
            "starting list/watch for %s/%s %s (namespace=%r)",
            endpoint.group,
            endpoint.version,
            endpoint.plural,
            endpoint.namespace,
        )
        thread.start()
        return delete_events, update_events, error_events


class WatchThread(Thread):
    """Background list/watch loop feeding the informer queues."""

    def __init__(
        self,
        *,
        api: client.CustomObjectsApi,
        endpoint: WatchEndpoint,
        factory: ZeroObjectFactory,
        queues: EventQueues,
        stop_event: Event,
        resync_period: float,
        retry_interval: float,
        watch_factory: Callable[[], watch.Watch],
        stop_timeout: float = 5.0,
    ) -> None:
        super().__init__(daemon=True)
        self._api = api
        self._endpoint = endpoint
        self._factory = factory
        self._deletes, self._updates, self._errors = queues
        self._stop_event = stop_event
        self._resync_period = resync_period
        self._stop_timeout = stop_timeout
        self._retry_interval = retry_interval
        self._watch_factory = watch_factory
        self._resource_version: Optional[str] = None

    @property
    def resource_version(self) -> Optional[str]:
        return self._resource_version

    def run(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.run_once()
            except ApiException as exc:
                if exc.status == 410:
                    LOG.warning("watch resource version expired, re-listing")
                    self._resource_version = None
                self._errors.put(WatchError(f"watch failed: {exc.reason}", status=exc.status))
                self._stop_event.wait(self._retry_interval)
            except Exception as exc:  # pragma: no cover - logged below
                LOG.exception("informer encountered an error")
                self._errors.put(WatchError(str(exc)))
                self._stop_event.wait(self._retry_interval)

    def run_once(self) -> None:
        """List (when no resource version is known yet) and watch one stream."""

        if self._resource_version is None:
            self._list()

        watcher = self._watch_factory()
        stream = watcher.stream(
            self._list_func(),
            resource_version=self._resource_version,
            timeout_seconds=self.stream_timeout,
            **self._list_kwargs(),
        )
        for event in stream:
            if self._stop_event.is_set():
                watcher.stop()
                break
            self.handle_event(event)

    @property
    def stream_timeout(self) -> int:
        return max(1, int(min(self._resync_period, self._stop_timeout)))

    def _list(self) -> None:
        raw = self._list_func()(**self._list_kwargs())
        listing = self._factory.new_object_list(raw)
        for message in getattr(listing, "errors", None) or []:
            LOG.warning("failed to decode listed object %s", message)
            self._errors.put(WatchError(f"failed to decode object {message}"))
        for obj in listing.items:
            self._updates.put(obj)
        self._resource_version = listing.resource_version or None
        LOG.debug(
            "listed %d objects at resource version %s",
            len(listing.items),
            self._resource_version,
        )

    def handle_event(self, event: Dict[str, Any]) -> None:
        event_type = str(event.get("type", ""))
        raw = event.get("raw_object") or event.get("object") or {}

        if event_type == "ERROR":
            status = raw if isinstance(raw, dict) else {}
            code = status.get("code")
            if code == 410:
                self._resource_version = None
            self._errors.put(
                WatchError(str(status.get("message", "watch error")), status=code)
            )
            return

        version = _resource_version_of(raw)
        if version:
            self._resource_version = version

        if event_type == "BOOKMARK":
            return

        try:
            obj = self._factory.new_object(raw)
        except (KeyError, TypeError, ValueError) as exc:
            LOG.warning("failed to decode %s event: %s", event_type, exc)
            self._errors.put(WatchError(f"failed to decode object: {exc}"))
            return

        if event_type in ("ADDED", "MODIFIED"):
            self._updates.put(obj)
        elif event_type == "DELETED":
            self._deletes.put(obj)
        else:
            LOG.debug("ignoring watch event of type %r", event_type)

    def _list_func(self) -> Callable[..., Any]:
        if self._endpoint.cluster_wide:
            return self._api.list_cluster_custom_object
        return self._api.list_namespaced_custom_object

    def _list_kwargs(self) -> Dict[str, str]:
        kwargs = {
            "group": self._endpoint.group,
            "version": self._endpoint.version,
            "plural": self._endpoint.plural,
        }
        if not self._endpoint.cluster_wide:
            kwargs["namespace"] = self._endpoint.namespace
        return kwargs


def _resource_version_of(raw: Any) -> Optional[str]:
    if not isinstance(raw, dict):
        return None
    metadata = raw.get("metadata") or {}
    return metadata.get("resourceVersion")
