import logging
import queue
import threading

import pytest

from flannel_operatorkit import Framework, ObjectDelete, ObjectUpdate, WatchError
from flannel_operatorkit.resources import Resource


class RecordingResource(Resource):
    def __init__(self, name: str, log: list):
        self.name = name
        self.log = log

    def on_update(self, obj):
        self.log.append((self.name, "update", obj))

    def on_delete(self, obj):
        self.log.append((self.name, "delete", obj))


class BrokenResource(Resource):
    def on_update(self, obj):
        raise RuntimeError("boom")

    def on_delete(self, obj):
        raise RuntimeError("boom")


def test_framework_dispatches_in_registration_order():
    log = []
    framework = Framework()
    framework.register("first", RecordingResource("first", log))
    framework.register("second", RecordingResource("second", log))

    framework.handle(ObjectUpdate("obj-a"))
    framework.handle(ObjectDelete("obj-a"))

    assert log == [
        ("first", "update", "obj-a"),
        ("second", "update", "obj-a"),
        ("first", "delete", "obj-a"),
        ("second", "delete", "obj-a"),
    ]


def test_framework_rejects_duplicate_registration():
    framework = Framework()
    resource = RecordingResource("r", [])

    framework.register("network", resource)

    with pytest.raises(ValueError):
        framework.register("network", resource)

    framework.unregister("network")
    framework.register("network", resource)
    assert list(framework.list_resources()) == ["network"]


def test_framework_rejects_unknown_events():
    with pytest.raises(TypeError):
        Framework().handle("not-an-event")  # type: ignore[arg-type]


def test_failing_resource_does_not_block_others(caplog):
    log = []
    framework = Framework()
    framework.register("broken", BrokenResource())
    framework.register("ok", RecordingResource("ok", log))

    with caplog.at_level(logging.ERROR):
        framework.handle(ObjectUpdate("obj"))

    assert log == [("ok", "update", "obj")]
    assert "resource broken failed to handle update" in caplog.text


def test_drain_consumes_all_streams(caplog):
    log = []
    framework = Framework()
    framework.register("r", RecordingResource("r", log))
    deletes, updates, errors = queue.Queue(), queue.Queue(), queue.Queue()
    updates.put("u1")
    updates.put("u2")
    deletes.put("d1")
    errors.put(WatchError("connection reset"))

    with caplog.at_level(logging.ERROR):
        handled = framework.drain(deletes, updates, errors)

    assert handled == 4
    assert log == [("r", "delete", "d1"), ("r", "update", "u1"), ("r", "update", "u2")]
    assert "connection reset" in caplog.text
    assert framework.drain(deletes, updates, errors) == 0


def test_process_events_stops_on_stop_event():
    log = []
    framework = Framework(poll_interval=0.01)
    framework.register("r", RecordingResource("r", log))
    deletes, updates, errors = queue.Queue(), queue.Queue(), queue.Queue()
    stop = threading.Event()

    worker = threading.Thread(
        target=framework.process_events,
        args=(deletes, updates, errors),
        kwargs={"stop_event": stop},
    )
    worker.start()
    updates.put("u1")

    for _ in range(500):
        if log:
            break
        stop.wait(0.01)
    stop.set()
    worker.join(5)

    assert not worker.is_alive()
    assert log == [("r", "update", "u1")]
