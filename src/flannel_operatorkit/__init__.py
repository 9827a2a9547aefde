"""Operator building blocks independent of any custom resource type.

* :mod:`.crd` registers a custom resource definition and waits for it to be
  established.
* :mod:`.informer` lists and watches custom objects into delete, update and
  error queues.
* :mod:`.framework` dispatches queued events to registered resource handlers.
"""

from .events import ObjectDelete, ObjectUpdate, WatchError  # noqa: F401
from .framework import Framework  # noqa: F401

__all__ = [
    "Framework",
    "ObjectDelete",
    "ObjectUpdate",
    "WatchError",
]
