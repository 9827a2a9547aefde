"""Event primitives passed from the informer to the framework."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class ObjectUpdate:
    """An object was added or modified.

    The informer does not distinguish between the two: handlers are expected
    to reconcile the full object every time they see it.
    """

    obj: Any


@dataclass(frozen=True)
class ObjectDelete:
    """Signals that an object was removed from the cluster."""

    obj: Any


@dataclass(frozen=True)
class WatchError:
    """Stream level failure (lost connection, expired resource version...)."""

    message: str
    status: Optional[int] = None
