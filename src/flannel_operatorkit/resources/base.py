"""Abstract interface for resource handlers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class Resource(ABC):
    """Base class for handlers managed by :class:`Framework`."""

    @abstractmethod
    def on_update(self, obj: Any) -> None:
        """Reconcile ``obj`` as the desired state."""

    @abstractmethod
    def on_delete(self, obj: Any) -> None:
        """Remove any state associated with ``obj``."""
