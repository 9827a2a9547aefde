"""Resource handler interface exposed to the framework."""

from .base import Resource  # noqa: F401

__all__ = ["Resource"]
