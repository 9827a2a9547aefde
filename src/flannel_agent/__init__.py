"""flannel operator runtime helpers."""

from .config import OperatorSettings, load_config  # noqa: F401

__all__ = [
    "OperatorSettings",
    "load_config",
]
