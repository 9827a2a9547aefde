"""Error types raised by the flannel operator."""

from __future__ import annotations

from flannel_operatorkit.crd import AlreadyExistsError, is_already_exists  # noqa: F401


class InvalidConfigError(ValueError):
    """A required dependency was not supplied at construction time."""


class TransientBootError(RuntimeError):
    """A boot attempt failed and may be retried."""


class FatalBootError(RuntimeError):
    """The boot retry budget is exhausted.

    Only the process entry point should act on this, by exiting non-zero.
    """


def is_invalid_config(err: BaseException | None) -> bool:
    return isinstance(err, InvalidConfigError)


def is_fatal_boot(err: BaseException | None) -> bool:
    return isinstance(err, FatalBootError)


__all__ = [
    "AlreadyExistsError",
    "FatalBootError",
    "InvalidConfigError",
    "TransientBootError",
    "is_already_exists",
    "is_fatal_boot",
    "is_invalid_config",
]
