"""Operator boot supervisor.

The operator registers the flannel network resource type, opens a list/watch
over its objects and hands the resulting streams to the framework, which
then reconciles for the rest of the process lifetime. The whole sequence
runs at most once per :class:`Operator` and is wrapped in a backoff policy;
when the policy gives up, :meth:`Operator.boot` raises
:class:`FatalBootError` and leaves the exit decision to the entry point.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from threading import Event, Lock
from typing import Any, Callable, Optional

from kubernetes import client
from tenacity import RetryCallState, RetryError, Retrying, retry_if_exception_type

from flannel_operatorkit.crd import CRDRegistrar
from flannel_operatorkit.framework import Framework
from flannel_operatorkit.informer import Informer

from . import flanneltpr
from .errors import (
    FatalBootError,
    InvalidConfigError,
    TransientBootError,
    is_already_exists,
)

Notifier = Callable[[BaseException, float], None]


class BootState(enum.Enum):
    NOT_STARTED = "not-started"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class OperatorConfig:
    """Dependencies and settings used to create an :class:`Operator`.

    ``backoff``, ``informer``, ``k8s_client``, ``logger`` and ``framework``
    are mandatory. ``registrar`` defaults to a :class:`CRDRegistrar` for the
    flannel network type built on ``k8s_client``. ``stop_event`` is handed
    to the informer and the framework so the watch loop can be shut down.
    """

    backoff: Optional[Retrying] = None
    informer: Optional[Informer] = None
    k8s_client: Optional[Any] = None
    logger: Optional[logging.Logger] = None
    framework: Optional[Framework] = None

    registrar: Optional[CRDRegistrar] = None
    notifier: Optional[Notifier] = None
    stop_event: Optional[Event] = None
    namespace: str = ""
    establish_timeout: float = 60.0


_REQUIRED = ("backoff", "informer", "k8s_client", "logger", "framework")


class Operator:
    """Boot the flannel network watch exactly once."""

    def __init__(self, config: OperatorConfig) -> None:
        for name in _REQUIRED:
            if getattr(config, name) is None:
                raise InvalidConfigError(f"config.{name} must not be empty")

        registrar = config.registrar
        if registrar is None:
            registrar = CRDRegistrar(
                flanneltpr.DESCRIPTOR,
                client.ApiextensionsV1Api(config.k8s_client),
                establish_timeout=config.establish_timeout,
            )

        self._backoff = config.backoff
        self._informer = config.informer
        self._logger = config.logger
        self._framework = config.framework
        self._registrar = registrar
        self._notifier = config.notifier or self._log_retry
        self._stop_event = config.stop_event
        self._namespace = config.namespace

        self._mutex = Lock()
        self._done = Event()
        self._state = BootState.NOT_STARTED
        self._error: Optional[FatalBootError] = None

    @property
    def state(self) -> BootState:
        return self._state

    def boot(self) -> None:
        """Run the boot sequence once; every caller waits for its outcome.

        Returns once the sequence finished successfully (the framework
        stopped processing events). Raises the shared
        :class:`FatalBootError` when the backoff policy was exhausted.
        """

        with self._mutex:
            first = self._state is BootState.NOT_STARTED
            if first:
                self._state = BootState.RUNNING

        if first:
            try:
                self._boot_with_retries()
            except FatalBootError as exc:
                self._finish(BootState.FAILED, exc)
            else:
                self._finish(BootState.SUCCEEDED, None)
            finally:
                if self._state is BootState.RUNNING:
                    self._finish(BootState.FAILED, FatalBootError("operator boot interrupted"))

        self._done.wait()
        if self._error is not None:
            raise self._error

    def _finish(self, state: BootState, error: Optional[FatalBootError]) -> None:
        with self._mutex:
            self._state = state
            self._error = error
        self._done.set()

    def _boot_with_retries(self) -> None:
        retrying = self._backoff.copy(
            retry=retry_if_exception_type(TransientBootError),
            before_sleep=self._before_sleep,
            reraise=False,
        )
        try:
            retrying(self._boot_with_error)
        except RetryError as exc:
            err = exc.last_attempt.exception()
            self._logger.error(
                "stop operator boot retries due to too many errors: %r", err
            )
            raise FatalBootError(f"operator boot failed: {err}") from err

    def _before_sleep(self, retry_state: RetryCallState) -> None:
        err = retry_state.outcome.exception()
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        self._notifier(err, delay)

    def _log_retry(self, err: BaseException, delay: float) -> None:
        self._logger.warning(
            "retrying operator boot in %.2fs due to error: %r", delay, err
        )

    def _boot_with_error(self) -> None:
        try:
            self._registrar.create_and_wait()
        except Exception as exc:
            if not is_already_exists(exc):
                raise TransientBootError(f"registering custom resource: {exc}") from exc
            self._logger.debug("custom resource definition already exists")

        self._logger.debug("starting list/watch")

        try:
            delete_events, update_events, error_events = self._informer.watch(
                self._registrar.watch_endpoint(self._namespace),
                flanneltpr.ZERO_OBJECT_FACTORY,
                self._stop_event,
            )
        except Exception as exc:
            raise TransientBootError(f"opening list/watch: {exc}") from exc

        self._framework.process_events(
            delete_events,
            update_events,
            error_events,
            stop_event=self._stop_event,
        )
