"""Entry point for the flannel operator."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from pathlib import Path
from threading import Event

from kubernetes import client
from kubernetes import config as kube_config

from flannel_operator import Operator, OperatorConfig
from flannel_operator.backoff import new_exponential_backoff
from flannel_operator.errors import FatalBootError
from flannel_operator.resource import NetworkResource
from flannel_operatorkit.framework import Framework
from flannel_operatorkit.informer import Informer

from .config import OperatorSettings, load_config

LOG = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )


def _load_kubernetes(settings: OperatorSettings) -> client.ApiClient:
    if settings.kubernetes.in_cluster:
        kube_config.load_incluster_config()
    else:
        kube_config.load_kube_config(
            config_file=str(settings.kubernetes.kubeconfig),
            context=settings.kubernetes.context,
        )
    return client.ApiClient()


def build_operator(settings: OperatorSettings, stop_event: Event) -> Operator:
    api_client = _load_kubernetes(settings)

    framework = Framework(poll_interval=settings.informer.poll_interval)
    framework.register("network", NetworkResource())

    informer = Informer(
        client.CustomObjectsApi(api_client),
        resync_period=settings.informer.resync_period,
        stop_timeout=settings.informer.stop_timeout,
    )

    backoff = new_exponential_backoff(
        max_elapsed_time=settings.backoff.max_elapsed_time,
        max_attempts=settings.backoff.max_attempts,
        initial_interval=settings.backoff.initial_interval,
        max_interval=settings.backoff.max_interval,
        multiplier=settings.backoff.multiplier,
    )

    return Operator(
        OperatorConfig(
            backoff=backoff,
            informer=informer,
            k8s_client=api_client,
            logger=logging.getLogger("flannel_operator"),
            framework=framework,
            stop_event=stop_event,
            namespace=settings.kubernetes.namespace,
            establish_timeout=settings.establish_timeout,
        )
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run the flannel operator")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to the operator configuration file "
        "(default: /etc/flannel-operator/config.yaml if present)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    settings = load_config(args.config)
    stop_event = Event()

    def _shutdown(signum, frame):  # pragma: no cover - signal handler
        LOG.info("received signal %s, shutting down", signum)
        stop_event.set()

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    operator = build_operator(settings, stop_event)
    try:
        operator.boot()
    except FatalBootError:
        return 1

    LOG.info("flannel operator stopped")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
