"""YAML configuration loader for the flannel operator."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

DEFAULT_CONFIG_PATH = Path("/etc/flannel-operator/config.yaml")


@dataclass
class KubernetesConfig:
    kubeconfig: Optional[Path] = None
    context: Optional[str] = None
    namespace: str = ""

    @property
    def in_cluster(self) -> bool:
        return self.kubeconfig is None


@dataclass
class BackoffConfig:
    max_elapsed_time: float = 300.0
    max_attempts: int = 0
    initial_interval: float = 0.5
    max_interval: float = 60.0
    multiplier: float = 2.0


@dataclass
class InformerConfig:
    resync_period: float = 60.0
    stop_timeout: float = 5.0
    poll_interval: float = 0.5


@dataclass
class OperatorSettings:
    kubernetes: KubernetesConfig = field(default_factory=KubernetesConfig)
    backoff: BackoffConfig = field(default_factory=BackoffConfig)
    informer: InformerConfig = field(default_factory=InformerConfig)
    establish_timeout: float = 60.0


def _mapping(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    section = data.get(key) or {}
    if not isinstance(section, dict):
        raise ValueError(f"'{key}' section must be a mapping")
    return section


def _number(section: Mapping[str, Any], key: str, default: float) -> float:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"'{key}' must be a number, got {value!r}")
    if value < 0:
        raise ValueError(f"'{key}' must not be negative")
    return float(value)


def _parse_kubernetes(section: Mapping[str, Any]) -> KubernetesConfig:
    kubeconfig = section.get("kubeconfig")
    context = section.get("context")
    return KubernetesConfig(
        kubeconfig=Path(kubeconfig) if kubeconfig else None,
        context=str(context) if context else None,
        namespace=str(section.get("namespace") or ""),
    )


def _parse_backoff(section: Mapping[str, Any]) -> BackoffConfig:
    defaults = BackoffConfig()
    return BackoffConfig(
        max_elapsed_time=_number(section, "max_elapsed_time", defaults.max_elapsed_time),
        max_attempts=int(_number(section, "max_attempts", defaults.max_attempts)),
        initial_interval=_number(section, "initial_interval", defaults.initial_interval),
        max_interval=_number(section, "max_interval", defaults.max_interval),
        multiplier=_number(section, "multiplier", defaults.multiplier),
    )


def _parse_informer(section: Mapping[str, Any]) -> InformerConfig:
    defaults = InformerConfig()
    return InformerConfig(
        resync_period=_number(section, "resync_period", defaults.resync_period),
        stop_timeout=_number(section, "stop_timeout", defaults.stop_timeout),
        poll_interval=_number(section, "poll_interval", defaults.poll_interval),
    )


def load_config(path: Optional[Path]) -> OperatorSettings:
    """Load operator settings from ``path``.

    A missing default config file yields the built-in defaults; an explicitly
    requested file must exist.
    """

    if path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return OperatorSettings()
        path = DEFAULT_CONFIG_PATH

    data = yaml.safe_load(path.read_text())
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("Operator configuration must be a mapping")

    crd_section = _mapping(data, "crd")
    return OperatorSettings(
        kubernetes=_parse_kubernetes(_mapping(data, "kubernetes")),
        backoff=_parse_backoff(_mapping(data, "backoff")),
        informer=_parse_informer(_mapping(data, "informer")),
        establish_timeout=_number(crd_section, "establish_timeout", 60.0),
    )
