"""Cluster specification carried by flannel network custom objects.

These frozen dataclasses describe one guest cluster's overlay network as
declared in the custom object's ``spec``. They are read-only input for the
key derivation helpers in :mod:`flannel_operator.keys`; nothing in the
operator mutates them.
"""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence


@dataclass(frozen=True)
class ClusterIdentity:
    """Tenant identity of a guest cluster.

    Attributes
    ----------
    customer:
        Owner of the cluster.
    id:
        Canonical short identifier used in every derived name.
    namespace:
        Namespace in which the cluster's own resources live.
    """

    customer: str
    id: str
    namespace: str = ""


@dataclass(frozen=True)
class FlannelSpec:
    docker_image: str
    run_dir: str
    vni: int
    network: str = ""
    subnet_len: int = 0


@dataclass(frozen=True)
class BridgeSpec:
    docker_image: str
    private_network: str
    interface: str
    dns: Sequence[str] = ()
    ntp: Sequence[str] = ()


@dataclass(frozen=True)
class HealthSpec:
    docker_image: str


@dataclass(frozen=True)
class ClusterSpec:
    """Network configuration of a single guest cluster."""

    cluster: ClusterIdentity
    flannel: FlannelSpec
    bridge: BridgeSpec
    health: HealthSpec

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "ClusterSpec":
        """Parse the ``spec`` mapping of a flannel network custom object."""

        if not isinstance(raw, Mapping):
            raise ValueError("cluster spec must be a mapping")
        return cls(
            cluster=_parse_cluster(_section(raw, "cluster")),
            flannel=_parse_flannel(_section(raw, "flannel")),
            bridge=_parse_bridge(_section(raw, "bridge")),
            health=HealthSpec(docker_image=_docker_image(_section(raw, "health"))),
        )


def _section(raw: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = raw.get(key) or {}
    if not isinstance(value, Mapping):
        raise ValueError(f"'{key}' must be a mapping")
    return value


def _text(section: Mapping[str, Any], key: str) -> str:
    value = section.get(key)
    if value is None:
        return ""
    return str(value)


def _integer(section: Mapping[str, Any], key: str, path: str) -> int:
    value = section.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"'{path}' must be an integer, got {value!r}")
    return value


def _docker_image(section: Mapping[str, Any]) -> str:
    return _text(_section(section, "docker"), "image")


def _parse_cluster(section: Mapping[str, Any]) -> ClusterIdentity:
    if section.get("id") is None:
        raise ValueError("cluster spec missing 'cluster.id'")
    return ClusterIdentity(
        customer=_text(section, "customer"),
        id=str(section["id"]),
        namespace=_text(section, "namespace"),
    )


def _parse_flannel(section: Mapping[str, Any]) -> FlannelSpec:
    spec = _section(section, "spec")
    if spec.get("vni") is None:
        raise ValueError("cluster spec missing 'flannel.spec.vni'")
    vni = _integer(spec, "vni", "flannel.spec.vni")
    if vni < 0:
        raise ValueError(f"'flannel.spec.vni' must not be negative, got {vni}")
    subnet_len = 0
    if spec.get("subnetLen") is not None:
        subnet_len = _integer(spec, "subnetLen", "flannel.spec.subnetLen")
    return FlannelSpec(
        docker_image=_docker_image(section),
        run_dir=_text(spec, "runDir"),
        vni=vni,
        network=_text(spec, "network"),
        subnet_len=subnet_len,
    )


def _parse_bridge(section: Mapping[str, Any]) -> BridgeSpec:
    spec = _section(section, "spec")
    return BridgeSpec(
        docker_image=_docker_image(section),
        private_network=_text(spec, "privateNetwork"),
        interface=_text(spec, "interface"),
        dns=tuple(_normalise_address(s) for s in _servers(spec, "dns")),
        ntp=tuple(str(s) for s in _servers(spec, "ntp")),
    )


def _servers(spec: Mapping[str, Any], key: str) -> Iterable[Any]:
    servers = _section(spec, key).get("servers") or []
    if not isinstance(servers, list):
        raise ValueError(f"'bridge.spec.{key}.servers' must be a list")
    return servers


def _normalise_address(value: Any) -> str:
    try:
        return str(ipaddress.ip_address(str(value)))
    except ValueError as exc:
        raise ValueError(f"invalid DNS server address '{value}'") from exc
