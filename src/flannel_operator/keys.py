"""Names, paths and config blocks derived from a cluster specification.

Every helper here is a plain function of :class:`ClusterSpec`. The outputs
are consumed verbatim by the manifests that materialise a cluster's network
(namespaces, bridge/tap/flannel devices, etcd keys, env files and liveness
probes), so the formats must not drift. Nothing is cached.
"""

from __future__ import annotations

from dataclasses import dataclass

from .spec import ClusterSpec

# App label of resources running the flannel components.
NETWORK_APP = "flannel-network"
# App label of resources cleaning up flannel networks and bridges.
DESTROYER_APP = "flannel-destroyer"

# Liveness probe configuration.
PORT_BASE = 21000
HEALTH_ENDPOINT = "/healthz"
PROBE_HOST = "127.0.0.1"
INITIAL_DELAY_SECONDS = 10
TIMEOUT_SECONDS = 5
PERIOD_SECONDS = 10
FAILURE_THRESHOLD = 2
SUCCESS_THRESHOLD = 1


@dataclass(frozen=True)
class LivenessProbe:
    """HTTP liveness probe served by the health container."""

    host: str
    port: int
    path: str = HEALTH_ENDPOINT
    initial_delay_seconds: int = INITIAL_DELAY_SECONDS
    timeout_seconds: int = TIMEOUT_SECONDS
    period_seconds: int = PERIOD_SECONDS
    failure_threshold: int = FAILURE_THRESHOLD
    success_threshold: int = SUCCESS_THRESHOLD


def network_namespace(spec: ClusterSpec) -> str:
    """Namespace the cluster's flannel network components run in."""

    return NETWORK_APP + "-" + cluster_id(spec)


def destroyer_namespace(spec: ClusterSpec) -> str:
    """Namespace the cleanup jobs for the cluster's network run in."""

    return DESTROYER_APP + "-" + cluster_id(spec)


def cluster_customer(spec: ClusterSpec) -> str:
    return spec.cluster.customer


def cluster_id(spec: ClusterSpec) -> str:
    return spec.cluster.id


def cluster_name(spec: ClusterSpec) -> str:
    return cluster_id(spec)


def cluster_namespace(spec: ClusterSpec) -> str:
    return spec.cluster.namespace


def etcd_network_config_path(spec: ClusterSpec) -> str:
    return etcd_network_path(spec) + "/config"


def etcd_network_path(spec: ClusterSpec) -> str:
    return "coreos.com/network/" + network_bridge_name(spec)


def flannel_docker_image(spec: ClusterSpec) -> str:
    return spec.flannel.docker_image


def flannel_run_dir(spec: ClusterSpec) -> str:
    return spec.flannel.run_dir


def health_listen_address(spec: ClusterSpec) -> str:
    return "http://" + PROBE_HOST + ":" + str(liveness_port(spec))


def host_private_network(spec: ClusterSpec) -> str:
    return spec.bridge.private_network


def liveness_port(spec: ClusterSpec) -> int:
    return PORT_BASE + spec.flannel.vni


def liveness_probe(spec: ClusterSpec) -> LivenessProbe:
    return LivenessProbe(host=PROBE_HOST, port=liveness_port(spec))


def network_bridge_docker_image(spec: ClusterSpec) -> str:
    return spec.bridge.docker_image


def network_health_docker_image(spec: ClusterSpec) -> str:
    return spec.health.docker_image


def network_bridge_name(spec: ClusterSpec) -> str:
    return "br-" + cluster_id(spec)


def network_dns_block(spec: ClusterSpec) -> str:
    """Render ``DNS=`` lines for the bridge's systemd-networkd config.

    One line per server in declaration order; no servers gives ``""``.
    """

    return "\n".join(f"DNS={server}" for server in spec.bridge.dns)


def network_env_file_path(spec: ClusterSpec) -> str:
    return f"{flannel_run_dir(spec)}/networks/{network_bridge_name(spec)}.env"


def network_flannel_device(spec: ClusterSpec) -> str:
    return f"flannel.{spec.flannel.vni}"


def network_interface_name(spec: ClusterSpec) -> str:
    return spec.bridge.interface


def network_ntp_block(spec: ClusterSpec) -> str:
    return "\n".join(f"NTP={server}" for server in spec.bridge.ntp)


def network_tap_name(spec: ClusterSpec) -> str:
    return "tap-" + cluster_id(spec)
