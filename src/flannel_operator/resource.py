"""Network resource handler registered with the framework.

For every flannel network object the handler computes the full set of
derived identifiers the manifests for that cluster are keyed on and keeps
the latest result per cluster. It never talks to the cluster API or the
host; builders further down the line read :meth:`NetworkResource.get_state`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import Lock
from typing import Dict, Optional, Sequence

from flannel_operatorkit.resources import Resource

from . import keys
from .flanneltpr import CustomObject
from .spec import ClusterSpec

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class NetworkState:
    """Derived identifiers of one cluster's overlay network."""

    cluster_id: str
    network_namespace: str
    destroyer_namespace: str
    bridge_name: str
    tap_name: str
    flannel_device: str
    interface_name: str
    env_file_path: str
    etcd_network_path: str
    etcd_network_config_path: str
    health_listen_address: str
    liveness_probe: keys.LivenessProbe
    dns_block: str
    ntp_block: str

    @classmethod
    def from_spec(cls, spec: ClusterSpec) -> "NetworkState":
        return cls(
            cluster_id=keys.cluster_id(spec),
            network_namespace=keys.network_namespace(spec),
            destroyer_namespace=keys.destroyer_namespace(spec),
            bridge_name=keys.network_bridge_name(spec),
            tap_name=keys.network_tap_name(spec),
            flannel_device=keys.network_flannel_device(spec),
            interface_name=keys.network_interface_name(spec),
            env_file_path=keys.network_env_file_path(spec),
            etcd_network_path=keys.etcd_network_path(spec),
            etcd_network_config_path=keys.etcd_network_config_path(spec),
            health_listen_address=keys.health_listen_address(spec),
            liveness_probe=keys.liveness_probe(spec),
            dns_block=keys.network_dns_block(spec),
            ntp_block=keys.network_ntp_block(spec),
        )


class NetworkResource(Resource):
    """Track the desired network state of every observed cluster."""

    def __init__(self) -> None:
        self._states: Dict[str, NetworkState] = {}
        self._lock = Lock()

    def on_update(self, obj: CustomObject) -> None:
        state = NetworkState.from_spec(obj.spec)
        with self._lock:
            previous = self._states.get(state.cluster_id)
            self._states[state.cluster_id] = state
        if previous == state:
            LOG.debug("cluster %s network unchanged", state.cluster_id)
            return
        LOG.info(
            "cluster %s network: namespace=%s bridge=%s device=%s",
            state.cluster_id,
            state.network_namespace,
            state.bridge_name,
            state.flannel_device,
        )

    def on_delete(self, obj: CustomObject) -> None:
        cluster = keys.cluster_id(obj.spec)
        with self._lock:
            state = self._states.pop(cluster, None)
        if state:
            LOG.info("removed cluster %s network (namespace=%s)", cluster, state.network_namespace)
        else:
            LOG.debug("delete for unknown cluster %s", cluster)

    def get_state(self, cluster_id: str) -> Optional[NetworkState]:
        with self._lock:
            return self._states.get(cluster_id)

    def list_states(self) -> Sequence[NetworkState]:
        with self._lock:
            return list(self._states.values())
