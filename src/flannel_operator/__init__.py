"""Flannel network operator.

This package hosts the operator that manages per-cluster flannel overlay
networks. It is split into a handful of small modules:

* :mod:`flannel_operator.spec` models the cluster specification carried by
  flannel network custom objects;
* :mod:`flannel_operator.keys` derives the namespaces, device names, etcd
  paths, env files, liveness settings and DNS/NTP blocks other components
  key on;
* :mod:`flannel_operator.operator` boots the custom resource registration
  and the list/watch exactly once, under a backoff policy; and
* :mod:`flannel_operator.resource` turns observed objects into derived
  network state.

The key derivation helpers are pure functions, so they can be exercised in
CI without a cluster.
"""

from .operator import Operator, OperatorConfig  # noqa: F401
from .spec import ClusterSpec  # noqa: F401

__all__ = ["ClusterSpec", "Operator", "OperatorConfig"]
