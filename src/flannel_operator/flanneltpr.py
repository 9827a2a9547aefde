"""The flannel network custom resource type."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping

from flannel_operatorkit.crd import ResourceDescriptor
from flannel_operatorkit.informer import ZeroObjectFactory

from .spec import ClusterSpec

GROUP = "giantswarm.io"
VERSION = "v1"
KIND = "FlannelNetwork"
PLURAL = "flannelnetworks"
DESCRIPTION = "Managed flannel network of Giant Swarm guest clusters."

DESCRIPTOR = ResourceDescriptor(
    group=GROUP,
    version=VERSION,
    kind=KIND,
    plural=PLURAL,
    description=DESCRIPTION,
)


@dataclass(frozen=True)
class CustomObject:
    name: str
    namespace: str
    spec: ClusterSpec
    resource_version: str = ""

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "CustomObject":
        if not isinstance(raw, Mapping):
            raise ValueError("custom object must be a mapping")
        metadata = raw.get("metadata") or {}
        return cls(
            name=str(metadata.get("name") or ""),
            namespace=str(metadata.get("namespace") or ""),
            spec=ClusterSpec.from_dict(raw.get("spec") or {}),
            resource_version=str(metadata.get("resourceVersion") or ""),
        )


@dataclass(frozen=True)
class CustomObjectList:
    """Decoded list response.

    Items are decoded one by one; an item that fails to decode is reported in
    ``errors`` and left out of ``items``.
    """

    items: List[CustomObject] = field(default_factory=list)
    resource_version: str = ""
    errors: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "CustomObjectList":
        if not isinstance(raw, Mapping):
            raise ValueError("custom object list must be a mapping")
        metadata = raw.get("metadata") or {}
        items: List[CustomObject] = []
        errors: List[str] = []
        for item in raw.get("items") or []:
            try:
                items.append(CustomObject.from_dict(item))
            except (KeyError, TypeError, ValueError) as exc:
                errors.append(f"{_object_name(item)}: {exc}")
        return cls(
            items=items,
            resource_version=str(metadata.get("resourceVersion") or ""),
            errors=errors,
        )


def _object_name(raw: Any) -> str:
    if isinstance(raw, Mapping):
        metadata = raw.get("metadata") or {}
        if isinstance(metadata, Mapping) and metadata.get("name"):
            return str(metadata["name"])
    return "<unnamed>"


ZERO_OBJECT_FACTORY = ZeroObjectFactory(
    new_object=CustomObject.from_dict,
    new_object_list=CustomObjectList.from_dict,
)
