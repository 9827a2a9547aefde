"""CustomResourceDefinition registration helpers."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional

from kubernetes import client
from kubernetes.client.exceptions import ApiException

LOG = logging.getLogger(__name__)


class AlreadyExistsError(Exception):
    """The resource type is already registered with the cluster API."""


def is_already_exists(err: Optional[BaseException]) -> bool:
    return isinstance(err, AlreadyExistsError)


@dataclass(frozen=True)
class ResourceDescriptor:
    """Identity of a custom resource type."""

    group: str
    version: str
    kind: str
    plural: str
    description: str = ""
    scope: str = "Namespaced"

    @property
    def name(self) -> str:
        return f"{self.plural}.{self.group}"

    @property
    def singular(self) -> str:
        return self.kind.lower()

    @property
    def list_kind(self) -> str:
        return f"{self.kind}List"


@dataclass(frozen=True)
class WatchEndpoint:
    """Where to list/watch objects of a custom resource type.

    An empty ``namespace`` selects objects across all namespaces.
    """

    group: str
    version: str
    plural: str
    namespace: str = ""

    @property
    def cluster_wide(self) -> bool:
        return not self.namespace


class CRDRegistrar:
    """Ensure a custom resource type exists and is served by the API.

    Parameters
    ----------
    descriptor:
        The resource type to register.
    api:
        An ``ApiextensionsV1Api`` instance (or anything exposing the same
        ``create_custom_resource_definition`` and
        ``read_custom_resource_definition`` calls).
    establish_timeout:
        Seconds to wait for the ``Established`` condition after creation.
    """

    def __init__(
        self,
        descriptor: ResourceDescriptor,
        api: client.ApiextensionsV1Api,
        *,
        establish_timeout: float = 60.0,
        poll_interval: float = 0.5,
    ) -> None:
        self._descriptor = descriptor
        self._api = api
        self._establish_timeout = establish_timeout
        self._poll_interval = poll_interval

    @property
    def descriptor(self) -> ResourceDescriptor:
        return self._descriptor

    def build_definition(self) -> client.V1CustomResourceDefinition:
        d = self._descriptor
        schema = client.V1JSONSchemaProps(
            type="object",
            description=d.description or None,
            x_kubernetes_preserve_unknown_fields=True,
        )
        return client.V1CustomResourceDefinition(
            api_version="apiextensions.k8s.io/v1",
            kind="CustomResourceDefinition",
            metadata=client.V1ObjectMeta(name=d.name),
            spec=client.V1CustomResourceDefinitionSpec(
                group=d.group,
                scope=d.scope,
                names=client.V1CustomResourceDefinitionNames(
                    kind=d.kind,
                    list_kind=d.list_kind,
                    plural=d.plural,
                    singular=d.singular,
                ),
                versions=[
                    client.V1CustomResourceDefinitionVersion(
                        name=d.version,
                        served=True,
                        storage=True,
                        schema=client.V1CustomResourceValidation(
                            open_apiv3_schema=schema
                        ),
                    )
                ],
            ),
        )

    def create_and_wait(self) -> None:
        """Create the resource definition and block until it is established.

        Raises :class:`AlreadyExistsError` when the definition is already
        registered; any other API failure propagates unchanged.
        """

        try:
            self._api.create_custom_resource_definition(self.build_definition())
        except ApiException as exc:
            if exc.status == 409:
                raise AlreadyExistsError(
                    f"custom resource definition {self._descriptor.name} already exists"
                ) from exc
            raise

        LOG.debug("created custom resource definition %s", self._descriptor.name)
        self._wait_established()

    def _wait_established(self) -> None:
        deadline = time.monotonic() + self._establish_timeout
        while True:
            crd = self._api.read_custom_resource_definition(self._descriptor.name)
            if _is_established(crd):
                LOG.debug("custom resource definition %s established", self._descriptor.name)
                return
            if time.monotonic() >= deadline:
                raise TimeoutError(
                    f"custom resource definition {self._descriptor.name} "
                    f"not established after {self._establish_timeout}s"
                )
            time.sleep(self._poll_interval)

    def watch_endpoint(self, namespace: str = "") -> WatchEndpoint:
        return WatchEndpoint(
            group=self._descriptor.group,
            version=self._descriptor.version,
            plural=self._descriptor.plural,
            namespace=namespace,
        )


def _is_established(crd) -> bool:
    status = getattr(crd, "status", None)
    for condition in getattr(status, "conditions", None) or []:
        if condition.type == "Established" and condition.status == "True":
            return True
    return False
