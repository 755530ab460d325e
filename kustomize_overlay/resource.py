"""Identification of the resources produced by a kustomize build.

Every resource is keyed by a string identifier made of its group, version,
kind, namespace and name:

    <group>_<version>_<kind>|<namespace>|<name>

An empty group (the core API group) is rendered as `~G` and an empty
namespace (a cluster scoped resource) as `~X` so that no field is ever an
empty string. For example a Namespace named `example` is identified as
`~G_v1_Namespace|~X|example` and a Deployment as
`apps_v1_Deployment|example|web`.

Identifiers are part of the output contract consumed by other tools and
must not change format.
"""

from dataclasses import dataclass
from typing import Any

from .exceptions import InputException

__all__ = [
    "Resource",
    "ResourceId",
    "identify",
]

GROUP_SENTINEL = "~G"
NAMESPACE_SENTINEL = "~X"
FIELD_SEPARATOR = "|"
GVK_SEPARATOR = "_"


@dataclass(frozen=True, order=True)
class ResourceId:
    """The parsed fields of a resource identifier."""

    group: str
    version: str
    kind: str
    namespace: str
    name: str

    @property
    def api_version(self) -> str:
        if self.group:
            return f"{self.group}/{self.version}"
        return self.version

    def __str__(self) -> str:
        """Render the identifier string."""
        gvk = GVK_SEPARATOR.join(
            [self.group or GROUP_SENTINEL, self.version, self.kind]
        )
        return FIELD_SEPARATOR.join(
            [gvk, self.namespace or NAMESPACE_SENTINEL, self.name]
        )

    @classmethod
    def parse(cls, value: str) -> "ResourceId":
        """Parse an identifier string back into its fields."""
        parts = value.split(FIELD_SEPARATOR, 2)
        if len(parts) != 3:
            raise InputException(f"Invalid resource id: {value}")
        gvk, namespace, name = parts
        gvk_parts = gvk.split(GVK_SEPARATOR, 2)
        if len(gvk_parts) != 3:
            raise InputException(f"Invalid resource id group/version/kind: {value}")
        group, version, kind = gvk_parts
        return cls(
            group="" if group == GROUP_SENTINEL else group,
            version=version,
            kind=kind,
            namespace="" if namespace == NAMESPACE_SENTINEL else namespace,
            name=name,
        )


@dataclass(frozen=True)
class Resource:
    """A single manifest from the output of a build."""

    api_version: str
    kind: str
    name: str
    namespace: str
    """The namespace of the object, empty for cluster scoped objects."""

    doc: dict[str, Any]
    """The full manifest contents."""

    @property
    def group(self) -> str:
        return self.api_version.rpartition("/")[0]

    @property
    def version(self) -> str:
        return self.api_version.rpartition("/")[2]

    @property
    def resource_id(self) -> ResourceId:
        return ResourceId(
            group=self.group,
            version=self.version,
            kind=self.kind,
            namespace=self.namespace,
            name=self.name,
        )

    @property
    def id(self) -> str:
        """The identifier string of the resource."""
        return str(self.resource_id)

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "Resource":
        """Parse a Resource from a kubernetes object."""
        if not isinstance(doc, dict):
            raise InputException(f"Invalid object is not a mapping: {doc}")
        if not (api_version := doc.get("apiVersion")):
            raise InputException(f"Invalid object missing apiVersion: {doc}")
        if not (kind := doc.get("kind")):
            raise InputException(f"Invalid object missing kind: {doc}")
        if not (metadata := doc.get("metadata")):
            raise InputException(f"Invalid object missing metadata: {doc}")
        if not (name := metadata.get("name")):
            raise InputException(f"Invalid object missing metadata.name: {doc}")
        return cls(
            api_version=str(api_version),
            kind=str(kind),
            name=str(name),
            namespace=str(metadata.get("namespace") or ""),
            doc=doc,
        )


def identify(resource: Resource) -> str:
    """Return the identifier string of the resource."""
    return resource.id
