"""Representation of a kustomize overlay built from structured attributes.

An overlay is described by a loosely typed mapping of attributes, typically
read from a configuration file, using the same names as the fields of a
kustomization. `compose` converts the attributes into a `BuildSpec` which
can be rendered as the `Kustomization` document consumed by `kustomize build`.

```python
from kustomize_overlay import spec

build_spec = spec.compose({
    "namespace": "example",
    "resources": ["base"],
    "images": [{"name": "nginx", "new_tag": "1.25"}],
})
print(build_spec.yaml())
```
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
import logging
from typing import Any

from mashumaro import DataClassDictMixin, field_options
from mashumaro.config import BaseConfig
import yaml

__all__ = [
    "compose",
    "BuildSpec",
    "ConfigMapGenerator",
    "SecretGenerator",
    "Image",
    "Replica",
    "Patch",
    "PatchTarget",
]

_LOGGER = logging.getLogger(__name__)

KUSTOMIZATION_API_VERSION = "kustomize.config.k8s.io/v1beta1"
KUSTOMIZATION_KIND = "Kustomization"

BEHAVIOR_CREATE = "create"
BEHAVIOR_REPLACE = "replace"
BEHAVIOR_MERGE = "merge"
BEHAVIOR_UNSPECIFIED = ""


@dataclass(frozen=True)
class BaseSpec(DataClassDictMixin):
    """Base class for all parts of a build specification."""

    class Config(BaseConfig):
        serialize_by_alias = True
        omit_none = True


@dataclass(frozen=True)
class ConfigMapGenerator(BaseSpec):
    """Generates a ConfigMap from literals, env files and files."""

    name: str = ""
    behavior: str = BEHAVIOR_UNSPECIFIED
    """One of create, replace, merge or empty for the kustomize default."""

    literals: tuple[str, ...] = ()
    """Literal sources in `KEY=VALUE` form."""

    envs: tuple[str, ...] = ()
    files: tuple[str, ...] = ()


@dataclass(frozen=True)
class SecretGenerator(ConfigMapGenerator):
    """Generates a Secret from literals, env files and files."""

    type: str = ""
    """The Secret type, kustomize defaults to Opaque."""


@dataclass(frozen=True)
class Image(BaseSpec):
    """Override of the name, tag or digest of a container image."""

    name: str = ""
    new_name: str = field(default="", metadata=field_options(alias="newName"))
    new_tag: str = field(default="", metadata=field_options(alias="newTag"))
    digest: str = ""


@dataclass(frozen=True)
class Replica(BaseSpec):
    """Override of the replica count of a named workload."""

    name: str = ""
    count: int = 0


@dataclass(frozen=True)
class PatchTarget(BaseSpec):
    """Selects the resources a patch applies to."""

    group: str = ""
    version: str = ""
    kind: str = ""
    name: str = ""
    namespace: str = ""
    label_selector: str = field(
        default="", metadata=field_options(alias="labelSelector")
    )
    annotation_selector: str = field(
        default="", metadata=field_options(alias="annotationSelector")
    )


@dataclass(frozen=True)
class Patch(BaseSpec):
    """A strategic merge or JSON patch, either inline or read from a file."""

    path: str = ""
    patch: str = ""
    target: PatchTarget | None = None


@dataclass(frozen=True)
class BuildSpec(BaseSpec):
    """Canonical build specification of an overlay.

    All sequences keep the order they were declared in since it determines
    generator precedence and patch order during the build.
    """

    common_annotations: dict[str, str] = field(
        default_factory=dict, metadata=field_options(alias="commonAnnotations")
    )
    common_labels: dict[str, str] = field(
        default_factory=dict, metadata=field_options(alias="commonLabels")
    )
    components: tuple[str, ...] = ()
    config_map_generator: tuple[ConfigMapGenerator, ...] = field(
        default=(), metadata=field_options(alias="configMapGenerator")
    )
    crds: tuple[str, ...] = ()
    images: tuple[Image, ...] = ()
    name_prefix: str = field(default="", metadata=field_options(alias="namePrefix"))
    name_suffix: str = field(default="", metadata=field_options(alias="nameSuffix"))
    namespace: str = ""
    replicas: tuple[Replica, ...] = ()
    resources: tuple[str, ...] = ()
    secret_generator: tuple[SecretGenerator, ...] = field(
        default=(), metadata=field_options(alias="secretGenerator")
    )
    patches: tuple[Patch, ...] = ()

    def document(self) -> dict[str, Any]:
        """Return the kustomization document with empty fields omitted."""
        return {
            "apiVersion": KUSTOMIZATION_API_VERSION,
            "kind": KUSTOMIZATION_KIND,
            **_prune(self.to_dict()),
        }

    def yaml(self) -> str:
        """Render the kustomization document as YAML."""
        return yaml.dump(self.document(), sort_keys=False, explicit_start=True)


def _prune(data: dict[str, Any]) -> dict[str, Any]:
    """Drop unset values, recursing into nested documents.

    Entries of a list are kept even when they render empty so that the
    number of declared blocks is preserved.
    """
    result: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            value = _prune(value)
        elif isinstance(value, list):
            value = [_prune(v) if isinstance(v, dict) else v for v in value]
        if value is None or value == "" or value == [] or value == {}:
            continue
        result[key] = value
    return result


def _str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    try:
        return int(value or 0)
    except (TypeError, ValueError, OverflowError):
        _LOGGER.debug("Ignoring count that is not an integer: %s", value)
        return 0


def _str_map(value: Any) -> dict[str, str]:
    if not value:
        return {}
    if not isinstance(value, Mapping):
        _LOGGER.debug("Ignoring value that is not a mapping: %s", value)
        return {}
    return {str(k): _str(v) for k, v in value.items()}


def _str_list(value: Any) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, (str, int, float)):
        return (_str(value),)
    if isinstance(value, Mapping):
        _LOGGER.debug("Ignoring mapping where a list is expected: %s", value)
        return ()
    return tuple(_str(v) for v in value if v is not None)


def _blocks(attrs: Mapping[str, Any], key: str) -> Iterable[Mapping[str, Any]]:
    """Yield the non-null blocks of a repeated attribute in declared order."""
    value = attrs.get(key) or ()
    if isinstance(value, (Mapping, str, int, float)):
        value = (value,)
    for block in value:
        if block is None:
            continue
        if not isinstance(block, Mapping):
            _LOGGER.debug("Ignoring %s entry that is not a mapping: %s", key, block)
            continue
        yield block


def _target(value: Any) -> PatchTarget | None:
    if not value:
        return None
    if not isinstance(value, Mapping):
        _LOGGER.debug("Ignoring patch target that is not a mapping: %s", value)
        return None
    return PatchTarget(
        group=_str(value.get("group")),
        version=_str(value.get("version")),
        kind=_str(value.get("kind")),
        name=_str(value.get("name")),
        namespace=_str(value.get("namespace")),
        label_selector=_str(value.get("label_selector")),
        annotation_selector=_str(value.get("annotation_selector")),
    )


def compose(attrs: Mapping[str, Any] | None) -> BuildSpec:
    """Convert overlay attributes into a BuildSpec.

    Missing or empty attributes produce empty fields. A single value given
    where a list is expected is treated as a one element list, other values
    of the wrong type are ignored. Paths, generator behaviors and patch
    contents are not validated here, problems with them are reported by the
    build.
    """
    if not isinstance(attrs, Mapping):
        if attrs:
            _LOGGER.debug("Ignoring overlay attributes that are not a mapping: %s", attrs)
        attrs = {}
    return BuildSpec(
        common_annotations=_str_map(attrs.get("common_annotations")),
        common_labels=_str_map(attrs.get("common_labels")),
        components=_str_list(attrs.get("components")),
        config_map_generator=tuple(
            ConfigMapGenerator(
                name=_str(block.get("name")),
                behavior=_str(block.get("behavior")),
                literals=_str_list(block.get("literals")),
                envs=_str_list(block.get("envs")),
                files=_str_list(block.get("files")),
            )
            for block in _blocks(attrs, "config_map_generator")
        ),
        crds=_str_list(attrs.get("crds")),
        images=tuple(
            Image(
                name=_str(block.get("name")),
                new_name=_str(block.get("new_name")),
                new_tag=_str(block.get("new_tag")),
                digest=_str(block.get("digest")),
            )
            for block in _blocks(attrs, "images")
        ),
        name_prefix=_str(attrs.get("name_prefix")),
        name_suffix=_str(attrs.get("name_suffix")),
        namespace=_str(attrs.get("namespace")),
        replicas=tuple(
            Replica(
                name=_str(block.get("name")),
                count=_int(block.get("count")),
            )
            for block in _blocks(attrs, "replicas")
        ),
        resources=_str_list(attrs.get("resources")),
        secret_generator=tuple(
            SecretGenerator(
                name=_str(block.get("name")),
                behavior=_str(block.get("behavior")),
                literals=_str_list(block.get("literals")),
                envs=_str_list(block.get("envs")),
                files=_str_list(block.get("files")),
                type=_str(block.get("type")),
            )
            for block in _blocks(attrs, "secret_generator")
        ),
        patches=tuple(
            Patch(
                path=_str(block.get("path")),
                patch=_str(block.get("patch")),
                target=_target(block.get("target")),
            )
            for block in _blocks(attrs, "patches")
        ),
    )
