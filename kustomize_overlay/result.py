"""Packaging of build output for consumers.

A `BuildResult` holds everything other tooling needs from a build: the set
of resource identifiers, the identifiers split into apply tiers and the
serialized manifest of every resource. Manifests are rendered as compact
JSON with sorted keys so that identical inputs always produce byte for byte
identical bodies that can be stored and diffed.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
import json
import logging
from types import MappingProxyType
from typing import Any

from .exceptions import InputException
from .priority import TIER_COUNT
from .resource import Resource

__all__ = [
    "BuildResult",
    "assemble",
    "serialize",
]

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildResult:
    """The identifiers, tiers and manifests produced by one build."""

    ids: frozenset[str]
    """All resource identifiers."""

    ids_prio: tuple[frozenset[str], ...]
    """Resource identifiers grouped into tiers, in apply order."""

    manifests: Mapping[str, str]
    """Serialized manifest keyed by resource identifier, read only."""

    def compact_dict(self) -> dict[str, Any]:
        """Return a dictionary with identifiers in sorted order for output."""
        return {
            "ids": sorted(self.ids),
            "ids_prio": [sorted(tier) for tier in self.ids_prio],
            "manifests": {key: self.manifests[key] for key in sorted(self.manifests)},
        }


def serialize(doc: dict[str, Any]) -> str:
    """Render a manifest as canonical single line JSON."""
    return json.dumps(doc, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def assemble(
    resources: Iterable[Resource],
    ids: Iterable[str],
    tiers: Iterable[Iterable[str]],
) -> BuildResult:
    """Combine resources, their identifiers and tiers into a BuildResult.

    The identifiers must be in the same order as the resources and the tiers
    must partition the identifiers.
    """
    manifests: dict[str, str] = {}
    for resource, resource_id in zip(resources, ids, strict=True):
        if resource_id in manifests:
            raise InputException(f"Duplicate resource id in build output: {resource_id}")
        manifests[resource_id] = serialize(resource.doc)

    ids_prio = tuple(frozenset(tier) for tier in tiers)
    if len(ids_prio) != TIER_COUNT:
        raise InputException(f"Expected {TIER_COUNT} tiers but got {len(ids_prio)}")
    all_ids = frozenset(manifests)
    seen: set[str] = set()
    for tier in ids_prio:
        if overlap := seen & tier:
            raise InputException(f"Resource ids in more than one tier: {sorted(overlap)}")
        seen |= tier
    if seen != all_ids:
        raise InputException(
            f"Tiers do not match resource ids: {sorted(seen ^ all_ids)}"
        )
    _LOGGER.debug("Assembled %d resources", len(all_ids))
    return BuildResult(
        ids=all_ids, ids_prio=ids_prio, manifests=MappingProxyType(manifests)
    )
