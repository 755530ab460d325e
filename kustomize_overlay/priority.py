"""Grouping of resources into ordered apply tiers.

Resources in a lower tier must be applied before resources in a higher tier:

  - `Tier.SCOPE`: Namespaces and CustomResourceDefinitions which other
    resources are created in or are instances of.
  - `Tier.DEFAULT`: every other resource.
  - `Tier.ADMISSION`: admission webhook configurations, applied last so they
    do not gate the creation of the resources their webhook service depends on.

Members of the same tier have no ordering between them.
"""

from collections.abc import Iterable
from enum import IntEnum
import logging

from .resource import Resource

__all__ = [
    "Tier",
    "TIER_COUNT",
    "classify",
    "tier_for",
]

_LOGGER = logging.getLogger(__name__)


class Tier(IntEnum):
    """Apply order tier of a resource."""

    SCOPE = 0
    DEFAULT = 1
    ADMISSION = 2


TIER_COUNT = len(Tier)

# Keyed by (group, kind)
_TIER_KINDS: dict[tuple[str, str], Tier] = {
    ("", "Namespace"): Tier.SCOPE,
    ("apiextensions.k8s.io", "CustomResourceDefinition"): Tier.SCOPE,
    ("admissionregistration.k8s.io", "MutatingWebhookConfiguration"): Tier.ADMISSION,
    ("admissionregistration.k8s.io", "ValidatingWebhookConfiguration"): Tier.ADMISSION,
}


def tier_for(resource: Resource) -> Tier:
    """Return the apply tier of the resource."""
    return _TIER_KINDS.get((resource.group, resource.kind), Tier.DEFAULT)


def classify(resources: Iterable[Resource]) -> tuple[frozenset[str], ...]:
    """Partition the resource identifiers into tiers, in apply order."""
    tiers: list[set[str]] = [set() for _ in Tier]
    for resource in resources:
        tiers[tier_for(resource)].add(resource.id)
    _LOGGER.debug("Tier sizes: %s", [len(tier) for tier in tiers])
    return tuple(frozenset(tier) for tier in tiers)
