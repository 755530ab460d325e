"""Build flows that turn a kustomization or overlay into a BuildResult.

`build_kustomization` builds a directory that already contains a
kustomization file. `build_overlay` builds an overlay described by
attributes, see `kustomize_overlay.spec.compose` for the supported names.

```python
from pathlib import Path

from kustomize_overlay import overlay
from kustomize_overlay.kustomize import BuildContext

ctx = BuildContext()
result = await overlay.build_kustomization(ctx, Path("/path/to/kustomization"))
for tier, ids in enumerate(result.ids_prio):
    print(tier, sorted(ids))
```
"""

from collections.abc import Mapping
import logging
from pathlib import Path
from typing import Any

from . import kustomize
from .exceptions import InputException, KustomizeException, KustomizePathException
from .kustomize import BuildContext
from .priority import classify
from .resource import Resource, identify
from .result import BuildResult, assemble
from .spec import BuildSpec, compose

__all__ = [
    "build_kustomization",
    "build_overlay",
]

_LOGGER = logging.getLogger(__name__)


def _result(resources: list[Resource]) -> BuildResult:
    return assemble(
        resources,
        [identify(resource) for resource in resources],
        classify(resources),
    )


async def _build(
    name: str,
    ctx: BuildContext,
    spec: BuildSpec | None,
    root_path: Path,
    load_restrictor: str,
) -> BuildResult:
    try:
        resources = await kustomize.build(ctx, spec, root_path, load_restrictor)
        _LOGGER.debug("%s produced %d resources", name, len(resources))
        return _result(resources)
    except KustomizePathException as err:
        raise KustomizePathException(f"{name}: {err}") from err
    except KustomizeException as err:
        raise KustomizeException(f"{name}: {err}") from err
    except InputException as err:
        raise InputException(f"{name}: {err}") from err


async def build_kustomization(
    ctx: BuildContext,
    path: Path,
    load_restrictor: str = kustomize.LOAD_RESTRICTOR_DEFAULT,
) -> BuildResult:
    """Build the kustomization in the specified directory."""
    return await _build("kustomization build", ctx, None, path, load_restrictor)


async def build_overlay(
    ctx: BuildContext,
    attrs: Mapping[str, Any] | BuildSpec,
    base_path: Path,
) -> BuildResult:
    """Build an overlay whose relative paths are resolved from `base_path`."""
    spec = attrs if isinstance(attrs, BuildSpec) else compose(attrs)
    return await _build(
        "kustomization overlay",
        ctx,
        spec,
        base_path,
        kustomize.LOAD_RESTRICTOR_DEFAULT,
    )
