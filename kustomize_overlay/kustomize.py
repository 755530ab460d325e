"""Library for running `kustomize build` and parsing the resulting resources.

A build either runs against a directory that already contains a
kustomization, or against a `BuildSpec` that is written as a `Kustomization`
file into the directory its relative paths refer to for the duration of the
build:

```python
from pathlib import Path

from kustomize_overlay import kustomize, spec

ctx = kustomize.BuildContext()
resources = await kustomize.build(ctx, None, Path("/path/to/kustomization"))
for resource in resources:
    print(f"Found object {resource.id}")

overlay = spec.compose({"namespace": "example", "resources": ["base"]})
resources = await kustomize.build(ctx, overlay, Path("/path/to/overlays"))
```

kustomize keeps internal state that is not safe for concurrent builds, so all
builds sharing a `BuildContext` are run one at a time.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
import logging
from pathlib import Path

import aiofiles
from aiofiles.ospath import exists, isdir
import aiofiles.os
import yaml

from .command import Command, Task, format_path
from .config import BuildConfig
from .context import trace_context
from .exceptions import InputException, KustomizeException, KustomizePathException
from .resource import Resource
from .spec import BuildSpec

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "build",
    "BuildContext",
    "KustomizeBuild",
]

KUSTOMIZATION_FILE = "Kustomization"
KUSTOMIZATION_FILES = [
    "kustomization.yaml",
    "kustomization.yml",
    KUSTOMIZATION_FILE,
]

LOAD_RESTRICTOR_NONE = "none"
LOAD_RESTRICTOR_DEFAULT = ""
LOAD_RESTRICTORS = {
    LOAD_RESTRICTOR_NONE: ["--load-restrictor", "LoadRestrictionsNone"],
    LOAD_RESTRICTOR_DEFAULT: [],
}

# Resolved as plain strings in build output to preserve values like dates
_STRING_TAGS = {"tag:yaml.org,2002:timestamp", "tag:yaml.org,2002:value"}


class _ManifestLoader(yaml.SafeLoader):
    """A safe loader that does not convert timestamps or `=` values."""


_ManifestLoader.yaml_implicit_resolvers = {
    key: [(tag, regexp) for tag, regexp in resolvers if tag not in _STRING_TAGS]
    for key, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


@dataclass
class BuildContext:
    """Shared state for builds that must not run concurrently.

    Builds using the same context queue on `lock` while the kustomize build
    is running. Independent contexts do not block each other.
    """

    config: BuildConfig = field(default_factory=BuildConfig)

    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    """Held while a kustomize build is running."""

    _staging_locks: dict[str, asyncio.Lock] = field(default_factory=dict)
    _staging_users: dict[str, int] = field(default_factory=dict)

    @asynccontextmanager
    async def staging_lock(self, root: Path) -> AsyncIterator[None]:
        """Hold exclusive use of a directory for writing a build specification.

        The lock for a directory is discarded once no build holds or waits on
        it.
        """
        key = str(root.resolve())
        lock = self._staging_locks.setdefault(key, asyncio.Lock())
        self._staging_users[key] = self._staging_users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._staging_users[key] -= 1
            if not self._staging_users[key]:
                del self._staging_users[key]
                del self._staging_locks[key]


class KustomizeBuild(Task):
    """A task that issues a kustomize build command."""

    def __init__(
        self, path: Path, load_restrictor: str, config: BuildConfig
    ) -> None:
        """Initialize KustomizeBuild."""
        if load_restrictor not in LOAD_RESTRICTORS:
            raise InputException(
                f"Invalid load restrictor '{load_restrictor}', expected one of: "
                f"{sorted(LOAD_RESTRICTORS)}"
            )
        self._path = path
        self._command = Command(
            [config.kustomize_bin, "build", str(path)]
            + LOAD_RESTRICTORS[load_restrictor],
            exc=KustomizeException,
            env=config.env,
        )

    async def run(self) -> bytes:
        """Run the task."""
        return await self._command.run()

    def __str__(self) -> str:
        """Render as a debug string."""
        return f"kustomize build {format_path(self._path)}"


def _parse_resources(out: bytes) -> list[Resource]:
    """Parse the documents of the build output."""
    try:
        docs = list(yaml.load_all(out.decode("utf-8"), Loader=_ManifestLoader))
    except yaml.YAMLError as err:
        raise KustomizeException(f"Unable to parse build output: {err}") from err
    return [Resource.parse_doc(doc) for doc in docs if doc is not None]


async def _run_build(ctx: BuildContext, task: KustomizeBuild) -> list[Resource]:
    """Run the build while holding the context lock."""
    async with ctx.lock:
        _LOGGER.debug("Running %s", task)
        out = await task.run()
    return _parse_resources(out)


@asynccontextmanager
async def _staged_spec(
    ctx: BuildContext, spec: BuildSpec, root: Path
) -> AsyncIterator[Path]:
    """Write the build specification into the root while in use."""
    async with ctx.staging_lock(root):
        for name in KUSTOMIZATION_FILES:
            if await exists(root / name):
                raise InputException(
                    f"Cannot stage overlay, '{format_path(root / name)}' already exists"
                )
        spec_file = root / KUSTOMIZATION_FILE
        content: str = spec.yaml()
        _LOGGER.debug("Staging build specification %s:\n%s", spec_file, content)
        try:
            async with aiofiles.open(spec_file, mode="w") as f:
                await f.write(content)
            yield root
        finally:
            if await exists(spec_file):
                await aiofiles.os.remove(spec_file)


async def build(
    ctx: BuildContext,
    spec: BuildSpec | None,
    root_path: Path,
    load_restrictor: str = LOAD_RESTRICTOR_DEFAULT,
) -> list[Resource]:
    """Build the resources of a kustomization.

    When `spec` is set it is staged as the kustomization of `root_path`,
    otherwise `root_path` must already contain a kustomization.
    """
    if not await isdir(root_path):
        raise KustomizePathException(
            f"Build path is not a directory: {format_path(root_path)}"
        )
    task = KustomizeBuild(root_path, load_restrictor, ctx.config)
    with trace_context(str(task)):
        if spec is None:
            return await _run_build(ctx, task)
        async with _staged_spec(ctx, spec, root_path):
            return await _run_build(ctx, task)
