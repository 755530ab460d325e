"""kustomize-overlay overlay action."""

from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
import logging
import pathlib
from typing import Any, cast

import aiofiles
import yaml

from kustomize_overlay import overlay
from kustomize_overlay.exceptions import InputException

from .build_common import add_build_flags, make_context, write_result

_LOGGER = logging.getLogger(__name__)


async def read_overlay_file(overlay_file: pathlib.Path) -> dict[str, Any]:
    """Read overlay attributes from a YAML file."""
    try:
        async with aiofiles.open(overlay_file) as f:
            content = await f.read()
    except OSError as err:
        raise InputException(f"Unable to read overlay file {overlay_file}: {err}") from err
    try:
        attrs = yaml.safe_load(content)
    except yaml.YAMLError as err:
        raise InputException(f"Unable to parse overlay file {overlay_file}: {err}") from err
    if attrs is None:
        return {}
    if not isinstance(attrs, dict):
        raise InputException(f"Overlay file {overlay_file} must contain a mapping")
    return attrs


class OverlayAction:
    """kustomize-overlay overlay action."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "overlay",
                help="Build an overlay described in a YAML file",
                description="""Composes a kustomization from the attributes in the
                    overlay file (common_labels, resources, patches, images,
                    config_map_generator and so on) and builds it.""",
            ),
        )
        args.add_argument(
            "overlay_file", type=pathlib.Path, help="Path to the overlay attributes"
        )
        args.add_argument(
            "--base-path",
            type=pathlib.Path,
            default=None,
            help="Directory relative overlay paths refer to, defaults to the "
            "directory of the overlay file",
        )
        add_build_flags(args)
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        overlay_file: pathlib.Path,
        base_path: pathlib.Path | None,
        kustomize_bin: str,
        output: str,
        output_file: str,
        **kwargs: Any,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        attrs = await read_overlay_file(overlay_file)
        if base_path is None:
            base_path = overlay_file.parent
        _LOGGER.debug("Building overlay %s from %s", overlay_file, base_path)
        result = await overlay.build_overlay(make_context(kustomize_bin), attrs, base_path)
        write_result(result, output, output_file)
