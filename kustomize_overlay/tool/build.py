"""kustomize-overlay build action."""

from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
import logging
import pathlib
from typing import Any, cast

from kustomize_overlay import overlay
from kustomize_overlay.kustomize import LOAD_RESTRICTORS

from .build_common import add_build_flags, make_context, write_result

_LOGGER = logging.getLogger(__name__)


class BuildAction:
    """kustomize-overlay build action."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "build",
                help="Build a local kustomization and identify its resources",
                description="""Runs kustomize build on a directory containing a
                    kustomization and prints the resource ids, the ids grouped
                    into apply tiers and the manifest of each resource.""",
            ),
        )
        args.add_argument(
            "path", type=pathlib.Path, help="Path to the kustomization directory"
        )
        args.add_argument(
            "--load-restrictor",
            choices=sorted(LOAD_RESTRICTORS),
            default="",
            help="Set to 'none' to allow loading files outside the kustomization root",
        )
        add_build_flags(args)
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        path: pathlib.Path,
        load_restrictor: str,
        kustomize_bin: str,
        output: str,
        output_file: str,
        **kwargs: Any,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        result = await overlay.build_kustomization(
            make_context(kustomize_bin), path, load_restrictor
        )
        write_result(result, output, output_file)
