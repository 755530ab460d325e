"""Flags and output handling shared by the build actions."""

from argparse import ArgumentParser
import logging
import os

from kustomize_overlay.config import KUSTOMIZE_BIN, BuildConfig
from kustomize_overlay.kustomize import BuildContext
from kustomize_overlay.result import BuildResult

from .format import FORMATTERS, open_file

_LOGGER = logging.getLogger(__name__)


def add_build_flags(args: ArgumentParser) -> None:
    """Add flags controlling the kustomize build and its output."""
    args.add_argument(
        "--kustomize-bin",
        type=str,
        default=os.environ.get("KUSTOMIZE_BIN", KUSTOMIZE_BIN),
        help="Path to the kustomize binary, defaults to $KUSTOMIZE_BIN or kustomize",
    )
    args.add_argument(
        "--output",
        "-o",
        choices=sorted(FORMATTERS),
        default="yaml",
        help="Output format of the command",
    )
    args.add_argument(
        "--output-file",
        type=str,
        default="/dev/stdout",
        help="Output file for the results of the command, `-` for stdout",
    )


def make_context(kustomize_bin: str) -> BuildContext:
    """Create the build context for a single command invocation."""
    return BuildContext(config=BuildConfig(kustomize_bin=kustomize_bin))


def write_result(result: BuildResult, output: str, output_file: str) -> None:
    """Write the build result in the requested format."""
    _LOGGER.debug("Writing %d resources to %s", len(result.ids), output_file)
    formatter = FORMATTERS[output]()
    with open_file(output_file, "w") as file:
        formatter.print(result.compact_dict(), file=file)
