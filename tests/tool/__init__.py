"""Test helpers for kustomize-overlay tools."""

import sys

from kustomize_overlay.command import Command, run


async def run_command(args: list[str], env: dict[str, str] | None = None) -> str:
    return await run(Command([sys.executable, "-m", "kustomize_overlay"] + args, env=env))
