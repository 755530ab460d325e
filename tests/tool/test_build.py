"""Tests for the kustomize-overlay `build` command."""

import json
from pathlib import Path

import pytest
import yaml

from kustomize_overlay.exceptions import CommandException

from conftest import BASIC_IDS, FakeKustomize
from . import run_command


async def test_build_yaml(fake_kustomize: FakeKustomize, build_root: Path) -> None:
    """Test the default yaml output."""
    result = await run_command(
        ["build", str(build_root), "--kustomize-bin", str(fake_kustomize.bin)]
    )
    data = yaml.safe_load(result)
    assert data["ids"] == sorted(BASIC_IDS)
    assert data["ids_prio"][0] == ["~G_v1_Namespace|~X|test-basic"]
    assert len(data["ids_prio"][1]) == 3
    assert data["ids_prio"][2] == []
    assert (
        data["manifests"]["~G_v1_Namespace|~X|test-basic"]
        == '{"apiVersion":"v1","kind":"Namespace","metadata":{"name":"test-basic"}}'
    )


async def test_build_json_output_file(
    fake_kustomize: FakeKustomize, build_root: Path, tmp_path: Path
) -> None:
    """Test json output written to a file with load restrictions disabled."""
    output_file = tmp_path / "out.json"
    result = await run_command(
        [
            "build",
            str(build_root),
            "--load-restrictor=none",
            "-o",
            "json",
            "--output-file",
            str(output_file),
        ],
        env={"KUSTOMIZE_BIN": str(fake_kustomize.bin)},
    )
    assert result == ""
    data = json.loads(output_file.read_text())
    assert set(data["ids"]) == BASIC_IDS
    assert fake_kustomize.last_args[-2:] == ["--load-restrictor", "LoadRestrictionsNone"]


async def test_build_table(fake_kustomize: FakeKustomize, build_root: Path) -> None:
    """Test the table output lists the tier of each resource."""
    result = await run_command(
        ["build", str(build_root), "-o", "table", "--kustomize-bin", str(fake_kustomize.bin)]
    )
    lines = result.splitlines()
    assert lines[0].split() == ["TIER", "ID"]
    assert lines[1].split() == ["0", "~G_v1_Namespace|~X|test-basic"]
    assert [line.split()[0] for line in lines[2:]] == ["1", "1", "1"]


async def test_build_failure(fake_kustomize: FakeKustomize, build_root: Path) -> None:
    """Test a failed build exits with an error."""
    fake_kustomize.set_error("Error: invalid Kustomization")
    with pytest.raises(CommandException, match=r"(?s)kustomization build: .*invalid Kustomization"):
        await run_command(
            ["build", str(build_root), "--kustomize-bin", str(fake_kustomize.bin)]
        )


async def test_build_output_file_stdout(
    fake_kustomize: FakeKustomize, build_root: Path
) -> None:
    """Test `-` writes the output to stdout."""
    result = await run_command(
        [
            "build",
            str(build_root),
            "-o",
            "json",
            "--output-file",
            "-",
            "--kustomize-bin",
            str(fake_kustomize.bin),
        ]
    )
    assert set(json.loads(result)["ids"]) == BASIC_IDS
