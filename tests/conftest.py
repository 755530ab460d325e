"""Test fixtures for kustomize-overlay."""

from pathlib import Path
import shlex
import shutil

import pytest

from kustomize_overlay.config import BuildConfig
from kustomize_overlay.kustomize import BuildContext

TESTDATA_DIR = Path("tests/testdata")

requires_kustomize = pytest.mark.skipif(
    shutil.which("kustomize") is None, reason="kustomize binary is not installed"
)

BASIC_OUTPUT = """\
apiVersion: v1
kind: Namespace
metadata:
  name: test-basic
---
apiVersion: v1
kind: Service
metadata:
  labels:
    app: test
  name: test
  namespace: test-basic
spec:
  ports:
  - name: http
    port: 80
    protocol: TCP
    targetPort: 80
  selector:
    app: test
  type: ClusterIP
---
apiVersion: apps/v1
kind: Deployment
metadata:
  labels:
    app: test
  name: test
  namespace: test-basic
spec:
  replicas: 1
  selector:
    matchLabels:
      app: test
  template:
    metadata:
      labels:
        app: test
    spec:
      containers:
      - image: nginx
        name: nginx
---
apiVersion: networking.k8s.io/v1
kind: Ingress
metadata:
  name: test
  namespace: test-basic
spec:
  rules:
  - http:
      paths:
      - backend:
          service:
            name: test
            port:
              number: 80
        path: /
        pathType: Prefix
"""

BASIC_IDS = {
    "~G_v1_Namespace|~X|test-basic",
    "~G_v1_Service|test-basic|test",
    "apps_v1_Deployment|test-basic|test",
    "networking.k8s.io_v1_Ingress|test-basic|test",
}


class FakeKustomize:
    """A stand-in kustomize executable that prints canned build output.

    The script records its arguments and a copy of any `Kustomization` file
    staged in the build root so tests can inspect what was passed to it.
    """

    def __init__(self, tmp_dir: Path) -> None:
        self.bin = tmp_dir / "kustomize"
        self.output = tmp_dir / "output.yaml"
        self.error = tmp_dir / "error.txt"
        self.args = tmp_dir / "args.txt"
        self.captured = tmp_dir / "captured.yaml"
        self.output.write_text("")
        self.bin.write_text(
            "\n".join(
                [
                    "#!/bin/sh",
                    f'echo "$@" > {shlex.quote(str(self.args))}',
                    'if [ -f "$2/Kustomization" ]; then',
                    f'  cp "$2/Kustomization" {shlex.quote(str(self.captured))}',
                    "fi",
                    f"if [ -f {shlex.quote(str(self.error))} ]; then",
                    f"  cat {shlex.quote(str(self.error))} >&2",
                    "  exit 1",
                    "fi",
                    f"cat {shlex.quote(str(self.output))}",
                    "",
                ]
            )
        )
        self.bin.chmod(0o755)

    def set_output(self, content: str) -> None:
        """Set the documents printed by the build."""
        self.output.write_text(content)

    def set_error(self, message: str) -> None:
        """Make the build fail with the specified message."""
        self.error.write_text(message)

    @property
    def last_args(self) -> list[str]:
        return self.args.read_text().split()

    @property
    def config(self) -> BuildConfig:
        return BuildConfig(kustomize_bin=str(self.bin))


@pytest.fixture
def fake_kustomize(tmp_path: Path) -> FakeKustomize:
    """A fake kustomize binary that outputs the basic test resources."""
    fake = FakeKustomize(tmp_path)
    fake.set_output(BASIC_OUTPUT)
    return fake


@pytest.fixture
def ctx(fake_kustomize: FakeKustomize) -> BuildContext:
    """A build context using the fake kustomize binary."""
    return BuildContext(config=fake_kustomize.config)


@pytest.fixture
def build_root(tmp_path: Path) -> Path:
    """An empty directory used as the root of a build."""
    root = tmp_path / "root"
    root.mkdir()
    return root
