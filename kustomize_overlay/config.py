"""Configuration objects for kustomize-overlay."""

from dataclasses import dataclass, field

KUSTOMIZE_BIN = "kustomize"


@dataclass
class BuildConfig:
    """Configuration for invoking the kustomize build."""

    kustomize_bin: str = KUSTOMIZE_BIN
    """Name or path of the kustomize executable."""

    env: dict[str, str] = field(default_factory=dict)
    """Additional environment variables for the kustomize subprocess."""
