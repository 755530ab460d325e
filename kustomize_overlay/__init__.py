"""
kustomize-overlay builds kustomizations and overlays with `kustomize build`
and keys the resulting manifests by a stable identifier, grouped into the
tiers they must be applied in.
"""

__all__ = [
    "spec",
    "kustomize",
    "resource",
    "priority",
    "result",
    "overlay",
    "exceptions",
    # Note this is exposed for CLI documentation, not to be used as a library
    "tool",
]
