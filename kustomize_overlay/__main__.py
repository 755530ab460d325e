"""Entry point for `python -m kustomize_overlay`."""

from kustomize_overlay.tool.kustomize_overlay import main

if __name__ == "__main__":
    main()
