"""Exceptions related to kustomize-overlay."""

__all__ = [
    "OverlayException",
    "InputException",
    "CommandException",
    "KustomizeException",
    "KustomizePathException",
]


class OverlayException(Exception):
    """Generic base exception used for this library."""


class InputException(OverlayException):
    """Raised when the input files or values are not formatted as expected."""


class CommandException(OverlayException):
    """Raised when there is a failure running a subcommand."""


class KustomizeException(CommandException):
    """Raised when there is a failure running a kustomize build."""


class KustomizePathException(KustomizeException):
    """Raised when a build root does not exist or is not a directory."""
