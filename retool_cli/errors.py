"""Error types for retool_cli."""

from __future__ import annotations


class CLIError(Exception):
    """Raised for user-facing CLI errors."""


class RemoteFetchError(CLIError):
    """Raised when a required Retool API listing cannot be fetched."""


class ResponseShapeError(CLIError):
    """Raised when a Retool API payload does not have the expected structure."""


class DanglingReferenceError(CLIError):
    """Raised when a resource refers to another resource that was not imported."""
