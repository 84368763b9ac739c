"""Console output for retool_cli.

Every line is prefixed with ``[retool]`` and passed through :func:`redact`.
Progress goes to stdout unless ``--quiet`` silences it; warnings and errors
always go to stderr.
"""

from __future__ import annotations

import sys
from typing import TextIO

from .utils import redact

PREFIX = "[retool]"

_state = {"quiet": False}


def configure_console(*, quiet: bool = False) -> None:
    _state["quiet"] = _state["quiet"] or quiet


def reset_console() -> None:
    _state["quiet"] = False


def _emit(message: str, stream: TextIO) -> None:
    print(f"{PREFIX} {redact(message)}", file=stream)


def log(message: str) -> None:
    if _state["quiet"]:
        return
    _emit(message, sys.stdout)


def log_warning(message: str) -> None:
    _emit(f"warning: {message}", sys.stderr)


def log_error(message: str) -> None:
    _emit(message, sys.stderr)
