"""Version and User-Agent strings for retool_cli."""

from __future__ import annotations

import platform

import httpx

from . import __version__
from .constants import PACKAGE_NAME


def cli_version() -> str:
    return __version__


def user_agent() -> str:
    runtime = f"python {platform.python_version()}; httpx {httpx.__version__}"
    return f"{PACKAGE_NAME}/{cli_version()} ({runtime})"


USER_AGENT = user_agent()
