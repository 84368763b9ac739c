"""Per-invocation dependencies shared by retool_cli commands."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import httpx

from .config import ConfigFile, load_config
from .http import http_timeout

HttpClientFactory = Callable[[httpx.Timeout], httpx.Client]


def default_http_client_factory(timeout: httpx.Timeout) -> httpx.Client:
    return httpx.Client(timeout=timeout, follow_redirects=True)


@dataclass(frozen=True)
class AppContext:
    """
    Config and HTTP plumbing for one command run.

    Tests swap in a preloaded ``config`` and a factory returning fake clients;
    the CLI uses the config file on disk and real ``httpx`` clients.
    """

    config: Optional[ConfigFile] = None
    config_path: Optional[Path] = None
    http_client_factory: HttpClientFactory = default_http_client_factory

    def load_config(self) -> ConfigFile:
        if self.config is not None:
            return self.config
        return load_config(self.config_path)

    def new_http_client(self, timeout_seconds: Optional[float] = None) -> httpx.Client:
        return self.http_client_factory(http_timeout(timeout_seconds))
