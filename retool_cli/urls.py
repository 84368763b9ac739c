"""URL helpers for the Retool public API."""

from __future__ import annotations

from typing import Optional

import httpx

from .constants import API_PATH_PREFIX, DEFAULT_SCHEME
from .errors import CLIError


def normalize_host(value: Optional[str]) -> Optional[str]:
    if not isinstance(value, str):
        return None
    normalized = value.strip().rstrip("/")
    return normalized or None


def api_base_url(host: str, scheme: Optional[str] = None) -> str:
    """
    Build the Retool API v2 base URL for an organization host.

    `host` is normally a bare hostname (``acme.retool.com``) combined with
    `scheme`; a host that already carries a scheme keeps it. A trailing
    ``/api/v2`` on the host is not duplicated.
    """
    normalized = normalize_host(host)
    if not normalized:
        raise CLIError("Retool host is empty")
    if "://" not in normalized:
        normalized = f"{(scheme or DEFAULT_SCHEME).strip().lower()}://{normalized}"
    parsed = httpx.URL(normalized)
    if not parsed.scheme or not parsed.host:
        raise CLIError(
            f"invalid Retool host '{host}'; expected a hostname such as acme.retool.com"
        )
    base = normalized.rstrip("/")
    if base.endswith(f"/{API_PATH_PREFIX}"):
        return base
    return f"{base}/{API_PATH_PREFIX}"


def api_url(base_url: str, path: str) -> httpx.URL:
    normalized_base = base_url.rstrip("/") + "/"
    return httpx.URL(normalized_base).join(path.lstrip("/"))
