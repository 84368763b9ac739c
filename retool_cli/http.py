"""HTTP plumbing for talking to the Retool API."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union

import httpx

from .console import log
from .constants import HTTP_TIMEOUT_SECONDS
from .utils import safe_str
from .version import USER_AGENT

RETRYABLE_STATUSES = frozenset({408, 429, 500, 502, 503, 504})


@dataclass(frozen=True)
class RetryPolicy:
    """How often and how patiently a request is repeated after a transient failure.

    ``retry_post`` allows retrying POST calls that only read data, such as
    ``permissions/listObjects``.
    """

    max_attempts: int = 3
    backoff_initial: float = 0.5
    backoff_max: float = 8.0
    retry_post: bool = False

    def allows(self, method: str) -> bool:
        return method in {"GET", "HEAD"} or (self.retry_post and method == "POST")

    def delay(self, attempt: int, response: Optional[httpx.Response] = None) -> float:
        if response is not None:
            retry_after = safe_str(response.headers.get("Retry-After"))
            if retry_after:
                try:
                    requested = float(retry_after)
                except ValueError:
                    requested = 0.0
                if requested > 0:
                    return min(requested, self.backoff_max)
        if attempt <= 0:
            return 0.0
        return min(self.backoff_initial * (2 ** (attempt - 1)), self.backoff_max)


DEFAULT_RETRY_POLICY = RetryPolicy()
READ_ONLY_POST_POLICY = RetryPolicy(retry_post=True)


def http_timeout(seconds: Optional[float] = None) -> httpx.Timeout:
    value = seconds if seconds and seconds > 0 else HTTP_TIMEOUT_SECONDS
    return httpx.Timeout(value, connect=value)


def request_headers(token: str = "", *, content_type: Optional[str] = None) -> Dict[str, str]:
    headers = {"Accept": "application/json", "User-Agent": USER_AGENT}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    if content_type:
        headers["Content-Type"] = content_type
    return headers


def _error_message(response: Any) -> Optional[str]:
    # Retool reports failures as {"success": false, "message": "..."}.
    try:
        data = response.json()
    except (json.JSONDecodeError, ValueError):
        return None
    if not isinstance(data, dict):
        return None
    for key in ("message", "error", "detail"):
        text = safe_str(data.get(key))
        if text and text.strip():
            return text.strip()
    return None


def describe_http_error(exc: httpx.HTTPError) -> str:
    """One-line, user-facing summary of an HTTP failure."""
    if isinstance(exc, httpx.HTTPStatusError):
        response = exc.response
        detail = f"{response.status_code} {response.reason_phrase}".strip()
        body = (getattr(response, "text", "") or "").strip()
        if not body:
            return detail
        suffix = _error_message(response) or body.splitlines()[0].strip()
        return f"{detail}: {suffix}" if suffix else detail

    message = str(exc).strip()
    if isinstance(exc, httpx.TimeoutException):
        label = "request timed out"
    elif isinstance(exc, httpx.ConnectError):
        label = "failed to connect"
    elif isinstance(exc, httpx.RequestError):
        label = "network error"
    else:
        label = message or exc.__class__.__name__
    summary = label
    if message and message != label and label.split()[-1] not in message.lower():
        summary = f"{label}: {message}"

    request = getattr(exc, "request", None)
    if request is not None:
        target = f"{request.method} {request.url}"
        if target not in summary:
            summary = f"{summary} ({target})"
    return summary


def request_with_retries(
    client: httpx.Client,
    method: str,
    url: Union[str, httpx.URL],
    *,
    headers: Optional[Dict[str, str]] = None,
    params: Any = None,
    json: Any = None,
    policy: RetryPolicy = DEFAULT_RETRY_POLICY,
    sleep: Callable[[float], None] = time.sleep,
) -> httpx.Response:
    """Send a request, repeating it on transport errors and 408/429/5xx responses.

    Only methods the policy allows are repeated. ``Retry-After`` is honoured up
    to ``policy.backoff_max`` seconds; otherwise the delay doubles per attempt.
    """
    method = (method or "GET").upper().strip()
    allow_retry = policy.allows(method)
    attempt = 0
    while True:
        attempt += 1
        try:
            response = client.request(method, url, headers=headers, params=params, json=json)
        except httpx.RequestError as exc:
            if not allow_retry or attempt >= policy.max_attempts:
                raise
            delay = policy.delay(attempt)
            log(f"{describe_http_error(exc)}; retrying in {delay:g}s")
        else:
            if (
                not allow_retry
                or response.status_code not in RETRYABLE_STATUSES
                or attempt >= policy.max_attempts
            ):
                return response
            delay = policy.delay(attempt, response)
            log(f"{method} {url} returned {response.status_code}; retrying in {delay:g}s")
        if delay > 0:
            sleep(delay)


def caused_by_status(exc: BaseException, status_code: int) -> bool:
    """Whether an ``HTTPStatusError`` with ``status_code`` is somewhere in the cause chain."""
    current: Optional[BaseException] = exc
    seen = set()
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, httpx.HTTPStatusError):
            return current.response.status_code == status_code
        current = current.__cause__ or current.__context__
    return False
