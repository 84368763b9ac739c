"""Retool API v2 client used to discover an organization's configuration."""

from __future__ import annotations

import json
import time
from typing import Any, Callable, Dict, List, Optional

import httpx

from .console import log, log_warning
from .constants import MAX_LIST_PAGES
from .errors import RemoteFetchError, ResponseShapeError
from .http import (
    READ_ONLY_POST_POLICY,
    caused_by_status,
    describe_http_error,
    request_headers,
    request_with_retries,
)
from .models import (
    Folder,
    Group,
    PermissionEntry,
    SourceControlConfig,
    SourceControlSettings,
    Space,
    SSOConfig,
    parse_folder,
    parse_group,
    parse_permission_entry,
    parse_source_control_config,
    parse_source_control_settings,
    parse_space,
    parse_sso_config,
)
from .urls import api_url
from .utils import safe_bool, safe_str


def _listed_data(payload: Dict[str, Any], what: str) -> List[Any]:
    data = payload.get("data")
    if not isinstance(data, list):
        # Error envelopes such as {"success": false} carry no data list.
        raise ResponseShapeError(f"{what} response has no data list")
    return data


class RetoolAPI:
    """Authenticated access to the Retool API v2 endpoints of one organization."""

    def __init__(
        self,
        client: httpx.Client,
        base_url: str,
        token: str,
        *,
        max_pages: int = MAX_LIST_PAGES,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.client = client
        self.base_url = base_url
        self.token = token
        self.max_pages = max_pages
        self._sleep = sleep

    def _send(
        self,
        method: str,
        path: str,
        what: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        body: Any = None,
    ) -> Dict[str, Any]:
        url = api_url(self.base_url, path)
        content_type = "application/json" if body is not None else None
        headers = request_headers(self.token, content_type=content_type)
        try:
            response = request_with_retries(
                self.client,
                method,
                url,
                headers=headers,
                params=params,
                json=body,
                policy=READ_ONLY_POST_POLICY,
                sleep=self._sleep,
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            detail = describe_http_error(exc)
            raise RemoteFetchError(f"failed to fetch {what} from {url}: {detail}") from exc
        try:
            payload = response.json()
        except (json.JSONDecodeError, ValueError) as exc:
            raise ResponseShapeError(f"{what} response was not valid JSON") from exc
        if not isinstance(payload, dict):
            raise ResponseShapeError(f"unexpected {what} payload structure")
        return payload

    def list_all(self, path: str, what: str) -> List[Any]:
        """Collect every page of a list endpoint, following ``next_token``."""
        items: List[Any] = []
        params: Dict[str, Any] = {}
        seen_tokens = set()
        for _ in range(self.max_pages):
            payload = self._send("GET", path, what, params=params or None)
            items.extend(_listed_data(payload, what))

            next_token = safe_str(payload.get("next_token"))
            has_more = safe_bool(payload.get("has_more"))
            if not next_token or has_more is False or next_token in seen_tokens:
                break
            seen_tokens.add(next_token)
            params = {"next_token": next_token}
        else:
            log(f"stopped listing {what} after {self.max_pages} pages")
        return items

    def get_optional(self, path: str, what: str) -> Optional[Dict[str, Any]]:
        """Fetch a singleton settings object; ``None`` when the feature is not set up."""
        try:
            payload = self._send("GET", path, what)
        except RemoteFetchError as exc:
            if caused_by_status(exc, 404):
                log(f"{what} is not configured; skipping")
            else:
                log_warning(f"{what} could not be fetched; treating it as not configured")
            return None
        data = payload.get("data")
        if data is None or data == {}:
            log(f"{what} is not configured; skipping")
            return None
        if not isinstance(data, dict):
            raise ResponseShapeError(f"unexpected {what} payload structure")
        return data

    def list_folders(self) -> List[Folder]:
        return [parse_folder(entry) for entry in self.list_all("folders", "folders")]

    def list_groups(self) -> List[Group]:
        return [parse_group(entry) for entry in self.list_all("groups", "groups")]

    def list_spaces(self) -> List[Space]:
        return [parse_space(entry) for entry in self.list_all("spaces", "spaces")]

    def get_source_control_config(self) -> Optional[SourceControlConfig]:
        data = self.get_optional("source_control/config", "source control config")
        return parse_source_control_config(data) if data is not None else None

    def get_source_control_settings(self) -> Optional[SourceControlSettings]:
        data = self.get_optional("source_control/settings", "source control settings")
        return parse_source_control_settings(data) if data is not None else None

    def get_sso_config(self) -> Optional[SSOConfig]:
        data = self.get_optional("sso/config", "SSO config")
        return parse_sso_config(data) if data is not None else None

    def list_group_permissions(self, group_id: int, object_type: str) -> List[PermissionEntry]:
        what = f"{object_type} permissions for group {group_id}"
        body = {
            "subject": {"type": "group", "id": group_id},
            "object_type": object_type,
        }
        payload = self._send("POST", "permissions/listObjects", what, body=body)
        return [parse_permission_entry(entry) for entry in _listed_data(payload, what)]
