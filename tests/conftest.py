from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import httpx
import keyring
import pytest
from keyring.backend import KeyringBackend
from keyring.errors import PasswordDeleteError

from retool_cli.console import reset_console

BASE_URL = "https://acme.retool.com/api/v2"


class MemoryKeyring(KeyringBackend):
    priority = 1

    def __init__(self) -> None:
        self._storage: Dict[tuple, str] = {}

    def get_password(self, service: str, username: str) -> Optional[str]:
        return self._storage.get((service, username))

    def set_password(self, service: str, username: str, password: str) -> None:
        self._storage[(service, username)] = password

    def delete_password(self, service: str, username: str) -> None:
        try:
            del self._storage[(service, username)]
        except KeyError as exc:
            raise PasswordDeleteError(str(exc)) from exc


@pytest.fixture(autouse=True)
def memory_keyring() -> None:
    original = keyring.get_keyring()
    keyring.set_keyring(MemoryKeyring())
    try:
        yield
    finally:
        keyring.set_keyring(original)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path) -> None:
    for name in (
        "RETOOL_HOST",
        "RETOOL_ACCESS_TOKEN",
        "RETOOL_SCHEME",
        "RETOOL_CLI_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("RETOOL_CLI_CONFIG", str(tmp_path / "config" / "config.toml"))
    reset_console()
    yield
    reset_console()


def make_response(
    url: str,
    *,
    status_code: int = 200,
    content: bytes = b"",
    json_data: Any = None,
    headers: Optional[Dict[str, str]] = None,
) -> httpx.Response:
    """A real ``httpx.Response`` bound to a GET request for ``url``."""
    request = httpx.Request("GET", url)
    if json_data is not None:
        return httpx.Response(status_code, json=json_data, headers=headers, request=request)
    return httpx.Response(status_code, content=content, headers=headers, request=request)


Route = Any


class FakeClient:
    """Answers requests from a ``(method, url) -> response`` table.

    A route is an ``httpx.Response``, a list of responses consumed in order, or a
    callable receiving ``params`` and ``json`` and returning a response.
    """

    def __init__(
        self, routes: Dict[Tuple[str, str], Route], calls: Optional[list] = None
    ) -> None:
        self.routes = dict(routes)
        self.calls = [] if calls is None else calls
        self.closed = False

    def __enter__(self) -> FakeClient:
        return self

    def __exit__(self, *exc: Any) -> bool:
        self.closed = True
        return False

    def request(
        self,
        method: str,
        url: Any,
        *,
        headers: Optional[Dict[str, str]] = None,
        params: Any = None,
        json: Any = None,
    ) -> httpx.Response:
        self.calls.append((method, str(url), headers or {}, params, json))
        route = self.routes.get((method, str(url)))
        if route is None:
            raise AssertionError(f"unexpected request: {method} {url}")
        if isinstance(route, list):
            if not route:
                raise AssertionError(f"no responses left for {method} {url}")
            return route.pop(0)
        if callable(route):
            return route(params=params, json=json)
        return route


def paged(url: str, pages: Sequence[List[Dict[str, Any]]]) -> Callable[..., httpx.Response]:
    """A list endpoint serving ``pages`` through ``next_token`` pagination."""

    def handler(*, params: Any = None, json: Any = None) -> httpx.Response:
        token = (params or {}).get("next_token")
        index = int(token[len("page-"):]) if token else 0
        has_more = index + 1 < len(pages)
        body = {
            "data": pages[index] if pages else [],
            "has_more": has_more,
            "next_token": f"page-{index + 1}" if has_more else None,
        }
        return make_response(url, json_data=body)

    return handler


def singleton(url: str, data: Optional[Dict[str, Any]]) -> httpx.Response:
    if data is None:
        return make_response(url, status_code=404, content=b"not found")
    return make_response(url, json_data={"success": True, "data": data})


def permissions_route(
    entries: Dict[Tuple[int, str], List[Dict[str, Any]]],
    failing: Sequence[int] = (),
) -> Callable[..., httpx.Response]:
    url = f"{BASE_URL}/permissions/listObjects"

    def handler(*, params: Any = None, json: Any = None) -> httpx.Response:
        group_id = json["subject"]["id"]
        if group_id in failing:
            return make_response(url, status_code=403, content=b"forbidden")
        data = entries.get((group_id, json["object_type"]), [])
        return make_response(url, json_data={"success": True, "data": data})

    return handler


def org_routes(
    *,
    folders: Sequence[List[Dict[str, Any]]] = ((),),
    groups: Sequence[List[Dict[str, Any]]] = ((),),
    spaces: Sequence[List[Dict[str, Any]]] = ((),),
    permissions: Optional[Dict[Tuple[int, str], List[Dict[str, Any]]]] = None,
    failing_permissions: Sequence[int] = (),
    source_control: Optional[Dict[str, Any]] = None,
    source_control_settings: Optional[Dict[str, Any]] = None,
    sso: Optional[Dict[str, Any]] = None,
) -> Dict[Tuple[str, str], Route]:
    def listing(path: str, pages: Sequence[Sequence[Dict[str, Any]]]) -> Route:
        return paged(f"{BASE_URL}/{path}", [list(page) for page in pages])

    return {
        ("GET", f"{BASE_URL}/folders"): listing("folders", folders),
        ("GET", f"{BASE_URL}/groups"): listing("groups", groups),
        ("GET", f"{BASE_URL}/spaces"): listing("spaces", spaces),
        ("POST", f"{BASE_URL}/permissions/listObjects"): permissions_route(
            permissions or {}, failing_permissions
        ),
        ("GET", f"{BASE_URL}/source_control/config"): singleton(
            f"{BASE_URL}/source_control/config", source_control
        ),
        ("GET", f"{BASE_URL}/source_control/settings"): singleton(
            f"{BASE_URL}/source_control/settings", source_control_settings
        ),
        ("GET", f"{BASE_URL}/sso/config"): singleton(f"{BASE_URL}/sso/config", sso),
    }


@pytest.fixture
def fake_response() -> Callable[..., httpx.Response]:
    return make_response


@pytest.fixture
def fake_client() -> type[FakeClient]:
    return FakeClient


@pytest.fixture
def make_api():
    from retool_cli.retool_api import RetoolAPI

    def _make(routes: Dict[Tuple[str, str], Route], calls: Optional[list] = None) -> RetoolAPI:
        client = FakeClient(routes, calls)
        return RetoolAPI(client, BASE_URL, "retool_test_token", sleep=lambda _: None)

    return _make


@pytest.fixture
def routes():
    return org_routes
