from typing import Any, List

import pytest

from conftest import BASE_URL, make_response, paged
from retool_cli.errors import RemoteFetchError, ResponseShapeError


def test_list_all_follows_next_token(make_api, routes):
    calls: List[Any] = []
    api = make_api(
        routes(
            groups=[
                [{"id": 2, "name": "B"}],
                [{"id": 1, "name": "A"}],
                [{"id": 3, "name": "C"}],
            ]
        ),
        calls,
    )
    groups = api.list_groups()
    assert [group.id for group in groups] == [2, 1, 3]
    assert [call[3] for call in calls] == [None, {"next_token": "page-1"}, {"next_token": "page-2"}]
    assert calls[0][2]["Authorization"] == "Bearer retool_test_token"


def test_list_all_stops_on_repeated_token(make_api):
    url = f"{BASE_URL}/spaces"

    def handler(*, params=None, json=None):
        return make_response(
            url,
            json_data={"data": [{"id": "s", "name": "n", "domain": "d"}], "has_more": True, "next_token": "same"},
        )

    api = make_api({("GET", url): handler})
    assert len(api.list_spaces()) == 2


def test_list_all_respects_page_limit(make_api):
    url = f"{BASE_URL}/folders"
    pages = [[{"id": f"f{i}", "name": "x", "folder_type": "app"}] for i in range(5)]
    api = make_api({("GET", url): paged(url, pages)})
    api.max_pages = 2
    assert [folder.id for folder in api.list_folders()] == ["f0", "f1"]


def test_list_failure_is_fatal(make_api):
    url = f"{BASE_URL}/folders"
    api = make_api(
        {("GET", url): make_response(url, status_code=401, content=b'{"message": "bad token"}')}
    )
    with pytest.raises(RemoteFetchError, match="401 Unauthorized: bad token"):
        api.list_folders()


def test_list_retries_server_errors(make_api):
    url = f"{BASE_URL}/groups"
    calls: List[Any] = []
    api = make_api(
        {
            ("GET", url): [
                make_response(url, status_code=503),
                make_response(url, json_data={"data": [{"id": 9, "name": "Ops"}]}),
            ]
        },
        calls,
    )
    assert [group.name for group in api.list_groups()] == ["Ops"]
    assert len(calls) == 2


def test_list_rejects_non_list_data(make_api):
    url = f"{BASE_URL}/groups"
    api = make_api({("GET", url): make_response(url, json_data={"data": {"id": 1}})})
    with pytest.raises(ResponseShapeError):
        api.list_groups()


def test_list_without_data_is_a_shape_error(make_api):
    url = f"{BASE_URL}/folders"
    api = make_api(
        {("GET", url): make_response(url, json_data={"success": False, "message": "internal"})}
    )
    with pytest.raises(ResponseShapeError, match="no data list"):
        api.list_folders()


def test_invalid_json_is_a_shape_error(make_api):
    url = f"{BASE_URL}/spaces"
    api = make_api({("GET", url): make_response(url, content=b"<html>")})
    with pytest.raises(ResponseShapeError, match="not valid JSON"):
        api.list_spaces()


def test_missing_singleton_is_skipped(make_api, routes, capsys):
    api = make_api(routes())
    assert api.get_sso_config() is None
    assert "SSO config is not configured" in capsys.readouterr().out


def test_failed_singleton_degrades(make_api):
    url = f"{BASE_URL}/source_control/settings"
    api = make_api({("GET", url): make_response(url, status_code=403)})
    assert api.get_source_control_settings() is None


def test_empty_singleton_data_is_skipped(make_api):
    url = f"{BASE_URL}/source_control/config"
    api = make_api({("GET", url): make_response(url, json_data={"data": {}})})
    assert api.get_source_control_config() is None


def test_malformed_singleton_is_fatal(make_api):
    url = f"{BASE_URL}/sso/config"
    api = make_api({("GET", url): make_response(url, json_data={"data": {"config_type": "nope"}})})
    with pytest.raises(ResponseShapeError):
        api.get_sso_config()


def test_list_group_permissions_posts_subject(make_api, routes):
    calls: List[Any] = []
    api = make_api(
        routes(permissions={(7, "app"): [{"type": "app", "id": "a1", "access_level": "use"}]}),
        calls,
    )
    entries = api.list_group_permissions(7, "app")
    assert [entry.object_id for entry in entries] == ["a1"]
    method, url, headers, _, body = calls[0]
    assert (method, url) == ("POST", f"{BASE_URL}/permissions/listObjects")
    assert body == {"subject": {"type": "group", "id": 7}, "object_type": "app"}
    assert headers["Content-Type"] == "application/json"
