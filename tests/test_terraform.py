from types import SimpleNamespace
from typing import Any, List

import httpx
import pytest

import retool_cli.terraform as terraform
from retool_cli.config import ConfigFile
from retool_cli.context import AppContext
from retool_cli.errors import CLIError, DanglingReferenceError

from conftest import FakeClient

FOLDERS = [
    {"id": "root1", "name": "root", "folder_type": "app", "is_system_folder": True},
    {"id": "f1", "name": "Team Apps", "folder_type": "app", "parent_folder_id": "root1"},
]
GROUPS = [{"id": 7, "name": "Data Science"}, {"id": 1, "name": "admin"}]


def _context(table, calls=None, timeouts=None):
    def factory(timeout: httpx.Timeout):
        if timeouts is not None:
            timeouts.append(timeout)
        return FakeClient(table, calls)

    return AppContext(config=ConfigFile(), http_client_factory=factory)


def _args(tmp_path, **overrides):
    values = dict(
        imports=str(tmp_path / "imports.tf"),
        config=str(tmp_path / "main.tf"),
        host="acme.retool.com",
        scheme=None,
        timeout=None,
        force=False,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


@pytest.fixture
def token(monkeypatch):
    monkeypatch.setenv("RETOOL_ACCESS_TOKEN", "retool_0123456789abcdef")


def test_generates_import_and_config_files(tmp_path, routes, token, capsys):
    table = routes(folders=[FOLDERS], groups=[GROUPS])
    rc = terraform.handle_terraform(_args(tmp_path), _context(table))
    assert rc == 0

    imports = (tmp_path / "imports.tf").read_text(encoding="utf-8")
    assert imports == (
        "import {\n"
        "  to = retool_folder.team_apps\n"
        '  id = "f1"\n'
        "}\n"
        "\n"
        "import {\n"
        "  to = retool_group.data_science\n"
        '  id = "7"\n'
        "}\n"
        "\n"
        "import {\n"
        "  to = retool_permissions.data_science_permissions\n"
        '  id = "group|7"\n'
        "}\n"
    )

    config = (tmp_path / "main.tf").read_text(encoding="utf-8")
    assert 'resource "retool_folder" "team_apps" {' in config
    assert "parent_folder_id" not in config
    assert 'resource "retool_group" "data_science" {' in config
    assert "    id = retool_group.data_science.id" in config
    assert "  permissions = []" in config

    out = capsys.readouterr().out
    assert f"wrote 3 import block(s) to {tmp_path / 'imports.tf'}" in out
    assert f"wrote 3 resource block(s) to {tmp_path / 'main.tf'}" in out


def test_imports_only_skips_emit_phase(tmp_path, routes, token):
    calls: List[Any] = []
    table = routes(folders=[FOLDERS], groups=[GROUPS])
    terraform.handle_terraform(_args(tmp_path, config=None), _context(table, calls))
    assert (tmp_path / "imports.tf").exists()
    assert not (tmp_path / "main.tf").exists()
    assert not any(call[0] == "POST" for call in calls)
    assert [call[1] for call in calls].count("https://acme.retool.com/api/v2/folders") == 1


def test_requests_use_token_and_timeout(tmp_path, routes, token):
    calls: List[Any] = []
    timeouts: List[httpx.Timeout] = []
    table = routes()
    terraform.handle_terraform(_args(tmp_path, timeout=5.0), _context(table, calls, timeouts))
    assert timeouts[0].read == 5.0
    assert all(call[2]["Authorization"] == "Bearer retool_0123456789abcdef" for call in calls)
    assert all(call[2]["User-Agent"].startswith("retool_cli/") for call in calls)


def test_dangling_parent_folder_fails(tmp_path, routes, token):
    folders = FOLDERS + [
        {"id": "f2", "name": "Orphan", "folder_type": "app", "parent_folder_id": "gone"}
    ]
    table = routes(folders=[folders])
    with pytest.raises(DanglingReferenceError, match="gone"):
        terraform.handle_terraform(_args(tmp_path), _context(table))
    assert not (tmp_path / "imports.tf").exists()
    assert not (tmp_path / "main.tf").exists()


def test_failed_render_keeps_previous_outputs(tmp_path, routes, token):
    folders = FOLDERS + [
        {"id": "f2", "name": "Orphan", "folder_type": "app", "parent_folder_id": "gone"}
    ]
    (tmp_path / "imports.tf").write_text("previous imports", encoding="utf-8")
    (tmp_path / "main.tf").write_text("previous config", encoding="utf-8")
    with pytest.raises(DanglingReferenceError):
        terraform.handle_terraform(
            _args(tmp_path, force=True), _context(routes(folders=[folders]))
        )
    assert (tmp_path / "imports.tf").read_text(encoding="utf-8") == "previous imports"
    assert (tmp_path / "main.tf").read_text(encoding="utf-8") == "previous config"


def test_requires_an_output_path(tmp_path):
    with pytest.raises(CLIError, match="nothing to generate"):
        terraform.handle_terraform(_args(tmp_path, imports=None, config=None), _context({}))


def test_rejects_identical_output_paths(tmp_path):
    same = str(tmp_path / "out.tf")
    with pytest.raises(CLIError, match="different files"):
        terraform.handle_terraform(_args(tmp_path, imports=same, config=same), _context({}))


def test_requires_host(tmp_path, token):
    with pytest.raises(CLIError, match="RETOOL_HOST"):
        terraform.handle_terraform(_args(tmp_path, host=None), _context({}))


def test_host_from_environment(tmp_path, routes, token, monkeypatch):
    monkeypatch.setenv("RETOOL_HOST", "acme.retool.com")
    calls: List[Any] = []
    terraform.handle_terraform(_args(tmp_path, host=None), _context(routes(), calls))
    assert calls[0][1].startswith("https://acme.retool.com/api/v2/")


def test_requires_token(tmp_path):
    with pytest.raises(CLIError, match="access token required"):
        terraform.handle_terraform(_args(tmp_path), _context({}))


def test_refuses_to_overwrite_without_force(tmp_path, token, monkeypatch):
    existing = tmp_path / "imports.tf"
    existing.write_text("keep me", encoding="utf-8")
    monkeypatch.setattr(terraform, "_stdin_is_interactive", lambda: False)
    with pytest.raises(CLIError, match="--force"):
        terraform.handle_terraform(_args(tmp_path), _context({}))
    assert existing.read_text(encoding="utf-8") == "keep me"


def test_overwrite_declined_interactively(tmp_path, token, monkeypatch):
    (tmp_path / "main.tf").write_text("keep me", encoding="utf-8")
    monkeypatch.setattr(terraform, "_stdin_is_interactive", lambda: True)
    monkeypatch.setattr(terraform, "prompt_confirm", lambda prompt, default: False)
    with pytest.raises(CLIError, match="aborted"):
        terraform.handle_terraform(_args(tmp_path), _context({}))


def test_force_overwrites(tmp_path, routes, token):
    (tmp_path / "imports.tf").write_text("old", encoding="utf-8")
    terraform.handle_terraform(_args(tmp_path, force=True, config=None), _context(routes()))
    assert (tmp_path / "imports.tf").read_text(encoding="utf-8") == ""


def test_output_directories_are_created(tmp_path, routes, token):
    target = tmp_path / "nested" / "dir" / "imports.tf"
    terraform.handle_terraform(_args(tmp_path, imports=str(target), config=None), _context(routes()))
    assert target.exists()
