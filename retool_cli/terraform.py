"""`retool terraform`: generate Terraform import blocks and configuration."""

from __future__ import annotations

import sys
from pathlib import Path
from types import SimpleNamespace
from typing import List, Optional, Tuple

from .auth import require_auth_token
from .config import resolve_connection_settings
from .console import log
from .constants import HOST_ENV_VAR
from .context import AppContext
from .emitters import EmitContext, render_configuration, render_imports
from .errors import CLIError
from .identifiers import ImportSession
from .importers import import_retool_config
from .prompts import prompt_confirm
from .references import ReferenceMaps, fetch_root_folder_ids
from .retool_api import RetoolAPI
from .urls import api_base_url


def _output_path(value: Optional[str]) -> Optional[Path]:
    if value is None or not str(value).strip():
        return None
    return Path(str(value).strip()).expanduser()


def _stdin_is_interactive() -> bool:
    return sys.stdin.isatty()


def confirm_overwrite(paths: List[Path], *, force: bool) -> None:
    existing = [path for path in paths if path.exists()]
    if not existing or force:
        return
    for path in existing:
        if path.is_dir():
            raise CLIError(f"output path is a directory: {path}")
    names = ", ".join(str(path) for path in existing)
    if not _stdin_is_interactive():
        raise CLIError(f"refusing to overwrite {names}; pass --force to replace it")
    if not prompt_confirm(f"Overwrite {names}?", default=False):
        raise CLIError("aborted; existing files were left untouched")


def write_output(path: Path, text: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise CLIError(f"failed to write {path}: {exc}") from exc


def handle_terraform(args: SimpleNamespace, ctx: Optional[AppContext] = None) -> int:
    imports_path = _output_path(getattr(args, "imports", None))
    config_path = _output_path(getattr(args, "config", None))
    if imports_path is None and config_path is None:
        raise CLIError("nothing to generate; pass --imports PATH and/or --config PATH")
    if imports_path is not None and imports_path == config_path:
        raise CLIError("--imports and --config must point at different files")
    targets = [path for path in (imports_path, config_path) if path is not None]
    confirm_overwrite(targets, force=bool(getattr(args, "force", False)))

    ctx = ctx or AppContext()
    settings = resolve_connection_settings(
        ctx.load_config(),
        host=getattr(args, "host", None),
        scheme=getattr(args, "scheme", None),
        timeout=getattr(args, "timeout", None),
    )
    if not settings.host:
        raise CLIError(f"Retool host required; pass --host or set {HOST_ENV_VAR}")
    token = require_auth_token("generate Terraform configuration")
    base_url = api_base_url(settings.host, settings.scheme)
    log(f"reading organization configuration from {base_url}")

    outputs: List[Tuple[Path, str, str]] = []
    with ctx.new_http_client(settings.timeout) as client:
        api = RetoolAPI(client, base_url, token)
        resources = import_retool_config(api, ImportSession())

        if imports_path is not None:
            outputs.append((imports_path, "import", render_imports(resources)))

        if config_path is not None:
            refs = ReferenceMaps.from_resources(resources, fetch_root_folder_ids(api))
            text = render_configuration(resources, EmitContext(refs=refs, api=api))
            outputs.append((config_path, "resource", text))

    # Nothing is written until every requested file has rendered.
    for path, kind, text in outputs:
        write_output(path, text)
        log(f"wrote {len(resources)} {kind} block(s) to {path}")
    return 0
