"""Configuration file and environment support for retool_cli."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Dict, Optional, Tuple

from platformdirs import PlatformDirs

from .console import log
from .constants import (
    AUTH_TOKEN_ENV_VAR,
    CONFIG_ENV_VAR,
    DEFAULT_CONFIG_DIR_NAME,
    DEFAULT_SCHEME,
    HOST_ENV_VAR,
    HTTP_TIMEOUT_SECONDS,
    SCHEME_ENV_VAR,
    TIMEOUT_ENV_VAR,
)
from .errors import CLIError
from .utils import safe_float, safe_str

try:
    import tomllib  # py311+
except ModuleNotFoundError:  # pragma: no cover (py<311)
    import tomli as tomllib

SUPPORTED_SCHEMES = ("https", "http")


@dataclass(frozen=True)
class ConfigFile:
    host: Optional[str] = None
    scheme: Optional[str] = None
    timeout: Optional[float] = None


@dataclass(frozen=True)
class ConnectionSettings:
    """Resolved connection parameters for one command invocation."""

    host: Optional[str]
    scheme: str
    timeout: float
    sources: Dict[str, str]


def default_config_path() -> Path:
    dirs = PlatformDirs(appname=DEFAULT_CONFIG_DIR_NAME, appauthor=False, roaming=True)
    return Path(dirs.user_config_path) / "config.toml"


def resolve_config_path() -> Path:
    env_value = (os.environ.get(CONFIG_ENV_VAR) or "").strip()
    if env_value:
        return Path(env_value).expanduser()
    return default_config_path()


def _stripped(value: Any) -> Optional[str]:
    return (safe_str(value) or "").strip() or None


def _positive_float(value: Any) -> Optional[float]:
    parsed = safe_float(value)
    if parsed is None or parsed <= 0:
        return None
    return parsed


def load_config(path: Optional[Path] = None) -> ConfigFile:
    config_path = path or resolve_config_path()
    if not config_path.exists():
        return ConfigFile()
    try:
        data = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise CLIError(f"failed to read config file {config_path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise CLIError(f"failed to parse config file {config_path}: {exc}") from exc
    if not isinstance(data, dict):
        return ConfigFile()
    return ConfigFile(
        host=_stripped(data.get("host")),
        scheme=_stripped(data.get("scheme")),
        timeout=_positive_float(data.get("timeout")),
    )


def config_template() -> str:
    return (
        "# retool_cli settings, read by every command that talks to Retool.\n"
        "# Command-line flags override environment variables, which override\n"
        "# the values below; anything left unset falls back to a default.\n"
        "#\n"
        f"# The access token is never read from this file; set {AUTH_TOKEN_ENV_VAR}\n"
        "# or run 'retool auth login'.\n"
        "\n"
        "# host = \"acme.retool.com\"\n"
        "# scheme = \"https\"\n"
        f"# timeout = {HTTP_TIMEOUT_SECONDS:g}  # seconds per HTTP request\n"
    )


def write_default_config(path: Optional[Path] = None, *, force: bool) -> Path:
    config_path = path or resolve_config_path()
    if config_path.exists() and not force:
        raise CLIError(f"config file already exists: {config_path} (use --force to overwrite)")
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(config_template(), encoding="utf-8")
    except OSError as exc:
        raise CLIError(f"failed to write config file {config_path}: {exc}") from exc
    return config_path


def _pick(
    flag_name: str, flag: Any, env_name: str, file_value: Any
) -> Tuple[str, str, Optional[str]]:
    """Return ``(source, label, text)`` for the highest-precedence non-empty layer."""
    layers = (
        ("flag", flag_name, flag),
        ("env", env_name, os.environ.get(env_name)),
        ("config", "config file", file_value),
    )
    for source, label, raw in layers:
        text = _stripped(raw)
        if text is not None:
            return source, label, text
    return "default", "built-in default", None


def _scheme_from(text: str, label: str) -> str:
    scheme = text.lower()
    if scheme not in SUPPORTED_SCHEMES:
        raise CLIError(
            f"unsupported scheme '{text}' from {label}; expected one of: "
            + ", ".join(SUPPORTED_SCHEMES)
        )
    return scheme


def _timeout_from(text: str, label: str) -> float:
    seconds = _positive_float(text)
    if seconds is None:
        raise CLIError(f"{label} must be a positive number of seconds (got '{text}')")
    return seconds


def resolve_connection_settings(
    config: ConfigFile,
    *,
    host: Optional[str] = None,
    scheme: Optional[str] = None,
    timeout: Optional[float] = None,
) -> ConnectionSettings:
    """Merge CLI flags, environment variables and the config file, in that order."""
    host_source, _, host_text = _pick("--host", host, HOST_ENV_VAR, config.host)

    scheme_source, label, scheme_text = _pick("--scheme", scheme, SCHEME_ENV_VAR, config.scheme)
    resolved_scheme = _scheme_from(scheme_text, label) if scheme_text else DEFAULT_SCHEME

    timeout_source, label, timeout_text = _pick(
        "--timeout", timeout, TIMEOUT_ENV_VAR, config.timeout
    )
    resolved_timeout = (
        _timeout_from(timeout_text, label) if timeout_text else HTTP_TIMEOUT_SECONDS
    )

    return ConnectionSettings(
        host=host_text,
        scheme=resolved_scheme,
        timeout=resolved_timeout,
        sources={"host": host_source, "scheme": scheme_source, "timeout": timeout_source},
    )


def effective_config(config: ConfigFile) -> Tuple[Dict[str, Any], Dict[str, str]]:
    """Values ``config show`` reports, ignoring CLI flags, plus where each came from."""
    settings = resolve_connection_settings(config)
    values: Dict[str, Any] = {
        "host": settings.host,
        "scheme": settings.scheme,
        "timeout": settings.timeout,
    }
    return values, dict(settings.sources)


def handle_config_init(args: SimpleNamespace) -> int:
    path = write_default_config(force=bool(getattr(args, "force", False)))
    log(f"wrote config template to {path}")
    return 0


def handle_config_show(args: SimpleNamespace) -> int:
    path = resolve_config_path()
    values, sources = effective_config(load_config(path))
    if getattr(args, "json", False):
        payload = {"config_path": str(path), "values": values, "sources": sources}
        print(json.dumps(payload, indent=2, sort_keys=True))
        return 0
    print(f"config_path: {path}{'' if path.exists() else ' (not found)'}")
    for key in ("host", "scheme", "timeout"):
        value = values.get(key)
        print(f"{key}: {value if value is not None else '-'} ({sources.get(key, 'default')})")
    return 0
