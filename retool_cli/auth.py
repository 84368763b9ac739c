"""Retool API access token lookup and keyring storage.

The token is resolved from ``RETOOL_ACCESS_TOKEN`` first and the system
keyring second. Only the keyring copy is managed by ``retool auth``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from types import SimpleNamespace
from typing import Optional

import keyring
from keyring.errors import KeyringError, NoKeyringError, PasswordDeleteError

from .console import log, log_warning
from .constants import AUTH_TOKEN_ENV_VAR, KEYRING_SERVICE, KEYRING_USERNAME
from .errors import CLIError
from .prompts import prompt_access_token

SOURCE_ENV = "env"
SOURCE_KEYRING = "keyring"

_SOURCE_LABELS = {
    SOURCE_ENV: f"environment variable {AUTH_TOKEN_ENV_VAR}",
    SOURCE_KEYRING: "system keyring",
}


@dataclass(frozen=True)
class TokenLookup:
    token: Optional[str] = None
    source: Optional[str] = None

    @property
    def found(self) -> bool:
        return bool(self.token)


def mask_token(token: str) -> str:
    if len(token) <= 8:
        return "*" * len(token)
    return f"{token[:4]}...{token[-4:]}"


def _keyring_token() -> Optional[str]:
    try:
        stored = keyring.get_password(KEYRING_SERVICE, KEYRING_USERNAME)
    except NoKeyringError:
        return None
    except KeyringError as exc:
        log_warning(f"could not read the system keyring: {exc}")
        return None
    return (stored or "").strip() or None


def lookup_token() -> TokenLookup:
    from_env = os.environ.get(AUTH_TOKEN_ENV_VAR, "").strip()
    if from_env:
        return TokenLookup(from_env, SOURCE_ENV)
    stored = _keyring_token()
    if stored:
        return TokenLookup(stored, SOURCE_KEYRING)
    return TokenLookup()


def require_auth_token(purpose: str = "perform this action") -> str:
    lookup = lookup_token()
    if not lookup.found:
        raise CLIError(
            f"access token required to {purpose}; set {AUTH_TOKEN_ENV_VAR} "
            "or run 'retool auth login'"
        )
    return lookup.token or ""


def store_token(token: str) -> None:
    value = token.strip()
    if not value:
        raise CLIError("refusing to store an empty access token")
    fallback = f"set {AUTH_TOKEN_ENV_VAR} instead"
    try:
        keyring.set_password(KEYRING_SERVICE, KEYRING_USERNAME, value)
    except NoKeyringError as exc:
        raise CLIError(f"no system keyring is available; {fallback}") from exc
    except KeyringError as exc:
        raise CLIError(f"could not write to the system keyring ({exc}); {fallback}") from exc
    log(f"saved access token {mask_token(value)} to the system keyring")


def forget_token() -> bool:
    """Delete the keyring copy of the token; False when there was none."""
    try:
        keyring.delete_password(KEYRING_SERVICE, KEYRING_USERNAME)
    except (NoKeyringError, PasswordDeleteError):
        return False
    return True


def read_login_token(args: SimpleNamespace) -> str:
    given = (getattr(args, "token", None) or "").strip()
    if given:
        return given
    if getattr(args, "no_prompt", False):
        raise CLIError("no access token provided; pass --token or omit --no-prompt")
    return prompt_access_token()


def handle_auth_login(args: SimpleNamespace) -> int:
    store_token(read_login_token(args))
    return 0


def handle_auth_logout(_: SimpleNamespace) -> int:
    if forget_token():
        log("removed access token from the system keyring")
    else:
        log("no access token was stored in the system keyring")
    return 0


def handle_auth_status(_: SimpleNamespace) -> int:
    lookup = lookup_token()
    if not lookup.found:
        backend = keyring.get_keyring()
        log("access token not configured")
        log(f"keyring backend: {getattr(backend, 'name', None) or type(backend).__name__}")
        return 0
    log(f"access token source: {_SOURCE_LABELS[lookup.source or SOURCE_KEYRING]}")
    log(f"token in use {mask_token(lookup.token or '')}")
    return 0
