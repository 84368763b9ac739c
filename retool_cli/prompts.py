"""questionary prompts used by retool_cli commands."""

from __future__ import annotations

from typing import Any

import questionary

from .console import log_error


class InteractionAborted(Exception):
    """Raised when the user cancels a prompt (Ctrl-C or EOF)."""


def _ask(question: Any) -> Any:
    answer = question.ask()
    if answer is None:
        raise InteractionAborted()
    return answer


def prompt_confirm(prompt: str, *, default: bool) -> bool:
    return bool(_ask(questionary.confirm(prompt, default=default)))


def prompt_access_token() -> str:
    """Ask for a Retool API access token with hidden input until one is given."""
    while True:
        token = str(_ask(questionary.password("Retool API access token:"))).strip()
        if token:
            return token
        log_error("access token cannot be empty")
