#!/usr/bin/env python3
"""retool_cli CLI entry point."""

from __future__ import annotations

import sys
from types import SimpleNamespace
from typing import Any, Callable, Optional, Sequence

import typer

from .auth import handle_auth_login, handle_auth_logout, handle_auth_status
from .config import handle_config_init, handle_config_show
from .console import configure_console, log_error
from .constants import EXIT_CODE_INTERRUPT, EXIT_CODE_USAGE, PROG_NAME
from .context import AppContext
from .errors import CLIError
from .prompts import InteractionAborted
from .terraform import handle_terraform
from .version import cli_version

# Usage errors derive from ClickException of whichever click build typer runs
# on: the click package, or the copy newer typer releases bundle.
_ClickException = next(
    base for base in typer.BadParameter.__mro__ if base.__name__ == "ClickException"
)

app = typer.Typer(help="Command-line tools for the Retool platform")
auth_app = typer.Typer(help="Manage the stored Retool API access token")
config_app = typer.Typer(help="Inspect and create the retool_cli config file")
app.add_typer(auth_app, name="auth")
app.add_typer(config_app, name="config")


def build_app_context() -> AppContext:
    return AppContext()


def _dispatch(handler: Callable[..., int], *extra: Any, **options: Any) -> None:
    """Run a command handler and turn its result into the process exit code."""
    try:
        rc = handler(SimpleNamespace(**options), *extra)
    except CLIError as exc:
        log_error(f"error: {exc}")
        raise typer.Exit(code=EXIT_CODE_USAGE) from exc
    raise typer.Exit(code=rc)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"{PROG_NAME} {cli_version()}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def cli_callback(
    ctx: typer.Context,
    quiet: bool = typer.Option(False, "--quiet", "-q", help="suppress progress messages"),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="print the CLI version and exit",
    ),
) -> None:
    configure_console(quiet=quiet)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=EXIT_CODE_USAGE)


@app.command()
def terraform(
    imports: Optional[str] = typer.Option(
        None, "--imports", "-i", help="write Terraform import blocks to this file"
    ),
    config: Optional[str] = typer.Option(
        None, "--config", "-c", help="write Terraform resource configuration to this file"
    ),
    host: Optional[str] = typer.Option(
        None, "--host", help="Retool organization host, e.g. acme.retool.com"
    ),
    scheme: Optional[str] = typer.Option(None, "--scheme", help="http or https (default: https)"),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="per-request timeout in seconds (default: 30)"
    ),
    force: bool = typer.Option(False, "--force", help="overwrite existing output files"),
) -> None:
    """Generate Terraform configuration from an existing Retool organization."""
    _dispatch(
        handle_terraform,
        build_app_context(),
        imports=imports,
        config=config,
        host=host,
        scheme=scheme,
        timeout=timeout,
        force=force,
    )


@auth_app.command("login")
def auth_login(
    token: Optional[str] = typer.Option(
        None, "--token", help="access token to store (prompted when omitted)"
    ),
    no_prompt: bool = typer.Option(
        False, "--no-prompt", help="fail instead of prompting for a token"
    ),
) -> None:
    _dispatch(handle_auth_login, token=token, no_prompt=no_prompt)


@auth_app.command("logout")
def auth_logout() -> None:
    _dispatch(handle_auth_logout)


@auth_app.command("status")
def auth_status() -> None:
    _dispatch(handle_auth_status)


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="overwrite an existing config file"),
) -> None:
    _dispatch(handle_config_init, force=force)


@config_app.command("show")
def config_show(
    json_output: bool = typer.Option(False, "--json", help="print machine-readable JSON"),
) -> None:
    _dispatch(handle_config_show, json=json_output)


def main(argv: Optional[Sequence[str]] = None) -> int:
    command = typer.main.get_command(app)
    try:
        rc = command.main(
            args=list(argv) if argv is not None else None,
            prog_name=PROG_NAME,
            standalone_mode=False,
        )
    except (KeyboardInterrupt, typer.Abort, InteractionAborted):
        log_error("interrupted")
        return EXIT_CODE_INTERRUPT
    except _ClickException as exc:
        exc.show()
        return exc.exit_code
    except SystemExit as exc:
        return int(exc.code or 0)
    return int(rc or 0)


if __name__ == "__main__":
    sys.exit(main())
