"""Typer developer CLI for authflow.

Handy for checking a provider setup before wiring it into an application:

    authflow authorize-url github.json   # print the authorization URL
    authflow token password-grant.json   # run the password grant
    authflow platforms                   # show callback field overrides
    authflow config set state_ttl_seconds 600   # persist a setting

Strategy configs are JSON files validated into
:data:`~authflow.models.AuthenticateConfig` (see
:func:`~authflow.config.load_strategy_config`). State values generated by
``authorize-url`` land in the regular state cache, so a callback handled by
the application afterwards verifies against them.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from authflow import __version__
from authflow.auth.user_service import UserService
from authflow.cache import StateCache, state_key
from authflow.config import (
    get_config_dir,
    load_settings,
    load_strategy_config,
    resolve_settings,
    save_settings,
    state_cache_dir,
)
from authflow.exceptions import AuthflowError, ConfigurationError
from authflow.models import OAuth2Config, OidcConfig, Settings, SocialConfig
from authflow.oauth2.authorize import build_authorize_url
from authflow.oauth2.pkce import generate_state
from authflow.oauth2.token import get_access_token
from authflow.oidc.strategy import OidcStrategy
from authflow.request import InboundRequest
from authflow.social.adapter import AdapterRegistry
from authflow.social.callback import CALLBACK_CODE_FIELDS, DEFAULT_CODE_FIELD, TWITTER
from authflow.social.driver import SocialLoginDriver

app = typer.Typer(
    name="authflow",
    help="Inspect and exercise authflow strategy configs.",
    no_args_is_help=True,
)

config_app = typer.Typer(no_args_is_help=True)
app.add_typer(config_app, name="config", help="View and modify authflow settings.")

console = Console()
err_console = Console(stderr=True)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"authflow {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _open_cache(settings: Settings) -> StateCache:
    return StateCache(state_cache_dir(settings), default_ttl=settings.state_ttl_seconds)


def _authorize_url(config: object, settings: Settings, cache: StateCache) -> str:
    match config:
        case OAuth2Config():
            return build_authorize_url(config, cache, settings.state_ttl_seconds)
        case OidcConfig():
            resolved = OidcStrategy(UserService(), settings, cache).resolve_config(config)
            return build_authorize_url(resolved, cache, settings.state_ttl_seconds)
        case SocialConfig():
            adapter = AdapterRegistry().resolve(config, settings.http_timeout)
            state = config.state or generate_state()
            cache.put(state_key(config.client_id, config.platform), state)
            return SocialLoginDriver(adapter).authorize(state)
        case _:
            raise ConfigurationError(
                f"'{type(config).__name__}' has no authorization URL"
            )


@app.command("authorize-url")
def authorize_url(
    config_path: Path = typer.Argument(help="Path to a strategy config JSON file."),
) -> None:
    """Print the authorization URL for an oauth2, oidc, or social config."""
    settings = resolve_settings()
    cache = _open_cache(settings)
    try:
        config = load_strategy_config(config_path)
        url = _authorize_url(config, settings, cache)
    except AuthflowError as exc:
        err_console.print(f"[red]Error ({exc.error_code}):[/red] {exc.message}")
        raise typer.Exit(code=1) from None
    finally:
        cache.close()
    console.print(url, soft_wrap=True)


@app.command("token")
def token(
    config_path: Path = typer.Argument(help="Path to an oauth2 config JSON file."),
) -> None:
    """Request a token for a config that needs no browser (password grant)."""
    settings = resolve_settings()
    cache = _open_cache(settings)
    try:
        config = load_strategy_config(config_path)
        if not isinstance(config, OAuth2Config):
            raise ConfigurationError("The token command requires an oauth2 config")
        access_token = get_access_token(
            InboundRequest(), config, cache, settings.http_timeout
        )
    except AuthflowError as exc:
        err_console.print(f"[red]Error ({exc.error_code}):[/red] {exc.message}")
        raise typer.Exit(code=1) from None
    finally:
        cache.close()
    console.print_json(json.dumps(access_token.model_dump()))


@app.command("platforms")
def platforms() -> None:
    """Show which callback parameter marks a callback for each platform."""
    table = Table(title="Callback parameters")
    table.add_column("Platform")
    table.add_column("Parameter")
    table.add_row(TWITTER, "oauth_token (present)")
    for platform, field in sorted(CALLBACK_CODE_FIELDS.items()):
        table.add_row(platform, field)
    table.add_row("(any other)", DEFAULT_CODE_FIELD)
    console.print(table)


@config_app.command("show")
def config_show() -> None:
    """Show the settings file (environment overrides not applied)."""
    try:
        settings = load_settings()
    except AuthflowError as exc:
        err_console.print(f"[red]Error ({exc.error_code}):[/red] {exc.message}")
        raise typer.Exit(code=1) from None
    err_console.print(f"Config directory: {get_config_dir()}")
    console.print_json(json.dumps(settings.model_dump(mode="json")))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Settings field, e.g. 'state_ttl_seconds'."),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set one settings field and save the file.

    The value is validated against :class:`~authflow.models.Settings`
    before anything is written.

    Example::

        authflow config set state_ttl_seconds 600
        authflow config set cache_dir /var/cache/authflow
    """
    try:
        data = load_settings().model_dump(mode="json")
    except AuthflowError as exc:
        err_console.print(f"[red]Error ({exc.error_code}):[/red] {exc.message}")
        raise typer.Exit(code=1) from None

    if key not in data:
        err_console.print(f"[red]Unknown settings key:[/red] {key}")
        raise typer.Exit(code=2)
    data[key] = value

    try:
        settings = Settings.model_validate(data)
    except ValidationError as exc:
        err_console.print(f"[red]Validation error:[/red] {exc}")
        raise typer.Exit(code=2) from None

    save_settings(settings)
    console.print(f"Set {key} = {value}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Reset the settings file to defaults."""
    if not force and not typer.confirm("Reset all settings to defaults?"):
        console.print("Cancelled.")
        raise typer.Exit()
    save_settings(Settings())
    console.print("Settings reset to defaults.")


def main() -> None:
    """Console-script entry point."""
    app()


if __name__ == "__main__":
    main()
