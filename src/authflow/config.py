"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for authflow:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.authflow/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_cache_dir`.
* **Settings** -- A single :class:`~authflow.models.Settings` JSON file
  storing the session key, state TTL, and HTTP timeout.
* **Precedence resolution** -- :func:`resolve_settings` layers environment
  variables over the settings file over defaults.
* **Strategy configs** -- :func:`load_strategy_config` validates a JSON
  document into the :data:`~authflow.models.AuthenticateConfig` union.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from authflow.exceptions import ConfigurationError
from authflow.models import AuthenticateConfig, Settings

_APP_NAME = "authflow"
_CONFIG_FILENAME = "config.json"

ENV_SESSION_KEY = "AUTHFLOW_SESSION_KEY"
ENV_STATE_TTL = "AUTHFLOW_STATE_TTL"
ENV_HTTP_TIMEOUT = "AUTHFLOW_HTTP_TIMEOUT"
ENV_CACHE_DIR = "AUTHFLOW_CACHE_DIR"

_strategy_config_adapter: TypeAdapter[AuthenticateConfig] = TypeAdapter(
    AuthenticateConfig
)


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/authflow/`` (default ``~/.config/authflow/``).
    On macOS/Windows: ``~/.authflow/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_cache_dir() -> Path:
    """Return the cache directory, creating it if necessary.

    Holds the state/PKCE cache. Entries are short-lived and the directory
    can be deleted at any time, at the cost of failing in-flight logins.

    On Linux/BSD: ``$XDG_CACHE_HOME/authflow/`` (default ``~/.cache/authflow/``).
    On macOS/Windows: ``~/.authflow/cache/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CACHE_HOME", (".cache",)) / _APP_NAME
    else:
        path = _fallback_base_dir() / "cache"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename."""
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        os.chmod(tmp_path, 0o600)
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Settings ---


def _settings_path() -> Path:
    """Path to the settings file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_settings() -> Settings:
    """Load settings from the XDG config directory.

    Returns:
        The deserialised :class:`~authflow.models.Settings`, or a default
        instance when the file does not exist.

    Raises:
        ConfigurationError: If the file exists but contains invalid JSON or
            fails Pydantic validation.
    """
    path = _settings_path()
    if not path.is_file():
        return Settings()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return Settings.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid settings at {path}: {exc}") from exc


def save_settings(settings: Settings) -> None:
    """Persist settings atomically to disk."""
    data = settings.model_dump(mode="json")
    _atomic_write(_settings_path(), json.dumps(data, indent=2) + "\n")


def resolve_settings() -> Settings:
    """Resolve settings with the full precedence chain.

    Precedence (high to low):
        1. Environment variables (``AUTHFLOW_SESSION_KEY``,
           ``AUTHFLOW_STATE_TTL``, ``AUTHFLOW_HTTP_TIMEOUT``,
           ``AUTHFLOW_CACHE_DIR``)
        2. User settings (``~/.config/authflow/config.json``)
        3. Defaults

    Raises:
        ConfigurationError: If an environment override is not a valid number.
    """
    settings = load_settings()
    updates: dict[str, object] = {}

    session_key = os.environ.get(ENV_SESSION_KEY)
    if session_key:
        updates["session_user_key"] = session_key

    ttl = os.environ.get(ENV_STATE_TTL)
    if ttl:
        try:
            updates["state_ttl_seconds"] = int(ttl)
        except ValueError as exc:
            raise ConfigurationError(
                f"{ENV_STATE_TTL} must be an integer, got '{ttl}'"
            ) from exc

    timeout = os.environ.get(ENV_HTTP_TIMEOUT)
    if timeout:
        try:
            updates["http_timeout"] = float(timeout)
        except ValueError as exc:
            raise ConfigurationError(
                f"{ENV_HTTP_TIMEOUT} must be a number, got '{timeout}'"
            ) from exc

    cache_dir = os.environ.get(ENV_CACHE_DIR)
    if cache_dir:
        updates["cache_dir"] = cache_dir

    if updates:
        settings = settings.model_copy(update=updates)
    return settings


def state_cache_dir(settings: Settings) -> Path:
    """Return the directory backing the state cache for *settings*."""
    if settings.cache_dir:
        return Path(settings.cache_dir).expanduser()
    return get_cache_dir() / "state"


# --- Strategy configs ---


def parse_strategy_config(data: dict) -> AuthenticateConfig:
    """Validate a mapping into the matching strategy config variant.

    Raises:
        ConfigurationError: If ``kind`` is unknown or a field is invalid.
    """
    try:
        return _strategy_config_adapter.validate_python(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid strategy config: {exc}") from exc


def load_strategy_config(path: str | Path) -> AuthenticateConfig:
    """Load a strategy config from a JSON file.

    Raises:
        ConfigurationError: If the file is missing, is not JSON, or does not
            validate as any config variant.
    """
    path = Path(path).expanduser()
    if not path.is_file():
        raise ConfigurationError(f"Strategy config not found at {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ConfigurationError(f"Cannot read strategy config {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Strategy config {path} must be a JSON object")
    return parse_strategy_config(data)
