"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for specdeck:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.specdeck/`` on macOS and Windows. See :func:`get_config_dir`,
  :func:`get_data_dir`, :func:`get_collections_dir`.
* **Global config** -- A single :class:`~specdeck.models.GlobalConfig`
  JSON file storing import defaults and output preferences.
* **Project config** -- An optional ``./specdeck.json`` next to the API
  sources, typically pinning ``collections_dir`` or ``base_url`` for a
  repository.
* **Precedence resolution** -- :func:`resolve_import_settings` merges CLI
  flags, environment variables, project-local config, and global config
  into the effective :class:`~specdeck.models.ImportSettings`.

All file writes use an atomic temp-file-then-rename strategy
(:func:`atomic_write`) so a crash never leaves a half-written file behind.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from specdeck.exceptions import ConfigError
from specdeck.models import GlobalConfig, ImportSettings

_APP_NAME = "specdeck"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "specdeck.json"

ENV_BASE_URL = "SPECDECK_BASE_URL"
ENV_COLLECTIONS_DIR = "SPECDECK_COLLECTIONS_DIR"
ENV_NO_EXAMPLES = "SPECDECK_NO_EXAMPLES"

_TRUTHY = frozenset({"1", "true", "yes", "on"})


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

    On Linux/BSD: ``$XDG_CONFIG_HOME/specdeck/`` (default ``~/.config/specdeck/``).
    On macOS/Windows: ``~/.specdeck/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (collections, crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/specdeck/`` (default ``~/.local/share/specdeck/``).
    On macOS/Windows: ``~/.specdeck/data/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "data"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_collections_dir() -> Path:
    """Return the default collections directory (``<data_dir>/collections/``)."""
    path = get_data_dir() / "collections"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed and the original exception propagates.
    """
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
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


# --- Global config ---


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the config directory.

    Returns:
        The deserialised :class:`~specdeck.models.GlobalConfig`, or a
        default instance when no file exists.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./specdeck.json``.

    Recognised keys are ``collections_dir``, ``include_examples`` and
    ``base_url``; others are ignored.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file is not valid JSON or not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Precedence resolution ---


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in _TRUTHY


def resolve_import_settings(
    cli_base_url: Optional[str] = None,
    cli_output_dir: Optional[str] = None,
    cli_no_examples: bool = False,
) -> ImportSettings:
    """Resolve import settings with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_base_url``, ``cli_output_dir``, ``cli_no_examples``)
        2. Environment variables (``SPECDECK_BASE_URL``,
           ``SPECDECK_COLLECTIONS_DIR``, ``SPECDECK_NO_EXAMPLES``)
        3. Project config (``./specdeck.json``)
        4. User config (``~/.config/specdeck/config.json``)
        5. Defaults

    Empty strings count as unset at every level.
    """
    # 5 + 4. Global config (fills in defaults automatically)
    global_cfg = load_global_config()
    include_examples = global_cfg.include_examples
    collections_dir = global_cfg.collections_dir
    base_url: Optional[str] = None

    # 3. Project-local config
    project = load_project_config() or {}
    if project.get("collections_dir"):
        collections_dir = str(project["collections_dir"])
    if isinstance(project.get("include_examples"), bool):
        include_examples = project["include_examples"]
    if project.get("base_url"):
        base_url = str(project["base_url"])

    # 2. Environment variables
    env_base_url = os.environ.get(ENV_BASE_URL)
    if env_base_url:
        base_url = env_base_url
    env_dir = os.environ.get(ENV_COLLECTIONS_DIR)
    if env_dir:
        collections_dir = env_dir
    if _env_flag(ENV_NO_EXAMPLES):
        include_examples = False

    # 1. CLI flags
    if cli_base_url:
        base_url = cli_base_url
    if cli_output_dir:
        collections_dir = cli_output_dir
    if cli_no_examples:
        include_examples = False

    if not collections_dir:
        collections_dir = str(get_collections_dir())

    return ImportSettings(
        include_examples=include_examples,
        base_url=base_url,
        collections_dir=collections_dir,
    )
