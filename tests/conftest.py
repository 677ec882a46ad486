"""Shared test fixtures for specdeck.

Provides reusable fixtures for loading spec fixtures, deterministic request
IDs, isolated config environments, output state, and running CLI commands.
These fixtures are automatically discovered by pytest and available to
all test modules without explicit imports.
"""

from __future__ import annotations

import itertools
import json
from pathlib import Path
from typing import Any, Callable

import pytest
import yaml

from specdeck.output import OutputFormat, OutputManager, reset_output, set_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Raw spec fixtures (plain dicts loaded from fixture files)
# ---------------------------------------------------------------------------


def _load_fixture(name: str) -> dict[str, Any]:
    path = FIXTURES_DIR / name
    text = path.read_text(encoding="utf-8")
    if path.suffix == ".json":
        return json.loads(text)
    return yaml.safe_load(text)


@pytest.fixture
def minimal_raw() -> dict[str, Any]:
    """Raw minimal 3.0 spec: 3 endpoints tagged System/Users."""
    return _load_fixture("minimal-3.0.json")


@pytest.fixture
def petstore_raw() -> dict[str, Any]:
    """Raw petstore 3.1 spec: 6 endpoints tagged Pets/Store, 2 servers."""
    return _load_fixture("petstore-3.1.json")


@pytest.fixture
def no_tags_raw() -> dict[str, Any]:
    """Raw spec with 6 untagged endpoints and no servers."""
    return _load_fixture("no-tags.yaml")


@pytest.fixture
def complex_refs_raw() -> dict[str, Any]:
    """Raw spec with shared components and a self-referencing Category schema."""
    return _load_fixture("complex-refs.yaml")


@pytest.fixture
def swagger_raw() -> dict[str, Any]:
    """Raw Swagger 2.0 spec (unsupported)."""
    return _load_fixture("swagger-2.0.json")


# ---------------------------------------------------------------------------
# Deterministic request IDs
# ---------------------------------------------------------------------------


@pytest.fixture
def sequential_ids() -> Callable[[], str]:
    """An ID generator yielding ``req_1``, ``req_2``, ... for stable assertions."""
    counter = itertools.count(1)
    return lambda: f"req_{next(counter)}"


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path so
    that tests never touch real user config. Clears all SPECDECK_*
    environment variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    # Route macOS/Windows fallbacks into tmp_path as well
    monkeypatch.setenv("HOME", str(tmp_path / "home"))

    for var in [
        "SPECDECK_BASE_URL",
        "SPECDECK_COLLECTIONS_DIR",
        "SPECDECK_NO_EXAMPLES",
        "NO_COLOR",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner capturing stdout and stderr."""
    from typer.testing import CliRunner

    return CliRunner()
