"""Shared test fixtures for jsonshape-cli tests.

Provides CliRunner fixtures and a throwaway schema module importable as
``shapes_app`` for testing CLI commands.
"""

from __future__ import annotations

import logging
import sys
import textwrap
from collections.abc import Callable, Generator, Iterator
from pathlib import Path

import pytest
import structlog
from click.testing import CliRunner

# File name constants
CONFIG_FILENAME = "jsonshape.yaml"
SAMPLE_MODULE = "shapes_app"

SAMPLE_MODULE_SOURCE = textwrap.dedent(
    """
    from jsonshape_core import Registry
    from jsonshape_core.schemas import builders as s

    registry = Registry()
    empty_registry = Registry()
    bad_registry = Registry()

    Address = s.object_({"city": s.string()})
    User = registry.add(
        s.object_({"name": s.string().min(1), "address": Address}),
        {"id": "User"},
    )
    Post = registry.add(
        s.object_({"title": s.string(), "author": User, "location": Address}),
        {"id": "Post"},
    )
    bad_registry.add(s.string(), {"id": "../escape"})

    Tree = s.object_({"value": s.number(), "children": s.array(s.lazy(lambda: Tree))})
    Forest = s.object_({"tree": Tree})
    Birthday = s.object_({"on": s.date()})

    not_a_schema = 42
    """
)


@pytest.fixture(autouse=True)
def restore_logging() -> Iterator[None]:
    """Undo logging configuration done by the CLI entry point."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click test runner.

    Returns:
        CliRunner instance for testing CLI commands.
    """
    return CliRunner()


@pytest.fixture
def isolated_runner(cli_runner: CliRunner) -> Generator[CliRunner, None, None]:
    """Create a Click test runner with an isolated filesystem.

    This fixture creates a temporary directory and changes to it
    for the duration of the test.

    Yields:
        CliRunner instance with isolated filesystem.
    """
    with cli_runner.isolated_filesystem():
        yield cli_runner


@pytest.fixture
def sample_module(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[str]:
    """Write ``shapes_app.py`` to a temp directory on sys.path.

    Yields:
        The module name to use in MODULE:ATTR references.
    """
    module_dir = tmp_path / "modules"
    module_dir.mkdir()
    (module_dir / f"{SAMPLE_MODULE}.py").write_text(SAMPLE_MODULE_SOURCE)
    # load_object() may add the cwd; keep sys.path changes local to the test
    monkeypatch.setattr(sys, "path", list(sys.path))
    monkeypatch.syspath_prepend(str(module_dir))
    yield SAMPLE_MODULE
    sys.modules.pop(SAMPLE_MODULE, None)


@pytest.fixture
def create_config(isolated_runner: CliRunner) -> Callable[..., Path]:
    """Factory fixture to create jsonshape.yaml files with custom content.

    Args:
        isolated_runner: CliRunner with isolated filesystem.

    Returns:
        Function that creates jsonshape.yaml with given content.
    """

    def _create(content: str, filename: str = CONFIG_FILENAME) -> Path:
        path = Path(filename)
        path.write_text(content)
        return path

    return _create
