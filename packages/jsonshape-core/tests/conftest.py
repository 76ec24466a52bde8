"""Shared pytest fixtures for jsonshape-core tests.

This module provides common fixtures used across unit and integration
tests.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog

from jsonshape_core.schemas import Registry, SchemaNode, global_registry
from jsonshape_core.schemas import builders as s


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture.

    This fixture ensures structlog outputs to stdout so that capsys
    can capture the output in tests.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        # Resolve sys.stdout per logger so capsys sees the output
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,  # Important for test isolation
    )


@pytest.fixture(autouse=True)
def clean_global_registry() -> Iterator[None]:
    """Forget ids registered through node.meta() between tests."""
    yield
    global_registry.clear()


@pytest.fixture
def registry() -> Registry:
    """Return an empty metadata registry."""
    return Registry()


@pytest.fixture
def user_schema() -> SchemaNode:
    """Return a small acyclic object schema without shared nodes."""
    return s.object_(
        {
            "name": s.string().min(1),
            "email": s.string().format("email"),
            "age": s.integer().optional(),
        }
    )


@pytest.fixture
def tree_schema() -> SchemaNode:
    """Return a self-referencing tree schema built with lazy()."""
    tree: SchemaNode = s.object_(
        {
            "value": s.number(),
            "children": s.array(s.lazy(lambda: tree)),
        }
    )
    return tree


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Return the path of a valid jsonshape.yaml in a temp directory."""
    path = tmp_path / "jsonshape.yaml"
    path.write_text("target: draft-7\nreused: ref\nuri_template: https://example.com/{id}.json\n")
    return path
