"""Golden JSON Schema documents for contract testing.

This module provides utilities for loading versioned golden documents that
represent the blessed output of the JSON Schema compiler for the graphs in
``testing.fixtures.schema_graphs``.

Golden documents are static JSON files. If the compiler's output changes
for any of these graphs, tests comparing against them fail immediately.

Usage:
    from testing.fixtures.golden_schemas import load_golden_schema

    expected = load_golden_schema("v1.0.0", "user.json")
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

# Root directory for golden documents
GOLDEN_SCHEMAS_DIR = Path(__file__).parent

# Available versions
AVAILABLE_VERSIONS = ["v1.0.0"]

# Document names per version
SCHEMA_NAMES = {
    "v1.0.0": [
        "user.json",
        "category.draft-2020-12.json",
        "category.draft-7.json",
        "payment.input.json",
        "payment.output.json",
        "blog-registry.json",
    ],
}


def load_golden_schema(version: str, schema_name: str) -> dict[str, Any]:
    """Load a golden JSON Schema document.

    Args:
        version: Contract version (e.g., "v1.0.0").
        schema_name: Name of the document file (e.g., "user.json").

    Returns:
        Parsed JSON as dictionary.

    Raises:
        ValueError: If version or schema_name is invalid.
        FileNotFoundError: If the document file doesn't exist.
    """
    if version not in AVAILABLE_VERSIONS:
        raise ValueError(f"Unknown version '{version}'. Available: {AVAILABLE_VERSIONS}")

    if schema_name not in SCHEMA_NAMES.get(version, []):
        raise ValueError(
            f"Unknown schema '{schema_name}' for version {version}. "
            f"Available: {SCHEMA_NAMES.get(version, [])}"
        )

    schema_path = GOLDEN_SCHEMAS_DIR / version / schema_name
    if not schema_path.exists():
        raise FileNotFoundError(f"Golden schema not found: {schema_path}")

    with schema_path.open() as f:
        return json.load(f)


def list_versions() -> list[str]:
    """List all available golden schema versions."""
    return list(AVAILABLE_VERSIONS)


def list_schemas(version: str) -> list[str]:
    """List all golden document names for a version."""
    return list(SCHEMA_NAMES.get(version, []))
