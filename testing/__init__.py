"""Shared testing infrastructure for jsonshape.

This package provides the schema graphs and golden documents used by the
contract tests under ``tests/contract``.

Modules:
    fixtures.schema_graphs: Factories for the graphs behind golden documents
    fixtures.golden_schemas: Versioned golden JSON Schema documents

Usage:
    from testing.fixtures.golden_schemas import load_golden_schema
    from testing.fixtures.schema_graphs import make_user_graph
"""

from __future__ import annotations
