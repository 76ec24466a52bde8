"""Shared test fixtures for jsonshape packages.

Exports:
    Schema graph factories:
        make_user_graph, make_category_graph, make_payment_graph,
        make_blog_registry

    Golden documents:
        load_golden_schema, list_versions, list_schemas
"""

from __future__ import annotations

from testing.fixtures.golden_schemas import list_schemas, list_versions, load_golden_schema
from testing.fixtures.schema_graphs import (
    make_blog_registry,
    make_category_graph,
    make_payment_graph,
    make_user_graph,
)

__all__ = [
    "make_user_graph",
    "make_category_graph",
    "make_payment_graph",
    "make_blog_registry",
    "load_golden_schema",
    "list_versions",
    "list_schemas",
]
