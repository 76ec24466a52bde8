"""Schema node definitions for jsonshape.

This module exports the schema graph model consumed by the compiler:

Node Model:
- SchemaNode: One node of a schema graph (identity semantics)
- Variant: Closed enumeration of node kinds
- Bag: Constraint bag (bounds, format, pattern, content encoding)
- UNDEFINED / BigInt: Literal markers

Metadata:
- Registry: Identity-keyed node metadata store
- global_registry: Default registry used by node.meta()/node.describe()

Builders live in ``jsonshape_core.schemas.builders``.
"""

from __future__ import annotations

from jsonshape_core.schemas import builders
from jsonshape_core.schemas.nodes import (
    UNDEFINED,
    Bag,
    BigInt,
    SchemaNode,
    Variant,
)
from jsonshape_core.schemas.registry import Registry, global_registry

__all__: list[str] = [
    "builders",
    "Bag",
    "BigInt",
    "SchemaNode",
    "UNDEFINED",
    "Variant",
    "Registry",
    "global_registry",
]
