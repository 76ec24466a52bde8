"""Schema graph to JSON Schema compiler.

Phases:
- TraversalEngine: memoized, cycle-aware lowering of nodes to fragments
- EmissionEngine: hoisting, reference flattening and document assembly

JSONSchemaGenerator ties both phases to one TraversalSession.
"""

from __future__ import annotations

from jsonshape_core.compiler.emitter import EmissionEngine, finalize
from jsonshape_core.compiler.generator import JSONSchemaGenerator
from jsonshape_core.compiler.models import (
    CyclePolicy,
    EmitConfig,
    ExportConfig,
    GeneratorConfig,
    IOMode,
    ReusePolicy,
    Target,
    UnrepresentablePolicy,
    load_export_config,
)
from jsonshape_core.compiler.session import (
    ExternalDefinitions,
    TraversalSession,
    VisitRecord,
)
from jsonshape_core.compiler.traversal import FORMAT_MAP, TraversalEngine

__all__: list[str] = [
    "JSONSchemaGenerator",
    "TraversalEngine",
    "EmissionEngine",
    "finalize",
    "FORMAT_MAP",
    "TraversalSession",
    "VisitRecord",
    "ExternalDefinitions",
    "Target",
    "UnrepresentablePolicy",
    "IOMode",
    "CyclePolicy",
    "ReusePolicy",
    "GeneratorConfig",
    "EmitConfig",
    "ExportConfig",
    "load_export_config",
]
