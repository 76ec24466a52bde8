"""jsonshape-core: Schema graphs and their JSON Schema compiler.

This package provides:
- Schema nodes and builders: composable, identity-based type definitions
- Registry: metadata attached to nodes (id, title, description...)
- JSONSchemaGenerator: process/emit compiler for draft-2020-12 and draft-7
- Export helpers writing documents to disk
"""

from __future__ import annotations

__version__ = "0.1.0"

# Compiler
from jsonshape_core.compiler import (
    CyclePolicy,
    EmitConfig,
    ExportConfig,
    GeneratorConfig,
    IOMode,
    JSONSchemaGenerator,
    ReusePolicy,
    Target,
    UnrepresentablePolicy,
)

# Error types
from jsonshape_core.errors import (
    ConfigurationError,
    CycleError,
    DynamicFallbackError,
    EmissionError,
    JsonShapeError,
    RegistryError,
    ReemissionError,
    SchemaDefinitionError,
    SerializationError,
    UnprocessedSchemaError,
    UnrepresentableTypeError,
)

# Export functions
from jsonshape_core.export import (
    export_registry,
    export_schema,
    registry_to_json_schema,
    to_json_schema,
)

# Schema graph
from jsonshape_core.schemas import (
    UNDEFINED,
    BigInt,
    Registry,
    SchemaNode,
    Variant,
    builders,
    global_registry,
)

__all__ = [
    "__version__",
    # Compiler
    "JSONSchemaGenerator",
    "GeneratorConfig",
    "EmitConfig",
    "ExportConfig",
    "Target",
    "UnrepresentablePolicy",
    "IOMode",
    "CyclePolicy",
    "ReusePolicy",
    # Errors
    "JsonShapeError",
    "UnrepresentableTypeError",
    "CycleError",
    "DynamicFallbackError",
    "SerializationError",
    "SchemaDefinitionError",
    "EmissionError",
    "UnprocessedSchemaError",
    "ReemissionError",
    "RegistryError",
    "ConfigurationError",
    # Export
    "to_json_schema",
    "registry_to_json_schema",
    "export_schema",
    "export_registry",
    # Schema graph
    "builders",
    "SchemaNode",
    "Variant",
    "UNDEFINED",
    "BigInt",
    "Registry",
    "global_registry",
]
