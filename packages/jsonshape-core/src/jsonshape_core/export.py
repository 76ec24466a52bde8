"""JSON Schema export functions for jsonshape.

This module provides the one-call entry points on top of
JSONSchemaGenerator:
- to_json_schema(): one schema node to one document
- registry_to_json_schema(): every id in a registry to linked documents
- export_schema() / export_registry(): the same, written to disk
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

from jsonshape_core.compiler.emitter import SHARED_DOCUMENT_ID, OverrideHook, finalize
from jsonshape_core.compiler.generator import JSONSchemaGenerator
from jsonshape_core.compiler.models import ExportConfig
from jsonshape_core.compiler.session import ExternalDefinitions
from jsonshape_core.errors import RegistryError
from jsonshape_core.observability import operation

if TYPE_CHECKING:
    from collections.abc import Callable

    from jsonshape_core.schemas.nodes import SchemaNode
    from jsonshape_core.schemas.registry import Registry


def _resolve_config(config: ExportConfig | None, options: dict[str, Any]) -> ExportConfig:
    if config is None:
        return ExportConfig(**options)
    if not options:
        return config
    return ExportConfig.model_validate({**config.model_dump(), **options})


def to_json_schema(
    node: SchemaNode,
    config: ExportConfig | None = None,
    *,
    metadata: Registry | None = None,
    override: OverrideHook | None = None,
    **options: Any,
) -> dict[str, Any]:
    """Convert one schema node to a JSON Schema document.

    Args:
        node: Root schema node.
        config: Export options. Keyword ``options`` override its fields.
        metadata: Metadata registry. Defaults to the global registry.
        override: Hook called as ``override(node, fragment)`` per fragment.
        **options: ``target``, ``unrepresentable``, ``io``, ``cycles``,
            ``reused``.

    Returns:
        Dictionary containing the JSON Schema.

    Example:
        >>> to_json_schema(s.string().min(1))
        {'type': 'string', 'minLength': 1, '$schema': 'https://json-schema.org/draft/2020-12/schema'}
    """
    config = _resolve_config(config, options)
    generator = JSONSchemaGenerator(
        config.generator_config(), metadata=metadata, override=override
    )
    generator.process(node)
    return generator.emit(node, config.emit_config())


def registry_to_json_schema(
    registry: Registry,
    config: ExportConfig | None = None,
    *,
    uri: Callable[[str], str] | None = None,
    metadata: Registry | None = None,
    override: OverrideHook | None = None,
    **options: Any,
) -> dict[str, Any]:
    """Convert every registered id of ``registry`` into linked documents.

    All roots are processed into one session. Roots referencing each other
    use ``uri(id)``; nodes shared between roots but not registered land in
    a ``__shared`` document under the dialect's definitions keyword.

    Args:
        registry: Registry whose ``id`` entries name the documents.
        config: Export options. Keyword ``options`` override its fields.
        uri: Maps a document id to its URI. Defaults to
            ``config.uri_template``.
        metadata: Metadata registry. Defaults to ``registry``.
        override: Hook called as ``override(node, fragment)`` per fragment.
        **options: ``target``, ``unrepresentable``, ``io``, ``cycles``,
            ``reused``, ``uri_template``.

    Returns:
        ``{"schemas": {id: document, ...}}``, plus ``"__shared"`` when
        shared definitions exist.
    """
    config = _resolve_config(config, options)
    generator = JSONSchemaGenerator(
        config.generator_config(),
        metadata=metadata if metadata is not None else registry,
        override=override,
    )
    roots = dict(registry.ids)
    for node in roots.values():
        generator.process(node)

    external = ExternalDefinitions(registry=registry, uri=uri or config.uri)
    schemas: dict[str, Any] = {}
    for schema_id, node in roots.items():
        schemas[schema_id] = generator.emit(node, config.emit_config(), external=external)

    if external.defs:
        schemas[SHARED_DOCUMENT_ID] = {
            generator.target.defs_keyword: finalize(external.defs),
        }

    return {"schemas": schemas}


def export_schema(
    node: SchemaNode,
    output_path: Path | str | None = None,
    config: ExportConfig | None = None,
    **kwargs: Any,
) -> dict[str, Any]:
    """Export one schema node, optionally writing it to ``output_path``.

    Args:
        node: Root schema node.
        output_path: Optional path to write schema file. If provided,
            creates parent directories as needed.
        config: Export options.
        **kwargs: Passed to to_json_schema().

    Returns:
        Dictionary containing the JSON Schema.

    Example:
        >>> export_schema(user, Path("schemas/user.schema.json"))
    """
    with operation("export_schema", output_path=str(output_path) if output_path else None):
        schema = to_json_schema(node, config, **kwargs)
        if output_path is not None:
            _write_schema_file(schema, output_path)
    return schema


def export_registry(
    registry: Registry,
    output_dir: Path | str | None = None,
    config: ExportConfig | None = None,
    **kwargs: Any,
) -> dict[str, Any]:
    """Export a registry, optionally writing one ``<id>.json`` per document.

    Args:
        registry: Registry whose ``id`` entries name the documents.
        output_dir: Optional directory to write documents into.
        config: Export options.
        **kwargs: Passed to registry_to_json_schema().

    Returns:
        ``{"schemas": {...}}`` as returned by registry_to_json_schema().

    Raises:
        RegistryError: If an id cannot be used as a file name.
    """
    with operation("export_registry", output_dir=str(output_dir) if output_dir else None) as attrs:
        result = registry_to_json_schema(registry, config, **kwargs)
        attrs["documents"] = len(result["schemas"])
        if output_dir is not None:
            directory = Path(output_dir)
            paths = {schema_id: directory / _file_name(schema_id) for schema_id in result["schemas"]}
            for schema_id, path in paths.items():
                _write_schema_file(result["schemas"][schema_id], path)
    return result


def _file_name(schema_id: str) -> str:
    if schema_id in ("", ".", "..") or Path(schema_id).name != schema_id:
        raise RegistryError(f"Schema id '{schema_id}' cannot be used as a file name")
    return f"{schema_id}.json"


def _write_schema_file(schema: dict[str, Any], path: Path | str) -> None:
    """Write schema to JSON file.

    Args:
        schema: Schema dictionary to write.
        path: Output file path.
    """
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(schema, indent=2) + "\n")
