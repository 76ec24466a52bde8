"""jsonshape export commands - Export schema nodes and registries.

- ``jsonshape export MODULE:ATTR`` writes one JSON Schema document
- ``jsonshape export-registry MODULE:ATTR`` writes one document per id
"""

from __future__ import annotations

from typing import Any

import click

from jsonshape_cli.errors import CLIError, reported_as
from jsonshape_cli.loader import load_object
from jsonshape_cli.options import export_options, resolve_export_config
from jsonshape_cli.output import info, print_json, success


@click.command("export")
@click.argument("schema_ref", metavar="MODULE:ATTR")
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Output file [default: stdout]",
)
@export_options
def export(schema_ref: str, output_path: str | None, config_path: str | None, **options: Any) -> None:
    """Export a schema node as JSON Schema.

    MODULE:ATTR names an importable module and the schema node inside it.

    Examples:

        jsonshape export myapp.schemas:User

        jsonshape export myapp.schemas:User --target draft-7 -o user.schema.json

        jsonshape export myapp.schemas:Tree --reused ref --config jsonshape.yaml
    """
    # Import here to avoid heavy imports at CLI startup
    from jsonshape_core import SchemaNode, export_schema

    config = resolve_export_config(config_path, options)
    node = load_object(schema_ref, SchemaNode, "schema node")

    with reported_as("Schema export", str(output_path)):
        schema = export_schema(node, output_path, config)

    if output_path is None:
        print_json(schema)
    else:
        success(f"Schema exported to {output_path}")


@click.command("export-registry")
@click.argument("registry_ref", metavar="MODULE:ATTR")
@click.option(
    "-o",
    "--output-dir",
    "output_dir",
    type=click.Path(file_okay=False),
    default="./schemas",
    help="Output directory [default: ./schemas]",
)
@click.option(
    "--uri-template",
    default=None,
    help="URI for cross-document references; {id} is replaced by the schema id",
)
@export_options
def export_registry(
    registry_ref: str,
    output_dir: str,
    uri_template: str | None,
    config_path: str | None,
    **options: Any,
) -> None:
    """Export every schema registered with an id.

    Each id becomes ``<id>.json`` in the output directory. Schemas shared
    between documents are written to ``__shared.json``.

    Examples:

        jsonshape export-registry myapp.schemas:registry

        jsonshape export-registry myapp.schemas:registry -o dist/schemas \\
            --uri-template "https://example.com/schemas/{id}.json"
    """
    from jsonshape_core import Registry, export_registry as run_export

    config = resolve_export_config(config_path, {**options, "uri_template": uri_template})
    registry = load_object(registry_ref, Registry, "registry")
    if not registry.ids:
        raise CLIError(f"Registry '{registry_ref}' has no schemas with an id")

    with reported_as("Registry export", output_dir):
        result = run_export(registry, output_dir, config)

    for schema_id in result["schemas"]:
        info(f"  {schema_id}.json")
    success(f"Exported {len(result['schemas'])} schema(s) to {output_dir}")
