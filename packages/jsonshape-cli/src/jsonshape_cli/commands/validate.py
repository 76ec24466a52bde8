"""jsonshape validate command - Validate jsonshape.yaml configuration."""

from __future__ import annotations

from pathlib import Path

import click

from jsonshape_cli.errors import CLIError, missing_file
from jsonshape_cli.options import CONFIG_ENVVAR
from jsonshape_cli.output import info, success


@click.command()
@click.option(
    "-f",
    "--file",
    "file_path",
    type=click.Path(exists=False),
    default="./jsonshape.yaml",
    envvar=CONFIG_ENVVAR,
    help="Path to jsonshape.yaml [default: ./jsonshape.yaml]",
)
def validate(file_path: str) -> None:
    """Validate jsonshape.yaml configuration.

    Checks every export option against the allowed values and prints the
    effective configuration.

    Examples:

        jsonshape validate

        jsonshape validate --file path/to/jsonshape.yaml
    """
    if not Path(file_path).exists():
        missing_file(file_path, "--file")

    from jsonshape_core.compiler.models import load_export_config
    from jsonshape_core.errors import ConfigurationError

    try:
        config = load_export_config(file_path)
    except ConfigurationError as e:
        raise CLIError(e.user_message) from None

    success("Configuration valid")
    for key, value in config.model_dump(mode="json").items():
        info(f"  {key}: {value}")
