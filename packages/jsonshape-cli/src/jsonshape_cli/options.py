"""Shared export options and configuration resolution for jsonshape commands."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import click
from pydantic import ValidationError as PydanticValidationError

from jsonshape_cli.errors import CLIError, format_pydantic_error, missing_file
from jsonshape_core.compiler.models import (
    CyclePolicy,
    ExportConfig,
    IOMode,
    ReusePolicy,
    Target,
    UnrepresentablePolicy,
    load_export_config,
)
from jsonshape_core.errors import ConfigurationError

F = TypeVar("F", bound=Callable[..., Any])

# Environment variable naming the default jsonshape.yaml
CONFIG_ENVVAR = "JSONSHAPE_CONFIG"


def _choice(enum_cls: type[Any]) -> click.Choice:
    return click.Choice([member.value for member in enum_cls])


def export_options(func: F) -> F:
    """Add --config and the five policy options to an export command.

    Policy options default to None so that values from the config file are
    only overridden when given explicitly.
    """
    options = [
        click.option(
            "-c",
            "--config",
            "config_path",
            type=click.Path(dir_okay=False),
            envvar=CONFIG_ENVVAR,
            default=None,
            help=f"Path to jsonshape.yaml [env: {CONFIG_ENVVAR}]",
        ),
        click.option("--target", type=_choice(Target), default=None, help="JSON Schema dialect"),
        click.option("--io", type=_choice(IOMode), default=None, help="Describe input or output"),
        click.option(
            "--unrepresentable",
            type=_choice(UnrepresentablePolicy),
            default=None,
            help="Fail on, or accept as {}, types JSON Schema cannot express",
        ),
        click.option(
            "--cycles", type=_choice(CyclePolicy), default=None, help="Cycle policy"
        ),
        click.option(
            "--reused", type=_choice(ReusePolicy), default=None, help="Reused schema policy"
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def resolve_export_config(config_path: str | None, overrides: dict[str, Any]) -> ExportConfig:
    """Combine an optional config file with command-line overrides.

    Args:
        config_path: Path to jsonshape.yaml, or None for defaults.
        overrides: Option values from the command line; None means unset.

    Returns:
        Validated ExportConfig.

    Raises:
        CLIError: If the file is missing or the resulting options are invalid.
    """
    options = {key: value for key, value in overrides.items() if value is not None}

    base: ExportConfig | None = None
    if config_path is not None:
        if not Path(config_path).exists():
            missing_file(config_path, "--config")
        try:
            base = load_export_config(config_path)
        except ConfigurationError as e:
            raise CLIError(e.user_message) from None

    try:
        if base is None:
            return ExportConfig(**options)
        return ExportConfig.model_validate({**base.model_dump(), **options})
    except PydanticValidationError as e:
        raise CLIError(f"Invalid options:\n{format_pydantic_error(e)}") from None
