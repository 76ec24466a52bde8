"""Configuration models for the JSON Schema compiler.

This module defines the closed option enumerations and the validated
configuration models consumed by the traversal and emission engines:
- Target: Output dialect (draft-2020-12, draft-7)
- UnrepresentablePolicy: Fail or degrade on unsupported variants
- IOMode: Lower the input or output side of transforming nodes
- CyclePolicy: Hoist cycles into definitions or fail
- ReusePolicy: Inline or hoist nodes visited more than once
- GeneratorConfig: Traversal-phase options
- EmitConfig: Emission-phase options
- ExportConfig: All options, loadable from jsonshape.yaml
- load_export_config: ExportConfig.from_yaml with ConfigurationError reporting
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from jsonshape_core.errors import ConfigurationError

# Placeholder substituted with the schema id in registry-mode URIs
URI_ID_PLACEHOLDER = "{id}"


class Target(str, Enum):
    """Supported JSON Schema dialects."""

    draft_2020_12 = "draft-2020-12"
    draft_7 = "draft-7"

    @property
    def schema_uri(self) -> str:
        """Value of the ``$schema`` keyword for this dialect."""
        if self is Target.draft_2020_12:
            return "https://json-schema.org/draft/2020-12/schema"
        return "http://json-schema.org/draft-07/schema#"

    @property
    def defs_keyword(self) -> str:
        """Keyword holding the shared definitions table."""
        return "$defs" if self is Target.draft_2020_12 else "definitions"


class UnrepresentablePolicy(str, Enum):
    """How to handle variants without a JSON Schema equivalent."""

    throw = "throw"
    any = "any"


class IOMode(str, Enum):
    """Which side of transforming nodes to describe."""

    output = "output"
    input = "input"


class CyclePolicy(str, Enum):
    """How to handle cyclic schema graphs."""

    ref = "ref"
    throw = "throw"


class ReusePolicy(str, Enum):
    """How to handle nodes reached through more than one path."""

    inline = "inline"
    ref = "ref"


class GeneratorConfig(BaseModel):
    """Traversal-phase options.

    Attributes:
        target: Output dialect.
        unrepresentable: Policy for variants JSON Schema cannot express.
        io: Whether to describe the input or the output side.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    target: Target = Field(default=Target.draft_2020_12, description="JSON Schema dialect")
    unrepresentable: UnrepresentablePolicy = Field(
        default=UnrepresentablePolicy.throw,
        description="Unrepresentable variant policy",
    )
    io: IOMode = Field(default=IOMode.output, description="Input or output side")


class EmitConfig(BaseModel):
    """Emission-phase options.

    Attributes:
        cycles: Policy for cycle-marked nodes.
        reused: Policy for nodes visited more than once.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    cycles: CyclePolicy = Field(default=CyclePolicy.ref, description="Cycle policy")
    reused: ReusePolicy = Field(default=ReusePolicy.inline, description="Reuse policy")


class ExportConfig(BaseModel):
    """Complete export configuration.

    Combines traversal and emission options with the registry-mode URI
    template. Every option is a closed enumeration, so an invalid
    combination cannot be constructed.

    Attributes:
        target: Output dialect.
        unrepresentable: Policy for variants JSON Schema cannot express.
        io: Whether to describe the input or the output side.
        cycles: Policy for cycle-marked nodes.
        reused: Policy for nodes visited more than once.
        uri_template: Template for cross-document references in registry
            export. ``{id}`` is replaced by the schema id.

    Example:
        >>> config = ExportConfig(target="draft-7", reused="ref")
        >>> config.generator_config().target
        <Target.draft_7: 'draft-7'>

        >>> config = ExportConfig.from_yaml("jsonshape.yaml")
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    target: Target = Field(default=Target.draft_2020_12, description="JSON Schema dialect")
    unrepresentable: UnrepresentablePolicy = Field(
        default=UnrepresentablePolicy.throw,
        description="Unrepresentable variant policy",
    )
    io: IOMode = Field(default=IOMode.output, description="Input or output side")
    cycles: CyclePolicy = Field(default=CyclePolicy.ref, description="Cycle policy")
    reused: ReusePolicy = Field(default=ReusePolicy.inline, description="Reuse policy")
    uri_template: str = Field(
        default=URI_ID_PLACEHOLDER,
        min_length=1,
        description="Registry-mode URI template containing {id}",
    )

    @field_validator("uri_template")
    @classmethod
    def _require_id_placeholder(cls, value: str) -> str:
        if URI_ID_PLACEHOLDER not in value:
            raise ValueError(f"uri_template must contain {URI_ID_PLACEHOLDER}")
        return value

    def generator_config(self) -> GeneratorConfig:
        return GeneratorConfig(target=self.target, unrepresentable=self.unrepresentable, io=self.io)

    def emit_config(self) -> EmitConfig:
        return EmitConfig(cycles=self.cycles, reused=self.reused)

    def uri(self, schema_id: str) -> str:
        """Render the registry-mode URI for ``schema_id``."""
        return self.uri_template.replace(URI_ID_PLACEHOLDER, schema_id)

    @classmethod
    def from_yaml(cls, path: str | Path) -> ExportConfig:
        """Load and validate ExportConfig from a YAML file.

        An empty file yields the default configuration.

        Args:
            path: Path to jsonshape.yaml.

        Returns:
            Validated ExportConfig instance.

        Raises:
            FileNotFoundError: If file doesn't exist.
            yaml.YAMLError: If YAML syntax is invalid.
            pydantic.ValidationError: If an option is unknown or invalid.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        with path.open("r") as f:
            data: dict[str, Any] | None = yaml.safe_load(f)

        return cls.model_validate(data or {})


def load_export_config(path: str | Path) -> ExportConfig:
    """Load ExportConfig, reporting every failure as ConfigurationError.

    Args:
        path: Path to jsonshape.yaml.

    Returns:
        Validated ExportConfig instance.

    Raises:
        ConfigurationError: If the file is missing, is not valid YAML, or
            holds an invalid option. File, line and field context are
            attached where known.
    """
    file_path = str(path)
    try:
        return ExportConfig.from_yaml(path)
    except FileNotFoundError:
        raise ConfigurationError("Configuration file not found", file_path=file_path) from None
    except yaml.YAMLError as exc:
        mark = getattr(exc, "problem_mark", None)
        raise ConfigurationError(
            "Configuration file is not valid YAML",
            file_path=file_path,
            line_number=mark.line + 1 if mark is not None else None,
            internal_details=str(exc),
        ) from exc
    except ValidationError as exc:
        first = exc.errors()[0]
        field_path = ".".join(str(part) for part in first["loc"])
        raise ConfigurationError(
            f"Invalid configuration: {first['msg']}",
            file_path=file_path,
            field_path=field_path or None,
            internal_details=str(exc),
        ) from exc
