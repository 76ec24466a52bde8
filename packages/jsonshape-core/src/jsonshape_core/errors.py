"""Custom exception hierarchy for jsonshape-core.

This module defines the exception classes raised while lowering a schema
graph to JSON Schema:
- JsonShapeError: Base exception for all jsonshape errors
- UnrepresentableTypeError: A node variant has no JSON Schema equivalent
- CycleError: A cycle was found and the cycle policy forbids references
- DynamicFallbackError: A catch fallback could not be computed without input
- SerializationError: The assembled document is not plain data
- SchemaDefinitionError: A schema node is structurally broken
- EmissionError: Emission was requested in an invalid session state
- RegistryError: Metadata registry misuse (duplicate ids)
- ConfigurationError: Export configuration file could not be loaded

Design:
- User-facing messages are safe to display
- Technical details are logged internally via structlog
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

logger = structlog.get_logger(__name__)


class JsonShapeError(Exception):
    """Base exception for jsonshape.

    All jsonshape exceptions inherit from this class. User-facing messages
    are safe to display; technical details are logged internally.

    Args:
        user_message: Safe message to display to the user.
        internal_details: Optional technical details for logging. This is
            logged internally but never part of the exception message.

    Example:
        >>> raise JsonShapeError(
        ...     "Conversion failed",
        ...     internal_details="node at #/properties/user has no handler",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        """Initialize JsonShapeError with user message and optional internal details.

        Args:
            user_message: Safe message to display to the user.
            internal_details: Technical details for internal logging only.
        """
        super().__init__(user_message)
        self.user_message = user_message

        if internal_details:
            logger.error(
                "jsonshape_error",
                error_type=self.__class__.__name__,
                user_message=user_message,
                internal_details=internal_details,
            )


class UnrepresentableTypeError(JsonShapeError):
    """Raised when a schema node variant cannot be expressed in JSON Schema.

    Only raised under the ``unrepresentable="throw"`` policy. Under
    ``unrepresentable="any"`` the node lowers to an unconstrained fragment.

    Attributes:
        variant: Name of the offending variant (e.g. "bigint", "date").

    Example:
        >>> raise UnrepresentableTypeError("date")
        # User sees: "Date cannot be represented in JSON Schema"
    """

    def __init__(
        self,
        variant: str,
        *,
        description: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        """Initialize UnrepresentableTypeError.

        Args:
            variant: Name of the offending variant.
            description: Optional subject for the message. Defaults to the
                capitalized variant name.
            internal_details: Technical details for internal logging only.
        """
        subject = description or variant.capitalize()
        super().__init__(
            f"{subject} cannot be represented in JSON Schema",
            internal_details=internal_details,
        )
        self.variant = variant


class CycleError(JsonShapeError):
    """Raised during emission when a cycle is found and ``cycles="throw"``.

    Attributes:
        path: Descent path (property names and indexes) at which the cycle
            was first detected.
    """

    def __init__(
        self,
        path: Sequence[str | int],
        *,
        internal_details: str | None = None,
    ) -> None:
        """Initialize CycleError.

        Args:
            path: Descent path where the cycle was detected.
            internal_details: Technical details for internal logging only.
        """
        location = "/".join(str(part) for part in ["#", *path, "<root>"])
        super().__init__(
            f"Cycle detected: {location}\n\n"
            'Set the `cycles` parameter to "ref" to resolve cyclical schemas with defs.',
            internal_details=internal_details,
        )
        self.path = list(path)


class DynamicFallbackError(JsonShapeError):
    """Raised when a catch node's fallback value depends on its input.

    The fallback of a ``catch`` node is evaluated without an input. If that
    evaluation fails the fallback cannot be expressed as a JSON Schema
    ``default``. The original exception is chained as ``__cause__``.
    """

    def __init__(self, *, internal_details: str | None = None) -> None:
        """Initialize DynamicFallbackError.

        Args:
            internal_details: Technical details for internal logging only.
        """
        super().__init__(
            "Dynamic catch values are not supported in JSON Schema",
            internal_details=internal_details,
        )


class SerializationError(JsonShapeError):
    """Raised when the assembled document contains a non-data value.

    Indicates that a fragment still holds a value such as a compiled regex,
    a callable or a self-referencing structure after all processing.
    """

    pass


class SchemaDefinitionError(JsonShapeError):
    """Raised when a schema node is structurally broken.

    Use this exception when:
    - A template literal node has no compiled pattern
    - A lazy node's getter does not return a schema node
    """

    pass


class EmissionError(JsonShapeError):
    """Raised when emission is requested in an invalid session state."""

    pass


class UnprocessedSchemaError(EmissionError):
    """Raised when emitting a root that was never processed in the session."""

    def __init__(self, *, internal_details: str | None = None) -> None:
        """Initialize UnprocessedSchemaError.

        Args:
            internal_details: Technical details for internal logging only.
        """
        super().__init__(
            "Schema must be processed before it can be emitted",
            internal_details=internal_details,
        )


class ReemissionError(EmissionError):
    """Raised when a traversal session cannot emit another document.

    Emission rewrites visit records destructively. A root can be emitted
    once, and a session that emitted a standalone document (no external
    definitions table) cannot emit a second one. Use a fresh generator.
    """

    def __init__(self, *, internal_details: str | None = None) -> None:
        """Initialize ReemissionError.

        Args:
            internal_details: Technical details for internal logging only.
        """
        super().__init__(
            "A document was already emitted from this generator; use a new generator",
            internal_details=internal_details,
        )


class RegistryError(JsonShapeError):
    """Raised when a metadata registry is used inconsistently.

    Use this exception when:
    - Two different nodes are registered under the same id
    """

    pass


class ConfigurationError(JsonShapeError):
    """Raised when an export configuration file cannot be loaded or validated.

    Provides file path and field context for actionable error messages.

    Attributes:
        file_path: Path to the configuration file (if known).
        field_path: Dot-separated path to the invalid field (e.g., "target").
        line_number: Line number in the file where error occurred (if available).

    Example:
        >>> raise ConfigurationError(
        ...     "Invalid target",
        ...     file_path="jsonshape.yaml",
        ...     field_path="target",
        ...     internal_details="expected 'draft-7' or 'draft-2020-12'",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        file_path: str | None = None,
        field_path: str | None = None,
        line_number: int | None = None,
        internal_details: str | None = None,
    ) -> None:
        """Initialize ConfigurationError with context.

        Args:
            user_message: Safe message to display to the user.
            file_path: Path to the configuration file (optional).
            field_path: Dot-separated path to the field (optional).
            line_number: Line number in the file (optional).
            internal_details: Technical details for internal logging only.
        """
        context_parts: list[str] = []
        if file_path:
            context_parts.append(f"in {file_path}")
        if line_number:
            context_parts.append(f"line {line_number}")
        if field_path:
            context_parts.append(f"field '{field_path}'")

        if context_parts:
            full_message = f"{user_message} ({', '.join(context_parts)})"
        else:
            full_message = user_message

        super().__init__(full_message, internal_details=internal_details)

        self.file_path = file_path
        self.field_path = field_path
        self.line_number = line_number
