"""Resolve ``module:attribute`` references given on the command line."""

from __future__ import annotations

import importlib
import os
import sys
from typing import Any, TypeVar

from jsonshape_cli.errors import CLIError

T = TypeVar("T")


def load_object(reference: str, expected: type[T], kind: str) -> T:
    """Import ``module:attr`` and check the result's type.

    The attribute part may be dotted (``package.schemas:models.User``).
    The current working directory is added to ``sys.path`` so that local
    modules resolve the same way they do for ``python -m``.

    Args:
        reference: Reference in ``module:attr`` form.
        expected: Type the attribute must be an instance of.
        kind: Human-readable name of the expected type for messages.

    Returns:
        The resolved attribute.

    Raises:
        CLIError: If the reference is malformed, the module cannot be
            imported, the attribute is missing, or it has the wrong type.
    """
    module_name, sep, attr_path = reference.partition(":")
    if not sep or not module_name or not attr_path:
        raise CLIError(f"Invalid reference '{reference}': expected MODULE:ATTR")

    cwd = os.getcwd()
    if cwd not in sys.path:
        sys.path.insert(0, cwd)

    try:
        target: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise CLIError(f"Cannot import module '{module_name}': {e}") from None

    for attr in attr_path.split("."):
        try:
            target = getattr(target, attr)
        except AttributeError:
            raise CLIError(f"Module '{module_name}' has no attribute '{attr_path}'") from None

    if not isinstance(target, expected):
        raise CLIError(
            f"'{reference}' is a {type(target).__name__}, expected a {kind}"
        )
    return target
