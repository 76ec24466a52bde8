"""jsonshape-cli: Command-line interface for jsonshape.

Exports schema nodes and registries to JSON Schema files and validates
jsonshape.yaml export configuration.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
