"""JSONSchemaGenerator: one traversal session plus its two engines.

Example:
    >>> from jsonshape_core.schemas import builders as s
    >>> generator = JSONSchemaGenerator(target="draft-7")
    >>> user = s.object_({"name": s.string()})
    >>> generator.process(user)
    >>> generator.emit(user, reused="ref")
    {'type': 'object', ..., '$schema': 'http://json-schema.org/draft-07/schema#'}
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from jsonshape_core.compiler.emitter import EmissionEngine, OverrideHook
from jsonshape_core.compiler.models import EmitConfig, GeneratorConfig, Target
from jsonshape_core.compiler.session import (
    ExternalDefinitions,
    Fragment,
    TraversalSession,
)
from jsonshape_core.compiler.traversal import TraversalEngine

if TYPE_CHECKING:
    from jsonshape_core.schemas.nodes import SchemaNode
    from jsonshape_core.schemas.registry import Registry

logger = structlog.get_logger(__name__)


def _merge_options(model: type[Any], base: Any, options: dict[str, Any]) -> Any:
    """Build ``model`` from ``base`` overridden by keyword ``options``."""
    if base is None:
        return model(**options)
    if not options:
        return base
    return model.model_validate({**base.model_dump(), **options})


class JSONSchemaGenerator:
    """Converts schema graphs to JSON Schema documents.

    A generator owns one traversal session. Any number of roots can be
    processed into it; each root is then emitted once.

    Args:
        config: Traversal options. Keyword options (``target``,
            ``unrepresentable``, ``io``) override fields of ``config``.
        metadata: Registry whose annotations are overlaid onto fragments and
            whose ``id`` entries are hoisted. Defaults to the global registry.
        override: Hook called as ``override(node, fragment)`` for every
            emitted fragment.

    Raises:
        pydantic.ValidationError: If an option value is not recognized.
    """

    def __init__(
        self,
        config: GeneratorConfig | None = None,
        *,
        metadata: Registry | None = None,
        override: OverrideHook | None = None,
        **options: Any,
    ) -> None:
        self.config: GeneratorConfig = _merge_options(GeneratorConfig, config, options)
        self.session = TraversalSession()
        self._traversal = TraversalEngine(self.config, metadata=metadata, session=self.session)
        self._emission = EmissionEngine(
            self.session,
            target=self.config.target,
            metadata=self._traversal.metadata,
            override=override,
        )
        self._log = logger.bind(component="json_schema_generator", target=self.config.target.value)

    @property
    def target(self) -> Target:
        return self.config.target

    @property
    def counter(self) -> int:
        """Next generated definition number."""
        return self.session.counter

    def process(self, node: SchemaNode) -> Fragment:
        """Traverse ``node`` into this generator's session.

        Returns:
            The root's live fragment (not yet flattened).
        """
        fragment = self._traversal.process(node)
        self._log.debug(
            "schema_processed",
            root=node.variant.value,
            records=len(self.session),
        )
        return fragment

    def emit(
        self,
        node: SchemaNode,
        config: EmitConfig | None = None,
        *,
        external: ExternalDefinitions | None = None,
        **options: Any,
    ) -> dict[str, Any]:
        """Emit the document for a processed root.

        Keyword options (``cycles``, ``reused``) override fields of ``config``.
        See :meth:`EmissionEngine.emit` for the raised errors.
        """
        emit_config: EmitConfig = _merge_options(EmitConfig, config, options)
        return self._emission.emit(node, emit_config, external=external)
