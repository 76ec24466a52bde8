"""Emission engine: turns a processed session into a JSON Schema document.

Emission runs three passes over the session's visit records:

1. Hoisting: decide which fragments move into the definitions table and
   rewrite their live fragments into bare ``$ref`` fragments.
2. Flattening: merge every pass-through record with the finalized fragment
   of the node it wraps, then run the override hook.
3. Assembly: root body, definitions table, ``$schema`` header, and a JSON
   round trip that yields fresh plain data.

Emission mutates the session's records, so a session emits either one
standalone document or, with an external definitions table (registry
export), each of its roots once. Cycle checks run before any record is
rewritten, so a CycleError leaves the session usable under another policy.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import structlog

from jsonshape_core.compiler.models import CyclePolicy, EmitConfig, ReusePolicy, Target
from jsonshape_core.compiler.session import (
    ExternalDefinitions,
    Fragment,
    TraversalSession,
    VisitRecord,
)
from jsonshape_core.errors import (
    CycleError,
    ReemissionError,
    SerializationError,
    UnprocessedSchemaError,
)
from jsonshape_core.schemas.nodes import SchemaNode
from jsonshape_core.schemas.registry import global_registry

if TYPE_CHECKING:
    from jsonshape_core.schemas.registry import Registry

logger = structlog.get_logger(__name__)

OverrideHook = Callable[[SchemaNode, Fragment], None]

# Document id holding definitions shared between registry documents
SHARED_DOCUMENT_ID = "__shared"


class EmissionEngine:
    """Builds final documents from a TraversalSession.

    Attributes:
        session: Session produced by the traversal engine.
        target: Output dialect. Must match the dialect used for traversal.
        metadata: Registry consulted for explicit ``id`` annotations.
        override: Optional hook called as ``override(node, fragment)`` once
            per non-parent-only record, after flattening.
    """

    def __init__(
        self,
        session: TraversalSession,
        *,
        target: Target = Target.draft_2020_12,
        metadata: Registry | None = None,
        override: OverrideHook | None = None,
    ) -> None:
        self.session = session
        self.target = Target(target)
        self.metadata = metadata if metadata is not None else global_registry
        self.override = override
        self._log = logger.bind(component="emission_engine", target=self.target.value)

    def emit(
        self,
        root: SchemaNode,
        config: EmitConfig | None = None,
        *,
        external: ExternalDefinitions | None = None,
    ) -> dict[str, Any]:
        """Emit the document for a processed root.

        Args:
            root: Root node previously passed to the traversal engine.
            config: Cycle and reuse policies. Defaults to EmitConfig().
            external: Cross-document addressing for registry export. When
                given, definitions are collected into ``external.defs``
                instead of the document itself.

        Returns:
            A freshly allocated JSON-compatible dict.

        Raises:
            UnprocessedSchemaError: If ``root`` was never processed.
            ReemissionError: If ``root`` was already emitted in this session,
                or the session already emitted a standalone document.
            CycleError: If a cycle is found and ``cycles="throw"``.
            SerializationError: If the document holds non-data values.
        """
        config = config or EmitConfig()
        session = self.session

        root_record = session.records.get(root)
        if root_record is None:
            raise UnprocessedSchemaError(
                internal_details=f"emit() called for {root.variant.value} node outside the session"
            )
        if root in session.emitted:
            raise ReemissionError(
                internal_details=f"{root.variant.value} root emitted twice in one session"
            )
        if session.local_emission or (external is None and session.emitted):
            raise ReemissionError(
                internal_details="standalone emission shares a session with another emission"
            )
        if config.cycles is CyclePolicy.throw:
            self._check_cycles(root, external)

        # Records are rewritten from here on
        session.emitted.add(root)
        if external is None:
            session.local_emission = True

        self._hoist(root, root_record, config, external)
        for node in reversed(list(session.records)):
            self._flatten(node)
        document = self._assemble(root_record, external)

        self._log.debug(
            "emit_complete",
            root=root.variant.value,
            definitions=sum(1 for record in session.records.values() if record.def_id),
            external=external is not None,
        )
        return document

    # Hoisting

    def _check_cycles(self, root: SchemaNode, external: ExternalDefinitions | None) -> None:
        for node, record in self.session.records.items():
            if record.cycle is not None and not self._has_own_address(node, root, external):
                raise CycleError(record.cycle)

    def _has_own_address(
        self,
        node: SchemaNode,
        root: SchemaNode,
        external: ExternalDefinitions | None,
    ) -> bool:
        """Whether ``node`` is hoisted regardless of the cycle and reuse policies."""
        if node is root:
            return True
        if external is not None and external.external_id(node):
            return True
        meta = self.metadata.get(node)
        return bool(meta and meta.get("id"))

    def _hoist(
        self,
        root: SchemaNode,
        root_record: VisitRecord,
        config: EmitConfig,
        external: ExternalDefinitions | None,
    ) -> None:
        for node, record in self.session.records.items():
            if record.cycle is not None or self._has_own_address(node, root, external):
                self._extract(node, record, root_record, external)
            elif record.count > 1 and config.reused is ReusePolicy.ref:
                self._extract(node, record, root_record, external)

    def _extract(
        self,
        node: SchemaNode,
        record: VisitRecord,
        root_record: VisitRecord,
        external: ExternalDefinitions | None,
    ) -> None:
        if record.is_reference:
            return

        ref, def_id = self._reference_for(node, record, root_record, external)
        record.definition = dict(record.fragment)
        if def_id:
            record.def_id = def_id

        record.fragment.clear()
        record.fragment["$ref"] = ref
        self._log.debug("definition_hoisted", ref=ref, def_id=def_id)

    def _reference_for(
        self,
        node: SchemaNode,
        record: VisitRecord,
        root_record: VisitRecord,
        external: ExternalDefinitions | None,
    ) -> tuple[str, str | None]:
        """Return the ``$ref`` value and definition id for a hoisted record."""
        defs_keyword = self.target.defs_keyword

        if external is not None:
            external_id = external.external_id(node)
            if external_id:
                return external.uri(external_id), None

            def_id = (
                record.def_id
                or record.fragment.get("id")
                or self.session.next_id("schema")
            )
            record.def_id = def_id
            return f"{external.uri(SHARED_DOCUMENT_ID)}#/{defs_keyword}/{def_id}", def_id

        if record is root_record:
            return "#", None

        def_id = record.fragment.get("id") or self.session.next_id("__schema")
        return f"#/{defs_keyword}/{def_id}", def_id

    # Flattening

    def _flatten(self, node: SchemaNode) -> None:
        record = self.session.records[node]
        if record.flattened:
            return
        record.flattened = True

        body = record.body
        local = dict(body)
        if record.ref is not None:
            self._flatten(record.ref)
            wrapped = self.session.records[record.ref].fragment

            if "$ref" in wrapped and self.target is Target.draft_7:
                # draft-7 ignores siblings of $ref
                body.setdefault("allOf", []).append(wrapped)
            else:
                body.update(wrapped)
                body.update(local)

        if not record.is_parent and self.override is not None:
            self.override(node, body)

    # Assembly

    def _assemble(
        self,
        root_record: VisitRecord,
        external: ExternalDefinitions | None,
    ) -> dict[str, Any]:
        document: dict[str, Any] = dict(root_record.definition or {})

        defs = external.defs if external is not None else {}
        for record in self.session.records.values():
            if record.definition is not None and record.def_id:
                defs[record.def_id] = record.definition

        if external is None and defs:
            document[self.target.defs_keyword] = defs

        document["$schema"] = self.target.schema_uri
        return finalize(document)


def finalize(document: dict[str, Any]) -> dict[str, Any]:
    """Return a deep, freshly allocated copy of ``document``.

    Raises:
        SerializationError: If the document holds a value that is not JSON
            data (callables, regex objects, NaN, self-referencing containers).
    """
    try:
        return json.loads(json.dumps(document, allow_nan=False))
    except (TypeError, ValueError) as exc:
        raise SerializationError(
            "Error converting schema to JSON",
            internal_details=str(exc),
        ) from exc
