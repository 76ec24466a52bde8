"""Traversal session state shared by the traversal and emission engines.

A session holds one VisitRecord per distinct schema node, in traversal
order, plus the per-session counter used for generated definition ids.
Records outlive a single ``process`` call so that several roots can be
processed into one session (registry export) and emitted one by one.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from jsonshape_core.schemas.nodes import UNDEFINED, SchemaNode

if TYPE_CHECKING:
    from jsonshape_core.schemas.registry import Registry

Fragment = dict[str, Any]
DescentPath = tuple[str | int, ...]


@dataclass(eq=False)
class VisitRecord:
    """Traversal result and graph facts for one schema node.

    Attributes:
        fragment: Live output fragment. Mutated in place while the node is
            being lowered; rewritten to a bare ``$ref`` when hoisted.
        definition: Frozen copy of the fragment taken when hoisting; becomes
            the body placed in the definitions table.
        def_id: Identifier of the definition, if one was assigned.
        count: Number of times traversal reached this node.
        cycle: Descent path at which the node was found in its own
            ancestor chain.
        is_parent: True when the record only exists as a clone source.
        ref: Node whose content this record passes through.
        flattened: True once reference flattening has handled the record.
        prefault: Provisional input-side default captured from a prefault.
    """

    fragment: Fragment = field(default_factory=dict)
    definition: Fragment | None = None
    def_id: str | None = None
    count: int = 1
    cycle: DescentPath | None = None
    is_parent: bool = False
    ref: SchemaNode | None = None
    flattened: bool = False
    prefault: Any = UNDEFINED

    @property
    def is_reference(self) -> bool:
        return "$ref" in self.fragment

    @property
    def body(self) -> Fragment:
        """Definition body if hoisted, else the live fragment."""
        return self.definition if self.definition is not None else self.fragment


@dataclass
class ExternalDefinitions:
    """Cross-document addressing used in registry export.

    Attributes:
        registry: Registry whose ``id`` entries name separate documents.
        uri: Maps a document id to its URI.
        defs: Shared definitions table filled by every emission.
    """

    registry: Registry
    uri: Callable[[str], str]
    defs: dict[str, Fragment] = field(default_factory=dict)

    def external_id(self, node: SchemaNode) -> str | None:
        meta = self.registry.get(node)
        return meta.get("id") if meta else None


@dataclass
class TraversalSession:
    """Mutable state of one traversal session.

    Attributes:
        records: Visit records keyed by node identity, in traversal order.
        counter: Next number for generated definition ids.
        emitted: Roots already emitted from this session.
        local_emission: Whether a root was emitted without an external
            definitions table. Such an emission writes ``#`` into shared
            fragments, so the session cannot emit anything else afterwards.
    """

    records: dict[SchemaNode, VisitRecord] = field(default_factory=dict)
    counter: int = 0
    emitted: set[SchemaNode] = field(default_factory=set)
    local_emission: bool = False

    def next_id(self, prefix: str) -> str:
        generated = f"{prefix}{self.counter}"
        self.counter += 1
        return generated

    def __contains__(self, node: object) -> bool:
        return node in self.records

    def __len__(self) -> int:
        return len(self.records)
