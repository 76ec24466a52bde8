"""Traversal engine: lowers a schema graph into JSON Schema fragments.

The engine walks the graph depth-first and memoizes one VisitRecord per
node identity in the shared TraversalSession. A record is registered before
its children are visited, so reaching a node again through its own
descendants returns the fragment that is still being built; the cycle is
noted on the record and resolved later by the emission engine.

Pass-through nodes (optional, default, readonly, pipe, lazy, clones...)
produce only their locally asserted keys here and point their record at the
wrapped node. The emission engine merges the wrapped content in afterwards.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

import structlog

from jsonshape_core.compiler.models import (
    GeneratorConfig,
    IOMode,
    Target,
    UnrepresentablePolicy,
)
from jsonshape_core.compiler.session import (
    DescentPath,
    Fragment,
    TraversalSession,
    VisitRecord,
)
from jsonshape_core.errors import (
    DynamicFallbackError,
    SchemaDefinitionError,
    UnrepresentableTypeError,
)
from jsonshape_core.schemas.nodes import UNDEFINED, BigInt, SchemaNode, Variant
from jsonshape_core.schemas.registry import global_registry

if TYPE_CHECKING:
    from jsonshape_core.schemas.registry import Registry

logger = structlog.get_logger(__name__)

Ancestors = tuple[SchemaNode, ...]
Handler = Callable[[SchemaNode, VisitRecord, Ancestors, DescentPath], None]

# String format names that differ between the node system and JSON Schema
FORMAT_MAP: dict[str, str] = {
    "guid": "uuid",
    "url": "uri",
    "datetime": "date-time",
    "json_string": "json-string",
}

# Message subjects for variants JSON Schema cannot express
UNREPRESENTABLE_SUBJECTS: dict[Variant, str] = {
    Variant.bigint: "BigInt",
    Variant.symbol: "Symbols",
    Variant.void: "Void",
    Variant.date: "Date",
    Variant.map: "Map",
    Variant.set: "Set",
    Variant.file: "File",
    Variant.transform: "Transforms",
    Variant.nan: "NaN",
    Variant.custom: "Custom types",
}


def format_path(path: Sequence[str | int]) -> str:
    """Render a descent path as a JSON pointer-like string."""
    return "/".join(str(part) for part in ["#", *path])


# Python regex syntax with a different ECMA-262 spelling. Escapes and
# character classes are matched too so their contents are left alone.
_PYTHON_ONLY_SYNTAX = re.compile(
    r"\\[AZ]|\\.|\[\^?\]?(?:\\.|[^\]\\])*\]|\(\?P<|\(\?P=(\w+)\)"
)
_ECMA_SPELLING = {"\\A": "^", "\\Z": "$", "(?P<": "(?<"}


def pattern_source(pattern: re.Pattern[str], path: Sequence[str | int] = ()) -> str:
    """Return ``pattern`` as ECMA-262 source for the ``pattern`` keyword.

    Named groups, named backreferences and the ``\\A``/``\\Z`` anchors are
    respelled. Other Python-only constructs pass through unchanged.

    Raises:
        SchemaDefinitionError: If the pattern carries regex flags, which
            JSON Schema patterns cannot express.
    """
    if pattern.flags & ~re.UNICODE:
        raise SchemaDefinitionError(
            "Regex flags cannot be expressed in a JSON Schema pattern",
            internal_details=f"pattern {pattern.pattern!r} at {format_path(path)}",
        )

    def respell(match: re.Match[str]) -> str:
        if match.group(1):
            return f"\\k<{match.group(1)}>"
        return _ECMA_SPELLING.get(match.group(0), match.group(0))

    return _PYTHON_ONLY_SYNTAX.sub(respell, pattern.pattern)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class TraversalEngine:
    """Depth-first, memoized lowering of schema nodes.

    Attributes:
        config: Traversal options (dialect, unrepresentable policy, io side).
        metadata: Registry whose entries are overlaid onto fragments.
        session: Shared traversal state.

    Example:
        >>> engine = TraversalEngine(GeneratorConfig(target="draft-7"))
        >>> fragment = engine.process(s.array(s.string()))
        >>> fragment
        {'type': 'array', 'items': {'type': 'string'}}
    """

    def __init__(
        self,
        config: GeneratorConfig | None = None,
        *,
        metadata: Registry | None = None,
        session: TraversalSession | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            config: Traversal options. Defaults to GeneratorConfig().
            metadata: Metadata registry. Defaults to the global registry.
            session: Session to record into. A new one is created if omitted.
        """
        self.config = config or GeneratorConfig()
        self.metadata = metadata if metadata is not None else global_registry
        self.session = session if session is not None else TraversalSession()
        self._log = logger.bind(component="traversal_engine")
        self._handlers: dict[Variant, Handler] = {
            Variant.string: self._lower_string,
            Variant.number: self._lower_number,
            Variant.boolean: self._lower_boolean,
            Variant.success: self._lower_boolean,
            Variant.undefined: self._lower_null,
            Variant.null: self._lower_null,
            Variant.any: self._lower_unconstrained,
            Variant.unknown: self._lower_unconstrained,
            Variant.never: self._lower_never,
            Variant.array: self._lower_array,
            Variant.object: self._lower_object,
            Variant.union: self._lower_union,
            Variant.intersection: self._lower_intersection,
            Variant.tuple: self._lower_tuple,
            Variant.record: self._lower_record,
            Variant.enum: self._lower_enum,
            Variant.literal: self._lower_literal,
            Variant.template_literal: self._lower_template_literal,
            Variant.nullable: self._lower_nullable,
            Variant.optional: self._lower_wrapper,
            Variant.nonoptional: self._lower_wrapper,
            Variant.promise: self._lower_wrapper,
            Variant.default: self._lower_default,
            Variant.prefault: self._lower_prefault,
            Variant.catch: self._lower_catch,
            Variant.readonly: self._lower_readonly,
            Variant.pipe: self._lower_pipe,
            Variant.lazy: self._lower_lazy,
        }
        for variant in UNREPRESENTABLE_SUBJECTS:
            self._handlers[variant] = self._lower_unrepresentable

    @property
    def handlers(self) -> dict[Variant, Handler]:
        return dict(self._handlers)

    def process(
        self,
        node: SchemaNode,
        ancestors: Ancestors = (),
        path: DescentPath = (),
    ) -> Fragment:
        """Lower ``node`` and return its (possibly still-building) fragment.

        Args:
            node: Node to lower.
            ancestors: Nodes on the current descent, outermost first.
            path: Keywords and keys leading from the root to ``node``.

        Returns:
            The record's live fragment. Callers holding it observe the
            completed content once traversal of ``node`` finishes.

        Raises:
            UnrepresentableTypeError: Unsupported variant under the throw policy.
            DynamicFallbackError: A catch fallback needs its input.
            SchemaDefinitionError: The node is structurally broken.
        """
        records = self.session.records
        record = records.get(node)
        if record is not None:
            record.count += 1
            if any(ancestor is node for ancestor in ancestors):
                record.cycle = tuple(path)
                self._log.debug("cycle_detected", path=format_path(path))
            return record.fragment

        record = VisitRecord()
        records[node] = record
        inner_ancestors = (*ancestors, node)

        if node.json_schema is not None:
            record.fragment.update(node.json_schema())
        elif node.parent is not None:
            # Cloned node: content comes from the clone source
            record.ref = node.parent
            self.process(node.parent, inner_ancestors, path)
            records[node.parent].is_parent = True
        else:
            self._handlers[node.variant](node, record, inner_ancestors, path)

        meta = self.metadata.get(node)
        if meta:
            record.fragment.update(meta)

        if self.config.io is IOMode.input:
            if node.variant is Variant.pipe:
                # examples and defaults describe the output side of a pipe
                record.fragment.pop("examples", None)
                record.fragment.pop("default", None)
            if record.prefault is not UNDEFINED and record.fragment.get("default") is None:
                record.fragment["default"] = record.prefault

        return record.fragment

    # Primitives

    def _lower_string(
        self, node: SchemaNode, record: VisitRecord, ancestors: Ancestors, path: DescentPath
    ) -> None:
        json = record.fragment
        bag = node.bag
        json["type"] = "string"
        if _is_number(bag.minimum):
            json["minLength"] = bag.minimum
        if _is_number(bag.maximum):
            json["maxLength"] = bag.maximum
        if bag.format:
            json["format"] = FORMAT_MAP.get(bag.format, bag.format)
        if bag.pattern is not None:
            json["pattern"] = pattern_source(bag.pattern, path)
        if bag.content_encoding:
            json["contentEncoding"] = bag.content_encoding

    def _lower_number(
        self, node: SchemaNode, record: VisitRecord, ancestors: Ancestors, path: DescentPath
    ) -> None:
        json = record.fragment
        bag = node.bag
        json["type"] = "integer" if bag.format and "int" in bag.format else "number"

        if _is_number(bag.exclusive_minimum):
            json["exclusiveMinimum"] = bag.exclusive_minimum
        if _is_number(bag.minimum):
            json["minimum"] = bag.minimum
            if _is_number(bag.exclusive_minimum):
                if bag.exclusive_minimum >= bag.minimum:
                    del json["minimum"]
                else:
                    del json["exclusiveMinimum"]

        if _is_number(bag.exclusive_maximum):
            json["exclusiveMaximum"] = bag.exclusive_maximum
        if _is_number(bag.maximum):
            json["maximum"] = bag.maximum
            if _is_number(bag.exclusive_maximum):
                if bag.exclusive_maximum <= bag.maximum:
                    del json["maximum"]
                else:
                    del json["exclusiveMaximum"]

        if _is_number(bag.multiple_of):
            json["multipleOf"] = bag.multiple_of

    def _lower_boolean(
        self, node: SchemaNode, record: VisitRecord, ancestors: Ancestors, path: DescentPath
    ) -> None:
        record.fragment["type"] = "boolean"

    def _lower_null(
        self, node: SchemaNode, record: VisitRecord, ancestors: Ancestors, path: DescentPath
    ) -> None:
        record.fragment["type"] = "null"

    def _lower_unconstrained(
        self, node: SchemaNode, record: VisitRecord, ancestors: Ancestors, path: DescentPath
    ) -> None:
        pass

    def _lower_never(
        self, node: SchemaNode, record: VisitRecord, ancestors: Ancestors, path: DescentPath
    ) -> None:
        record.fragment["not"] = {}

    def _lower_unrepresentable(
        self, node: SchemaNode, record: VisitRecord, ancestors: Ancestors, path: DescentPath
    ) -> None:
        if self.config.unrepresentable is UnrepresentablePolicy.throw:
            raise UnrepresentableTypeError(
                node.variant.value,
                description=UNREPRESENTABLE_SUBJECTS[node.variant],
                internal_details=f"unrepresentable node at {format_path(path)}",
            )

    # Containers

    def _lower_array(
        self, node: SchemaNode, record: VisitRecord, ancestors: Ancestors, path: DescentPath
    ) -> None:
        json = record.fragment
        bag = node.bag
        if _is_number(bag.minimum):
            json["minItems"] = bag.minimum
        if _is_number(bag.maximum):
            json["maxItems"] = bag.maximum
        json["type"] = "array"
        json["items"] = self.process(node.element, ancestors, (*path, "items"))

    def _lower_object(
        self, node: SchemaNode, record: VisitRecord, ancestors: Ancestors, path: DescentPath
    ) -> None:
        json = record.fragment
        shape = node.shape or {}
        json["type"] = "object"
        properties: dict[str, Fragment] = {}
        json["properties"] = properties
        for key, child in shape.items():
            properties[key] = self.process(child, ancestors, (*path, "properties", key))

        if self.config.io is IOMode.input:
            json["required"] = [key for key, child in shape.items() if not child.optional_in]
        else:
            json["required"] = [key for key, child in shape.items() if not child.optional_out]

        catchall = node.catchall
        if catchall is not None and catchall.variant is Variant.never:
            json["additionalProperties"] = False
        elif catchall is not None:
            json["additionalProperties"] = self.process(
                catchall, ancestors, (*path, "additionalProperties")
            )

    def _lower_union(
        self, node: SchemaNode, record: VisitRecord, ancestors: Ancestors, path: DescentPath
    ) -> None:
        record.fragment["anyOf"] = [
            self.process(option, ancestors, (*path, "anyOf", index))
            for index, option in enumerate(node.options)
        ]

    def _lower_intersection(
        self, node: SchemaNode, record: VisitRecord, ancestors: Ancestors, path: DescentPath
    ) -> None:
        record.fragment["allOf"] = [
            self.process(node.left, ancestors, (*path, "allOf", 0)),
            self.process(node.right, ancestors, (*path, "allOf", 1)),
        ]

    def _lower_tuple(
        self, node: SchemaNode, record: VisitRecord, ancestors: Ancestors, path: DescentPath
    ) -> None:
        json = record.fragment
        modern = self.config.target is Target.draft_2020_12
        json["type"] = "array"
        prefix_items = [
            self.process(item, ancestors, (*path, "prefixItems", index))
            for index, item in enumerate(node.items)
        ]
        json["prefixItems" if modern else "items"] = prefix_items

        if node.rest is not None:
            rest = self.process(node.rest, ancestors, (*path, "items"))
            json["items" if modern else "additionalItems"] = rest

        bag = node.bag
        if _is_number(bag.minimum):
            json["minItems"] = bag.minimum
        if _is_number(bag.maximum):
            json["maxItems"] = bag.maximum

    def _lower_record(
        self, node: SchemaNode, record: VisitRecord, ancestors: Ancestors, path: DescentPath
    ) -> None:
        json = record.fragment
        json["type"] = "object"
        json["propertyNames"] = self.process(node.key_type, ancestors, (*path, "propertyNames"))
        json["additionalProperties"] = self.process(
            node.value_type, ancestors, (*path, "additionalProperties")
        )

    # Value sets

    def _lower_enum(
        self, node: SchemaNode, record: VisitRecord, ancestors: Ancestors, path: DescentPath
    ) -> None:
        record.fragment["enum"] = list((node.entries or {}).values())

    def _lower_literal(
        self, node: SchemaNode, record: VisitRecord, ancestors: Ancestors, path: DescentPath
    ) -> None:
        throw = self.config.unrepresentable is UnrepresentablePolicy.throw
        values: list[Any] = []
        for value in node.values:
            if value is UNDEFINED:
                if throw:
                    raise UnrepresentableTypeError(
                        "literal",
                        description="Literal `undefined`",
                        internal_details=f"undefined literal at {format_path(path)}",
                    )
            elif isinstance(value, BigInt):
                if throw:
                    raise UnrepresentableTypeError(
                        "literal",
                        description="BigInt literals",
                        internal_details=f"bigint literal at {format_path(path)}",
                    )
                values.append(int(value))
            else:
                values.append(value)

        if len(values) == 1:
            record.fragment["const"] = values[0]
        elif values:
            record.fragment["enum"] = values

    def _lower_template_literal(
        self, node: SchemaNode, record: VisitRecord, ancestors: Ancestors, path: DescentPath
    ) -> None:
        if node.pattern is None:
            raise SchemaDefinitionError(
                "Pattern not found in template literal",
                internal_details=f"template literal at {format_path(path)}",
            )
        record.fragment["type"] = "string"
        record.fragment["pattern"] = pattern_source(node.pattern, path)

    # Wrappers

    def _pass_through(
        self,
        record: VisitRecord,
        inner: SchemaNode | None,
        ancestors: Ancestors,
        path: DescentPath,
    ) -> None:
        if not isinstance(inner, SchemaNode):
            raise SchemaDefinitionError(
                "Wrapper node has no inner schema",
                internal_details=f"wrapper at {format_path(path)} wraps {inner!r}",
            )
        self.process(inner, ancestors, path)
        record.ref = inner

    def _lower_nullable(
        self, node: SchemaNode, record: VisitRecord, ancestors: Ancestors, path: DescentPath
    ) -> None:
        inner = self.process(node.inner, ancestors, path)
        record.fragment["anyOf"] = [inner, {"type": "null"}]

    def _lower_wrapper(
        self, node: SchemaNode, record: VisitRecord, ancestors: Ancestors, path: DescentPath
    ) -> None:
        self._pass_through(record, node.inner, ancestors, path)

    def _lower_default(
        self, node: SchemaNode, record: VisitRecord, ancestors: Ancestors, path: DescentPath
    ) -> None:
        self._pass_through(record, node.inner, ancestors, path)
        record.fragment["default"] = node.resolved_default

    def _lower_prefault(
        self, node: SchemaNode, record: VisitRecord, ancestors: Ancestors, path: DescentPath
    ) -> None:
        self._pass_through(record, node.inner, ancestors, path)
        if self.config.io is IOMode.input:
            record.prefault = node.resolved_default

    def _lower_catch(
        self, node: SchemaNode, record: VisitRecord, ancestors: Ancestors, path: DescentPath
    ) -> None:
        self._pass_through(record, node.inner, ancestors, path)
        if node.catch_value is None:
            return
        try:
            fallback = node.catch_value(None)
        except Exception as exc:
            raise DynamicFallbackError(
                internal_details=f"catch fallback at {format_path(path)} failed: {exc!r}"
            ) from exc
        record.fragment["default"] = fallback

    def _lower_readonly(
        self, node: SchemaNode, record: VisitRecord, ancestors: Ancestors, path: DescentPath
    ) -> None:
        self._pass_through(record, node.inner, ancestors, path)
        record.fragment["readOnly"] = True

    def _lower_pipe(
        self, node: SchemaNode, record: VisitRecord, ancestors: Ancestors, path: DescentPath
    ) -> None:
        side = node.in_node if self.config.io is IOMode.input else node.out_node
        self._pass_through(record, side, ancestors, path)

    def _lower_lazy(
        self, node: SchemaNode, record: VisitRecord, ancestors: Ancestors, path: DescentPath
    ) -> None:
        self._pass_through(record, node.lazy_inner, ancestors, path)
