"""Schema node model for jsonshape.

This module defines the immutable schema graph consumed by the compiler:
- Variant: Closed enumeration of node kinds
- Bag: Constraint bag (bounds, format, pattern, content encoding)
- SchemaNode: One node of a composable type definition graph
- UNDEFINED / BigInt: Literal markers for values JSON cannot carry

Nodes compare and hash by identity. Two structurally equal nodes are still
two distinct nodes; sharing a sub-node means passing the same object twice.
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from jsonshape_core.schemas.registry import Registry


class Variant(str, Enum):
    """Schema node kinds."""

    string = "string"
    number = "number"
    boolean = "boolean"
    bigint = "bigint"
    symbol = "symbol"
    undefined = "undefined"
    null = "null"
    any = "any"
    unknown = "unknown"
    never = "never"
    void = "void"
    date = "date"
    array = "array"
    object = "object"
    union = "union"
    intersection = "intersection"
    tuple = "tuple"
    record = "record"
    map = "map"
    set = "set"
    enum = "enum"
    literal = "literal"
    file = "file"
    transform = "transform"
    nullable = "nullable"
    nonoptional = "nonoptional"
    success = "success"
    default = "default"
    prefault = "prefault"
    catch = "catch"
    nan = "nan"
    template_literal = "template_literal"
    pipe = "pipe"
    readonly = "readonly"
    promise = "promise"
    optional = "optional"
    lazy = "lazy"
    custom = "custom"


class _Undefined:
    """Marker for an absent value inside literal value sets."""

    _instance: _Undefined | None = None

    def __new__(cls) -> _Undefined:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False


UNDEFINED = _Undefined()


class BigInt(int):
    """Arbitrary-precision integer literal.

    Marks a literal value as a big integer so the compiler can apply the
    unrepresentable policy to it. Behaves as a plain ``int`` otherwise.
    """

    def __repr__(self) -> str:
        return f"BigInt({int(self)})"


@dataclass(frozen=True)
class Bag:
    """Constraint bag attached to a schema node.

    Attributes:
        minimum: Lower bound (value for numbers, length for strings/arrays).
        maximum: Upper bound (value for numbers, length for strings/arrays).
        exclusive_minimum: Exclusive numeric lower bound.
        exclusive_maximum: Exclusive numeric upper bound.
        multiple_of: Numeric step.
        format: String format name or numeric format ("safeint", "float64").
        pattern: Compiled regular expression for strings.
        content_encoding: String content encoding (e.g. "base64").
    """

    minimum: int | float | None = None
    maximum: int | float | None = None
    exclusive_minimum: int | float | None = None
    exclusive_maximum: int | float | None = None
    multiple_of: int | float | None = None
    format: str | None = None
    pattern: re.Pattern[str] | None = None
    content_encoding: str | None = None


@dataclass(frozen=True, eq=False)
class SchemaNode:
    """One node of a schema graph.

    Only the fields relevant to ``variant`` are populated. Use the builder
    functions in :mod:`jsonshape_core.schemas.builders` rather than calling
    the constructor directly.

    Attributes:
        variant: Node kind.
        bag: Constraint bag.
        element: Array element node.
        shape: Object property nodes in declaration order.
        catchall: Object catch-all node for undeclared keys.
        options: Union options in order.
        left: Intersection left operand.
        right: Intersection right operand.
        items: Tuple prefix item nodes.
        rest: Tuple rest element node.
        key_type: Record/map key node.
        value_type: Record/map/set value node.
        entries: Enum entries (label to value) in declaration order. Entries
            built from a plain value list are labelled by position.
        values: Literal values.
        inner: Wrapped node for wrapper variants.
        in_node: Pipe input side.
        out_node: Pipe output side.
        getter: Lazy node factory, resolved once.
        default_value: Default/prefault value or zero-argument factory.
        catch_value: Catch fallback, called with the failure context.
        pattern: Compiled pattern of a template literal.
        parent: Node this node was cloned from.
        json_schema: Custom lowering function replacing default dispatch.
    """

    variant: Variant
    bag: Bag = field(default_factory=Bag)
    element: SchemaNode | None = None
    shape: Mapping[str, SchemaNode] | None = None
    catchall: SchemaNode | None = None
    options: tuple[SchemaNode, ...] = ()
    left: SchemaNode | None = None
    right: SchemaNode | None = None
    items: tuple[SchemaNode, ...] = ()
    rest: SchemaNode | None = None
    key_type: SchemaNode | None = None
    value_type: SchemaNode | None = None
    entries: Mapping[str, Any] | None = None
    values: tuple[Any, ...] = ()
    inner: SchemaNode | None = None
    in_node: SchemaNode | None = None
    out_node: SchemaNode | None = None
    getter: Callable[[], SchemaNode] | None = field(default=None, repr=False)
    default_value: Any = None
    catch_value: Callable[[Any], Any] | None = field(default=None, repr=False)
    pattern: re.Pattern[str] | None = None
    parent: SchemaNode | None = field(default=None, repr=False)
    json_schema: Callable[[], dict[str, Any]] | None = field(default=None, repr=False)

    @cached_property
    def lazy_inner(self) -> SchemaNode:
        """Resolve a lazy node's getter once and keep the result."""
        if self.getter is None:
            raise TypeError(f"{self.variant.value} node has no lazy getter")
        return self.getter()

    @property
    def resolved_default(self) -> Any:
        """Default value, calling it when it is a factory."""
        value = self.default_value
        return value() if callable(value) else value

    @property
    def optional_in(self) -> bool:
        """Whether an object key holding this node may be absent on input."""
        if self.parent is not None:
            return self.parent.optional_in
        variant = self.variant
        if variant in (Variant.optional, Variant.default, Variant.prefault, Variant.catch):
            return True
        if variant is Variant.pipe:
            return self.in_node.optional_in if self.in_node is not None else False
        if variant is Variant.lazy:
            return self.lazy_inner.optional_in
        if variant in (Variant.nullable, Variant.readonly, Variant.promise):
            return self.inner.optional_in if self.inner is not None else False
        return False

    @property
    def optional_out(self) -> bool:
        """Whether an object key holding this node may be absent on output."""
        if self.parent is not None:
            return self.parent.optional_out
        variant = self.variant
        if variant is Variant.optional:
            return True
        if variant is Variant.pipe:
            return self.out_node.optional_out if self.out_node is not None else False
        if variant is Variant.lazy:
            return self.lazy_inner.optional_out
        if variant in (
            Variant.default,
            Variant.prefault,
            Variant.catch,
            Variant.nullable,
            Variant.readonly,
            Variant.promise,
        ):
            return self.inner.optional_out if self.inner is not None else False
        return False

    # Derived nodes

    def clone(self) -> SchemaNode:
        """Return a copy of this node that records this node as its parent."""
        return dataclasses.replace(self, parent=self)

    def with_bag(self, **constraints: Any) -> SchemaNode:
        """Return a copy of this node with updated constraints."""
        return dataclasses.replace(
            self, bag=dataclasses.replace(self.bag, **constraints), parent=None
        )

    def optional(self) -> SchemaNode:
        return SchemaNode(Variant.optional, inner=self)

    def nullable(self) -> SchemaNode:
        return SchemaNode(Variant.nullable, inner=self)

    def nonoptional(self) -> SchemaNode:
        return SchemaNode(Variant.nonoptional, inner=self)

    def readonly(self) -> SchemaNode:
        return SchemaNode(Variant.readonly, inner=self)

    def default(self, value: Any) -> SchemaNode:
        return SchemaNode(Variant.default, inner=self, default_value=value)

    def prefault(self, value: Any) -> SchemaNode:
        return SchemaNode(Variant.prefault, inner=self, default_value=value)

    def catch(self, value: Any) -> SchemaNode:
        fallback = value if callable(value) else (lambda _ctx: value)
        return SchemaNode(Variant.catch, inner=self, catch_value=fallback)

    def pipe(self, target: SchemaNode) -> SchemaNode:
        return SchemaNode(Variant.pipe, in_node=self, out_node=target)

    def array(self) -> SchemaNode:
        return SchemaNode(Variant.array, element=self)

    def meta(self, meta: Mapping[str, Any], registry: Registry | None = None) -> SchemaNode:
        """Clone this node and attach ``meta`` to the clone.

        Args:
            meta: Free-form annotations (``id``, ``title``, ``description``...).
            registry: Registry to record the metadata in. Defaults to the
                process-wide global registry.

        Returns:
            The annotated clone.
        """
        from jsonshape_core.schemas.registry import global_registry

        target = registry if registry is not None else global_registry
        return target.add(self.clone(), meta)

    def describe(self, description: str, registry: Registry | None = None) -> SchemaNode:
        return self.meta({"description": description}, registry)

    # Constraint helpers

    def min(self, value: int | float) -> SchemaNode:
        return self.with_bag(minimum=value)

    def max(self, value: int | float) -> SchemaNode:
        return self.with_bag(maximum=value)

    def length(self, value: int) -> SchemaNode:
        return self.with_bag(minimum=value, maximum=value)

    def gt(self, value: int | float) -> SchemaNode:
        return self.with_bag(exclusive_minimum=value)

    def lt(self, value: int | float) -> SchemaNode:
        return self.with_bag(exclusive_maximum=value)

    def multiple_of(self, value: int | float) -> SchemaNode:
        return self.with_bag(multiple_of=value)

    def format(self, name: str) -> SchemaNode:
        return self.with_bag(format=name)

    def regex(self, pattern: str | re.Pattern[str]) -> SchemaNode:
        return self.with_bag(pattern=re.compile(pattern))

    def content_encoding(self, encoding: str) -> SchemaNode:
        return self.with_bag(content_encoding=encoding)
