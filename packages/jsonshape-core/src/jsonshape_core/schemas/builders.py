"""Builder functions for schema nodes.

Each function returns a new :class:`SchemaNode`. Names that would shadow
Python builtins carry a trailing underscore (``object_``, ``tuple_``...).

Example:
    >>> from jsonshape_core.schemas import builders as s
    >>> user = s.object_({
    ...     "name": s.string().min(1),
    ...     "age": s.integer().optional(),
    ...     "tags": s.array(s.string()),
    ... })
"""

from __future__ import annotations

import dataclasses
import enum
import re
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from jsonshape_core.schemas.nodes import Bag, SchemaNode, Variant


def string() -> SchemaNode:
    return SchemaNode(Variant.string)


def number() -> SchemaNode:
    return SchemaNode(Variant.number)


def integer() -> SchemaNode:
    """Number node restricted to safe integers."""
    return SchemaNode(Variant.number, bag=Bag(format="safeint"))


def boolean() -> SchemaNode:
    return SchemaNode(Variant.boolean)


def bigint() -> SchemaNode:
    return SchemaNode(Variant.bigint)


def symbol() -> SchemaNode:
    return SchemaNode(Variant.symbol)


def undefined() -> SchemaNode:
    return SchemaNode(Variant.undefined)


def null() -> SchemaNode:
    return SchemaNode(Variant.null)


def any_() -> SchemaNode:
    return SchemaNode(Variant.any)


def unknown() -> SchemaNode:
    return SchemaNode(Variant.unknown)


def never() -> SchemaNode:
    return SchemaNode(Variant.never)


def void() -> SchemaNode:
    return SchemaNode(Variant.void)


def date() -> SchemaNode:
    return SchemaNode(Variant.date)


def nan() -> SchemaNode:
    return SchemaNode(Variant.nan)


def file() -> SchemaNode:
    return SchemaNode(Variant.file)


def success(inner: SchemaNode) -> SchemaNode:
    """Boolean node reporting whether ``inner`` accepted its input."""
    return SchemaNode(Variant.success, inner=inner)


def array(element: SchemaNode) -> SchemaNode:
    return SchemaNode(Variant.array, element=element)


def object_(
    shape: Mapping[str, SchemaNode],
    *,
    catchall: SchemaNode | None = None,
) -> SchemaNode:
    """Object node with properties in declaration order.

    Args:
        shape: Property name to node mapping.
        catchall: Node for undeclared keys. ``never()`` forbids extra keys.
    """
    return SchemaNode(Variant.object, shape=dict(shape), catchall=catchall)


def strict_object(shape: Mapping[str, SchemaNode]) -> SchemaNode:
    return object_(shape, catchall=never())


def loose_object(shape: Mapping[str, SchemaNode]) -> SchemaNode:
    return object_(shape, catchall=unknown())


def union(options: Iterable[SchemaNode]) -> SchemaNode:
    return SchemaNode(Variant.union, options=tuple(options))


def intersection(left: SchemaNode, right: SchemaNode) -> SchemaNode:
    return SchemaNode(Variant.intersection, left=left, right=right)


def tuple_(items: Iterable[SchemaNode], rest: SchemaNode | None = None) -> SchemaNode:
    return SchemaNode(Variant.tuple, items=tuple(items), rest=rest)


def record(key_type: SchemaNode, value_type: SchemaNode) -> SchemaNode:
    return SchemaNode(Variant.record, key_type=key_type, value_type=value_type)


def map_(key_type: SchemaNode, value_type: SchemaNode) -> SchemaNode:
    return SchemaNode(Variant.map, key_type=key_type, value_type=value_type)


def set_(value_type: SchemaNode) -> SchemaNode:
    return SchemaNode(Variant.set, value_type=value_type)


def enum_(values: Iterable[Any] | type[enum.Enum]) -> SchemaNode:
    """Enum node over a value list or a Python ``Enum`` class."""
    entries: dict[str, Any]
    if isinstance(values, type) and issubclass(values, enum.Enum):
        entries = {member.name: member.value for member in values}
    else:
        entries = {}
        for value in values:
            # 1 and "1" are distinct entries; repeats of the same value are not
            if not any(type(seen) is type(value) and seen == value for seen in entries.values()):
                entries[str(len(entries))] = value
    return SchemaNode(Variant.enum, entries=entries)


def literal(*values: Any) -> SchemaNode:
    return SchemaNode(Variant.literal, values=tuple(values))


def template_literal(parts: Iterable[str | SchemaNode]) -> SchemaNode:
    """String node matching the concatenation of ``parts``.

    Plain strings match themselves; ``string()`` and ``number()`` nodes match
    any string or numeric text.
    """
    sources: list[str] = []
    for part in parts:
        if isinstance(part, str):
            sources.append(re.escape(part))
        elif part.variant is Variant.number:
            sources.append(r"-?\d+(?:\.\d+)?")
        elif part.variant is Variant.boolean:
            sources.append("(?:true|false)")
        elif part.variant is Variant.literal:
            sources.append("(?:" + "|".join(re.escape(str(v)) for v in part.values) + ")")
        else:
            sources.append(".*")
    return SchemaNode(
        Variant.template_literal,
        pattern=re.compile("^" + "".join(sources) + "$"),
    )


def transform(function: Callable[[Any], Any]) -> SchemaNode:
    return SchemaNode(Variant.transform, default_value=function)


def custom(check: Callable[[Any], bool] | None = None) -> SchemaNode:
    return SchemaNode(Variant.custom, default_value=check)


def nullable(inner: SchemaNode) -> SchemaNode:
    return inner.nullable()


def optional(inner: SchemaNode) -> SchemaNode:
    return inner.optional()


def nonoptional(inner: SchemaNode) -> SchemaNode:
    return inner.nonoptional()


def readonly(inner: SchemaNode) -> SchemaNode:
    return inner.readonly()


def default(inner: SchemaNode, value: Any) -> SchemaNode:
    return inner.default(value)


def prefault(inner: SchemaNode, value: Any) -> SchemaNode:
    return inner.prefault(value)


def catch(inner: SchemaNode, value: Any) -> SchemaNode:
    return inner.catch(value)


def promise(inner: SchemaNode) -> SchemaNode:
    return SchemaNode(Variant.promise, inner=inner)


def pipe(in_node: SchemaNode, out_node: SchemaNode) -> SchemaNode:
    return in_node.pipe(out_node)


def lazy(getter: Callable[[], SchemaNode]) -> SchemaNode:
    """Node resolved on first use; lets a graph refer to itself."""
    return SchemaNode(Variant.lazy, getter=getter)


def with_json_schema(node: SchemaNode, lower: Callable[[], dict[str, Any]]) -> SchemaNode:
    """Attach a custom lowering function to a copy of ``node``."""
    return dataclasses.replace(node, json_schema=lower, parent=None)
