"""Unit tests for SchemaNode, Bag and the literal markers."""

from __future__ import annotations

import re

import pytest

from jsonshape_core.schemas import UNDEFINED, BigInt, Registry, SchemaNode, Variant
from jsonshape_core.schemas import builders as s


class TestIdentity:
    """Nodes compare and hash by identity."""

    def test_structurally_equal_nodes_are_distinct(self) -> None:
        a = s.string()
        b = s.string()
        assert a != b
        assert a == a
        assert len({a, b}) == 2

    def test_nodes_are_immutable(self) -> None:
        node = s.string()
        with pytest.raises(AttributeError):
            node.variant = Variant.number  # type: ignore[misc]

    def test_clone_records_parent(self) -> None:
        node = s.string().min(2)
        clone = node.clone()
        assert clone is not node
        assert clone.parent is node
        assert clone.bag == node.bag


class TestConstraints:
    """Constraint helpers return new nodes with an updated bag."""

    def test_min_max(self) -> None:
        node = s.string().min(1).max(10)
        assert node.bag.minimum == 1
        assert node.bag.maximum == 10

    def test_constraint_copy_drops_parent(self) -> None:
        clone = s.string().clone()
        assert clone.min(1).parent is None

    def test_length_sets_both_bounds(self) -> None:
        bag = s.array(s.string()).length(3).bag
        assert (bag.minimum, bag.maximum) == (3, 3)

    def test_exclusive_bounds(self) -> None:
        bag = s.number().gt(0).lt(1).multiple_of(0.1).bag
        assert bag.exclusive_minimum == 0
        assert bag.exclusive_maximum == 1
        assert bag.multiple_of == 0.1

    def test_regex_compiles_pattern(self) -> None:
        node = s.string().regex(r"^[a-z]+$")
        assert isinstance(node.bag.pattern, re.Pattern)
        assert node.bag.pattern.pattern == r"^[a-z]+$"

    def test_format_and_encoding(self) -> None:
        node = s.string().format("uuid").content_encoding("base64")
        assert node.bag.format == "uuid"
        assert node.bag.content_encoding == "base64"


class TestOptionality:
    """optional_in / optional_out follow the wrapper rules."""

    def test_plain_node_is_required(self) -> None:
        node = s.string()
        assert not node.optional_in
        assert not node.optional_out

    def test_optional_sets_both(self) -> None:
        node = s.string().optional()
        assert node.optional_in
        assert node.optional_out

    @pytest.mark.parametrize("wrap", ["default", "prefault", "catch"])
    def test_defaulting_wrappers_are_optional_on_input_only(self, wrap: str) -> None:
        node = getattr(s.string(), wrap)("x")
        assert node.optional_in
        assert not node.optional_out

    def test_default_inherits_optional_out(self) -> None:
        node = s.string().optional().default("x")
        assert node.optional_out

    def test_nonoptional_clears_both(self) -> None:
        node = s.string().optional().nonoptional()
        assert not node.optional_in
        assert not node.optional_out

    def test_pipe_uses_each_side(self) -> None:
        node = s.string().optional().pipe(s.number())
        assert node.optional_in
        assert not node.optional_out

    def test_nullable_and_readonly_inherit(self) -> None:
        assert s.string().optional().nullable().optional_out
        assert s.string().optional().readonly().optional_in

    def test_lazy_inherits(self) -> None:
        node = s.lazy(lambda: s.string().optional())
        assert node.optional_in
        assert node.optional_out

    def test_clone_inherits(self) -> None:
        assert s.string().optional().clone().optional_out


class TestLazy:
    """Lazy nodes resolve their getter once."""

    def test_getter_called_once(self) -> None:
        calls: list[int] = []
        target = s.string()

        def getter() -> SchemaNode:
            calls.append(1)
            return target

        node = s.lazy(getter)
        assert node.lazy_inner is target
        assert node.lazy_inner is target
        assert calls == [1]

    def test_missing_getter(self) -> None:
        with pytest.raises(TypeError):
            _ = s.string().lazy_inner


class TestDefaults:
    """Default values and catch fallbacks."""

    def test_static_default(self) -> None:
        assert s.string().default("x").resolved_default == "x"

    def test_factory_default_is_called(self) -> None:
        assert s.array(s.string()).default(list).resolved_default == []

    def test_catch_wraps_static_value(self) -> None:
        node = s.number().catch(0)
        assert node.catch_value is not None
        assert node.catch_value(None) == 0


class TestMeta:
    """meta() and describe() register clones in a registry."""

    def test_meta_registers_clone(self, registry: Registry) -> None:
        base = s.string()
        annotated = base.meta({"title": "Name"}, registry)
        assert annotated.parent is base
        assert registry.get(annotated) == {"title": "Name"}
        assert registry.get(base) is None

    def test_describe(self, registry: Registry) -> None:
        annotated = s.string().describe("A name", registry)
        assert registry.get(annotated) == {"description": "A name"}

    def test_meta_defaults_to_global_registry(self) -> None:
        from jsonshape_core.schemas import global_registry

        annotated = s.string().meta({"id": "Name"})
        assert global_registry.get(annotated) == {"id": "Name"}


class TestMarkers:
    """UNDEFINED and BigInt literal markers."""

    def test_undefined_is_singleton_and_falsy(self) -> None:
        assert type(UNDEFINED)() is UNDEFINED
        assert not UNDEFINED
        assert repr(UNDEFINED) == "UNDEFINED"

    def test_bigint_is_int(self) -> None:
        value = BigInt(10**30)
        assert isinstance(value, int)
        assert value == 10**30
        assert repr(value) == f"BigInt({10**30})"
