"""Metadata registry for schema nodes.

A Registry attaches free-form annotations (``id``, ``title``,
``description``, ``examples``...) to schema nodes without mutating them.
The compiler overlays these annotations onto the generated fragments, and
a registry doubles as the list of named roots in registry-wide export.

Example:
    >>> registry = Registry()
    >>> user = registry.add(s.object_({"name": s.string()}), {"id": "User"})
    >>> registry.get(user)
    {'id': 'User'}
"""

from __future__ import annotations

import weakref
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from jsonshape_core.errors import RegistryError
from jsonshape_core.schemas.nodes import SchemaNode


class Registry:
    """Identity-keyed store of node metadata.

    Nodes are held weakly; ids map to nodes in registration order.

    Attributes:
        ids: Read-only mapping of registered id to node.
    """

    def __init__(self) -> None:
        self._map: weakref.WeakKeyDictionary[SchemaNode, dict[str, Any]] = (
            weakref.WeakKeyDictionary()
        )
        self._ids: dict[str, SchemaNode] = {}

    def add(self, node: SchemaNode, meta: Mapping[str, Any] | None = None) -> SchemaNode:
        """Register ``node`` with ``meta`` and return the node.

        Raises:
            RegistryError: If ``meta["id"]`` is already taken by another node.
        """
        entry = dict(meta or {})
        node_id = entry.get("id")
        if node_id is not None:
            existing = self._ids.get(node_id)
            if existing is not None and existing is not node:
                raise RegistryError(f"ID '{node_id}' already exists in the registry")
        previous = self._map.get(node)
        if previous is not None and previous.get("id") != node_id:
            self._drop_id(previous.get("id"), node)
        if node_id is not None:
            self._ids[node_id] = node
        self._map[node] = entry
        return node

    def get(self, node: SchemaNode) -> dict[str, Any] | None:
        return self._map.get(node)

    def has(self, node: SchemaNode) -> bool:
        return node in self._map

    def remove(self, node: SchemaNode) -> None:
        entry = self._map.pop(node, None)
        if entry is not None:
            self._drop_id(entry.get("id"), node)

    def clear(self) -> None:
        self._map = weakref.WeakKeyDictionary()
        self._ids.clear()

    def _drop_id(self, node_id: str | None, node: SchemaNode) -> None:
        if node_id is not None and self._ids.get(node_id) is node:
            del self._ids[node_id]

    @property
    def ids(self) -> Mapping[str, SchemaNode]:
        return MappingProxyType(self._ids)

    def __contains__(self, node: object) -> bool:
        return isinstance(node, SchemaNode) and node in self._map

    def __len__(self) -> int:
        return len(self._map)


# Default metadata source for node.meta() / node.describe()
global_registry = Registry()
