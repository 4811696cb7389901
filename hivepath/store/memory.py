# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# hivepath/store/memory.py
"""
Process-local registry tree.

Names are case-insensitive and case-preserving, as in the real registry.
Nodes are shared; handles (MemorySection) carry their own writable flag.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from ..core.exceptions import SectionNotEmptyError, StoreIOError
from .base import CreateOptions, Section
from .encoding import RegType

logger = logging.getLogger("hivepath.store.memory")


class _Node:
    __slots__ = ("name", "children", "values", "volatile", "deleted")

    def __init__(self, name: str, *, volatile: bool = False) -> None:
        self.name = name
        self.children: Dict[str, "_Node"] = {}
        # lower-cased name -> (display name, kind, value)
        self.values: Dict[str, Tuple[str, RegType, Any]] = {}
        self.volatile = volatile
        self.deleted = False

    def mark_deleted(self) -> None:
        self.deleted = True
        for ch in self.children.values():
            ch.mark_deleted()


class MemorySection(Section):
    supported_options = frozenset(CreateOptions)

    def __init__(self, node: _Node, *, writable: bool = True) -> None:
        super().__init__(node.name, writable=writable)
        self._node = node

    @classmethod
    def new_root(cls, name: str = "HKEY_CURRENT_USER") -> "MemorySection":
        return cls(_Node(name), writable=True)

    def _live(self) -> _Node:
        if self._node.deleted:
            raise StoreIOError(msg=f"section has been marked for deletion: {self.name}")
        return self._node

    def _walk(self, parts: List[str]) -> Optional[_Node]:
        node = self._live()
        for p in parts:
            node = node.children.get(p.lower())
            if node is None:
                return None
        return node

    def _open(self, parts: List[str], writable: bool) -> Optional[Section]:
        node = self._walk(parts)
        return None if node is None else MemorySection(node, writable=writable)

    def _create(self, parts: List[str], writable: bool, options: CreateOptions) -> Section:
        node = self._live()
        for p in parts:
            child = node.children.get(p.lower())
            if child is None:
                child = _Node(p, volatile=(options is CreateOptions.VOLATILE))
                node.children[p.lower()] = child
                logger.debug("Created section %r under %r (options=%s)", p, node.name, options.name)
            node = child
        return MemorySection(node, writable=writable)

    def _get_value(self, name: str, default: Any) -> Any:
        hit = self._live().values.get(name.lower())
        if hit is None:
            return default
        v = hit[2]
        return list(v) if isinstance(v, list) else v

    def _get_kind(self, name: str) -> Optional[RegType]:
        hit = self._live().values.get(name.lower())
        return None if hit is None else hit[1]

    def _set_value(self, name: str, kind: RegType, value: Any) -> None:
        node = self._live()
        prev = node.values.get(name.lower())
        display = prev[0] if prev is not None else name
        node.values[name.lower()] = (display, kind, value)

    def _delete_value(self, name: str) -> bool:
        return self._live().values.pop(name.lower(), None) is not None

    def _value_names(self) -> List[str]:
        return [v[0] for v in self._live().values.values()]

    def _child_names(self) -> List[str]:
        return [ch.name for ch in self._live().children.values()]

    def _delete_child(self, parts: List[str], *, recursive: bool) -> bool:
        parent = self._walk(parts[:-1])
        if parent is None:
            return False
        target = parent.children.get(parts[-1].lower())
        if target is None:
            return False
        if target.children and not recursive:
            raise SectionNotEmptyError(msg=f"section has subsections: {target.name}").with_context(
                subsections=len(target.children)
            )
        del parent.children[parts[-1].lower()]
        target.mark_deleted()
        logger.debug("Deleted section %r (recursive=%s)", target.name, recursive)
        return True

    def discard_volatile(self) -> int:
        """Drop every volatile section below this one, as a restart would. Returns how many went."""
        dropped = 0
        stack = [self._live()]
        while stack:
            node = stack.pop()
            for key, ch in list(node.children.items()):
                if ch.volatile:
                    del node.children[key]
                    ch.mark_deleted()
                    dropped += 1
                else:
                    stack.append(ch)
        return dropped


_DEFAULT_ROOTS: Dict[str, _Node] = {}


def shared_root(name: str = "HKEY_CURRENT_USER") -> MemorySection:
    """Writable handle on the process-wide in-memory root called `name`."""
    node = _DEFAULT_ROOTS.get(name.upper())
    if node is None:
        node = _DEFAULT_ROOTS[name.upper()] = _Node(name)
    return MemorySection(node, writable=True)
