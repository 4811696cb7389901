# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# hivepath/store/hive.py
"""
Offline registry hive files (regf) through the hivex bindings.

HiveStore owns the hivex handle; HiveSection handles point at node ids
inside it. Values are kept by hivex as (type, raw bytes) and go through
store.encoding on the way in and out.

    with HiveStore("/tmp/SYSTEM", write=True) as hs:
        PathStore(hs.root()).write("Select", "Current", 1)
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple, Union

from ..core.exceptions import (
    ReadOnlySectionError,
    SectionNotEmptyError,
    StoreClosedError,
    StoreIOError,
)
from ..core.logger import TRACE
from ..core.logging_utils import log_step
from ..core.optional_imports import hivex, require_hivex
from .base import CreateOptions, Section
from .encoding import RegType, decode_value, encode_value, kind_of

logger = logging.getLogger("hivepath.store.hive")

NodeLike = Union[int, None]

MIN_HIVE_BYTES = 4096


def _node_id(n: NodeLike) -> int:
    """Convert node to int, treating None as 0."""
    if n is None:
        return 0
    try:
        return int(n)
    except (TypeError, ValueError):
        return 0


def _is_probably_regf(path: Path) -> bool:
    """
    Windows registry hives start with ASCII 'regf' signature.
    Cheap corruption/truncation guardrail.
    """
    try:
        with path.open("rb") as f:
            return f.read(4) == b"regf"
    except OSError:
        return False


def _open_hive_local(path: Path, *, write: bool) -> Any:
    """Open local hive file with validation."""
    if hivex is None:
        require_hivex()
    if not path.exists():
        raise StoreIOError(msg=f"hive file missing: {path}")
    size = path.stat().st_size
    if size < MIN_HIVE_BYTES:
        raise StoreIOError(msg=f"hive file too small ({size} bytes): {path}")
    if not _is_probably_regf(path):
        raise StoreIOError(msg=f"hive file does not look like a regf hive: {path}")
    return hivex.Hivex(str(path), write=(1 if write else 0))


def _commit(h: Any) -> None:
    """Commit hive changes to the file it was opened from."""
    try:
        h.commit(None)
    except TypeError:
        h.commit()


class HiveStore:
    """An open hive file. Use as a context manager, or close() explicitly."""

    def __init__(self, path: Union[str, Path], *, write: bool = False) -> None:
        self.path = Path(path)
        self.write = bool(write)
        self._h = _open_hive_local(self.path, write=self.write)
        self._closed = False
        self._dirty = False
        self._deleted: Set[int] = set()
        logger.debug("Opened hive %s (write=%s)", self.path, self.write)

    def __enter__(self) -> "HiveStore":
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        try:
            if exc_type is None and self.write and self._dirty and not self._closed:
                self.commit()
        finally:
            self.close()

    def __repr__(self) -> str:
        return f"<HiveStore {str(self.path)!r} write={self.write} closed={self._closed}>"

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def dirty(self) -> bool:
        return self._dirty

    def handle(self) -> Any:
        if self._closed:
            raise StoreClosedError(msg=f"hive is closed: {self.path}")
        return self._h

    def root(self) -> "HiveSection":
        h = self.handle()
        root = _node_id(h.root())
        return HiveSection(self, root, h.node_name(root) or self.path.name, writable=self.write)

    def commit(self) -> None:
        if not self.write:
            raise ReadOnlySectionError(msg=f"hive opened read-only: {self.path}")
        h = self.handle()
        with log_step(logger, f"Committing hive {self.path}"):
            _commit(h)
        self._dirty = False

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        h, self._h = self._h, None
        close = getattr(h, "close", None)
        if callable(close):
            close()
        logger.debug("Closed hive %s", self.path)

    def _touch(self) -> None:
        self._dirty = True


class HiveSection(Section):
    def __init__(self, store: HiveStore, node: int, name: str, *, writable: bool) -> None:
        super().__init__(name, writable=writable and store.write)
        self._store = store
        self._node = node

    def _check_open(self) -> None:
        super()._check_open()
        if self._store.closed:
            raise StoreClosedError(msg=f"hive is closed: {self._store.path}")

    def _live(self) -> Tuple[Any, int]:
        if self._node in self._store._deleted:
            raise StoreIOError(msg=f"section has been marked for deletion: {self.name}")
        return self._store.handle(), self._node

    def _walk(self, parts: List[str]) -> Optional[int]:
        h, node = self._live()
        for p in parts:
            node = _node_id(h.node_get_child(node, p))
            if node == 0:
                return None
        return node

    def _find_value(self, name: str) -> Optional[Any]:
        h, node = self._live()
        want = name.lower()
        for v in h.node_values(node):
            if (h.value_key(v) or "").lower() == want:
                return v
        return None

    def _raw_values(self) -> List[Dict[str, Any]]:
        h, node = self._live()
        out: List[Dict[str, Any]] = []
        for v in h.node_values(node):
            t, raw = h.value_value(v)
            out.append({"key": h.value_key(v) or "", "t": int(t), "value": bytes(raw)})
        return out

    # -- navigation ---------------------------------------------------------

    def _open(self, parts: List[str], writable: bool) -> Optional[Section]:
        node = self._walk(parts)
        if node is None:
            return None
        h, _ = self._live()
        return HiveSection(self._store, node, h.node_name(node), writable=writable)

    def _create(self, parts: List[str], writable: bool, options: CreateOptions) -> Section:
        h, node = self._live()
        name = self.name
        for p in parts:
            child = _node_id(h.node_get_child(node, p))
            if child == 0:
                child = _node_id(h.node_add_child(node, p))
                if child == 0:
                    raise StoreIOError(msg=f"failed to create section {p!r}")
                self._store._touch()
                logger.debug("Created section %r in %s", p, self._store.path.name)
            node = child
            name = h.node_name(node)
        return HiveSection(self._store, node, name, writable=writable)

    # -- values -------------------------------------------------------------

    def _get_value(self, name: str, default: Any) -> Any:
        v = self._find_value(name)
        if v is None:
            return default
        h, _ = self._live()
        t, raw = h.value_value(v)
        return decode_value(kind_of(t), raw)

    def _get_kind(self, name: str) -> Optional[RegType]:
        v = self._find_value(name)
        if v is None:
            return None
        h, _ = self._live()
        t, _len = h.value_type(v)
        return kind_of(t)

    def _set_value(self, name: str, kind: RegType, value: Any) -> None:
        h, node = self._live()
        raw = encode_value(kind, value)
        h.node_set_value(node, {"key": name, "t": int(kind), "value": raw})
        logger.log(TRACE, "Set %s [%s] %s (%d bytes)", self.name, name, kind.name, len(raw))
        self._store._touch()

    def _delete_value(self, name: str) -> bool:
        # hivex has no single-value delete; rewrite the node's value list without it.
        want = name.lower()
        values = self._raw_values()
        keep = [v for v in values if v["key"].lower() != want]
        if len(keep) == len(values):
            return False
        h, node = self._live()
        h.node_set_values(node, keep)
        self._store._touch()
        return True

    def _value_names(self) -> List[str]:
        h, node = self._live()
        return [h.value_key(v) or "" for v in h.node_values(node)]

    # -- children -----------------------------------------------------------

    def _child_names(self) -> List[str]:
        h, node = self._live()
        return [h.node_name(ch) for ch in h.node_children(node)]

    def _subtree(self, h: Any, node: int) -> List[int]:
        out = [node]
        for ch in h.node_children(node):
            out.extend(self._subtree(h, _node_id(ch)))
        return out

    def _delete_child(self, parts: List[str], *, recursive: bool) -> bool:
        target = self._walk(parts)
        if target is None:
            return False
        h, _ = self._live()
        kids = h.node_children(target)
        if kids and not recursive:
            raise SectionNotEmptyError(msg=f"section has subsections: {h.node_name(target)}").with_context(
                subsections=len(kids)
            )
        doomed = self._subtree(h, target)
        # node_delete_child removes the node together with its whole subtree
        h.node_delete_child(target)
        self._store._deleted.update(doomed)
        self._store._touch()
        logger.debug("Deleted section %r (%d nodes)", parts[-1], len(doomed))
        return True
