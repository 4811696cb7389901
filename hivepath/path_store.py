# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# hivepath/path_store.py
"""
Path-based access to a registry store.

PathStore is bound to one root section and resolves every call against the
live store: the path is normalized, the section opened (or created), the
operation performed and the handle released. Nothing is cached and store
errors propagate unchanged.

    store = PathStore()                   # HKEY_CURRENT_USER
    store.write("Software/Acme/App", "Volume", 7)
    store.read("Software/Acme/App", "Volume")   # -> 7
"""
from __future__ import annotations

import logging
from typing import Any, List, Optional

from .core.exceptions import InvalidPathError, MissingSectionError, MissingValueError
from .core.logger import Log
from .core.optional_imports import WINREG_AVAILABLE
from .store.base import SEP, CreateOptions, Section, check_value_name
from .store.encoding import RegType
from .store.memory import shared_root
from .store.native import NativeSection

logger = logging.getLogger("hivepath.path_store")

DEFAULT_ROOT = "HKEY_CURRENT_USER"


def default_root() -> Section:
    """HKEY_CURRENT_USER: the live one on Windows, a process-wide in-memory tree elsewhere."""
    if WINREG_AVAILABLE:
        return NativeSection.predefined(DEFAULT_ROOT)
    Log.warn_once(
        logger,
        "default-root-memory",
        "Native registry not available on this platform; using in-memory HKEY_CURRENT_USER",
    )
    return shared_root(DEFAULT_ROOT)


class PathStore:
    def __init__(self, root: Optional[Section] = None) -> None:
        self._root = default_root() if root is None else root

    def __repr__(self) -> str:
        return f"<PathStore root={self._root!r}>"

    @property
    def root(self) -> Section:
        return self._root

    @property
    def value_count(self) -> int:
        """Number of parameters directly under the root."""
        return self._root.value_count

    @property
    def subkey_count(self) -> int:
        """Number of sections directly under the root."""
        return self._root.subsection_count

    @staticmethod
    def prepare_path(path: str) -> str:
        """
        Normalize a section path: '/' becomes '\\', runs of separators
        collapse and leading/trailing separators are dropped.
        """
        if path is None:
            raise InvalidPathError(msg="section path must not be None")
        if not isinstance(path, str):
            raise InvalidPathError(msg=f"section path must be a string, got {type(path).__name__}")
        return SEP.join(p for p in path.replace("/", SEP).split(SEP) if p)

    def _open_existing(self, path: str, *, writable: bool = False) -> Optional[Section]:
        return self._root.open(self.prepare_path(path), writable=writable)

    def _require(self, path: str) -> Section:
        section = self._open_existing(path)
        if section is None:
            raise MissingSectionError(msg=f"section not found: {path}").with_context(path=path)
        return section

    def write(
        self,
        path: str,
        parameter: str,
        value: Any,
        writable: bool = True,
        options: CreateOptions = CreateOptions.NONE,
        kind: Optional[RegType] = None,
    ) -> None:
        """
        Set `parameter` under `path`, creating the section and its ancestors
        if needed. `writable=False` creates the section through a read-only
        handle, so the set itself is refused with ReadOnlySectionError.
        """
        name = check_value_name(parameter)
        p = self.prepare_path(path)
        with self._root.create(p, writable=writable, options=options) as section:
            section.set_value(name, value, kind)
        logger.debug("Wrote %s [%s]", p or "<root>", name)

    def read(self, path: str, parameter: str, default: Any = None) -> Any:
        """Value of `parameter` under `path`; `default` when the parameter is absent."""
        name = check_value_name(parameter)
        with self._require(path) as section:
            return section.get_value(name, default)

    def read_kind(self, path: str, parameter: str) -> Optional[RegType]:
        name = check_value_name(parameter)
        with self._require(path) as section:
            return section.get_kind(name)

    def delete_value(self, path: str, parameter: str, *, missing_ok: bool = True) -> None:
        """
        Remove `parameter` from `path`. A missing section or parameter is
        ignored unless missing_ok is False.
        """
        name = check_value_name(parameter)
        section = self._open_existing(path, writable=True)
        if section is None:
            if missing_ok:
                return
            raise MissingSectionError(msg=f"section not found: {path}").with_context(path=path)
        with section:
            found = section.delete_value(name)
        if not found and not missing_ok:
            raise MissingValueError(msg=f"value not found: {name}").with_context(path=path, parameter=name)
        if found:
            logger.debug("Deleted value %s [%s]", self.prepare_path(path), name)

    def delete_key(self, path: str, *, recursive: bool = False, missing_ok: bool = True) -> None:
        """
        Remove the section at `path`. Without `recursive` a section that
        still has subsections is refused with SectionNotEmptyError.
        """
        p = self.prepare_path(path)
        if not p:
            raise InvalidPathError(msg="cannot delete the root section")
        found = self._root.delete_tree(p) if recursive else self._root.delete_child(p)
        if not found and not missing_ok:
            raise MissingSectionError(msg=f"section not found: {path}").with_context(path=path)

    def get_value_count(self, path: str) -> int:
        with self._require(path) as section:
            return section.value_count

    def get_subkey_count(self, path: str) -> int:
        with self._require(path) as section:
            return section.subsection_count

    def exists(self, path: str) -> bool:
        section = self._open_existing(path)
        if section is None:
            return False
        section.close()
        return True

    def list_values(self, path: str) -> List[str]:
        with self._require(path) as section:
            return section.value_names()

    def list_sections(self, path: str) -> List[str]:
        with self._require(path) as section:
            return section.child_names()
