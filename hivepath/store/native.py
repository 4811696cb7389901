# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# hivepath/store/native.py
"""
Live Windows registry through the standard winreg module.

FileNotFoundError from winreg means "no such key/value" and becomes a
None/False result; every other OSError (PermissionError included) is left
to propagate to the caller unchanged.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from ..core.exceptions import InvalidPathError, SectionNotEmptyError
from ..core.optional_imports import require_winreg, winreg
from .base import SEP, CreateOptions, Section
from .encoding import RegType, encode_value, kind_of

logger = logging.getLogger("hivepath.store.native")

_ROOT_ALIASES: Dict[str, str] = {
    "HKCU": "HKEY_CURRENT_USER",
    "HKLM": "HKEY_LOCAL_MACHINE",
    "HKCR": "HKEY_CLASSES_ROOT",
    "HKU": "HKEY_USERS",
    "HKCC": "HKEY_CURRENT_CONFIG",
}

# winreg converts these itself; every other kind is handed over as raw bytes
_NATIVE_KINDS = (
    RegType.REG_SZ,
    RegType.REG_EXPAND_SZ,
    RegType.REG_DWORD,
    RegType.REG_QWORD,
    RegType.REG_MULTI_SZ,
)


def root_name(name: str) -> str:
    """Canonical predefined key name for `name` or one of its short aliases."""
    key = (name or "").strip().upper()
    key = _ROOT_ALIASES.get(key, key)
    if key not in _ROOT_ALIASES.values():
        raise InvalidPathError(msg=f"unknown registry root: {name!r}")
    return key


def _access(writable: bool) -> int:
    return winreg.KEY_READ | (winreg.KEY_WRITE if writable else 0)


class NativeSection(Section):
    def __init__(self, hkey: Any, name: str, *, writable: bool, owned: bool = True) -> None:
        super().__init__(name, writable=writable)
        self._hkey = hkey
        self._owned = owned

    @classmethod
    def predefined(cls, name: str = "HKEY_CURRENT_USER") -> "NativeSection":
        require_winreg()
        key = root_name(name)
        return cls(getattr(winreg, key), key, writable=True, owned=False)

    def _child_path(self, parts: List[str]) -> str:
        return SEP.join([self.name] + parts)

    # -- navigation ---------------------------------------------------------

    def _open(self, parts: List[str], writable: bool) -> Optional[Section]:
        try:
            hk = winreg.OpenKeyEx(self._hkey, SEP.join(parts), 0, _access(writable))
        except FileNotFoundError:
            return None
        return NativeSection(hk, self._child_path(parts), writable=writable)

    def _create(self, parts: List[str], writable: bool, options: CreateOptions) -> Section:
        hk = winreg.CreateKeyEx(self._hkey, SEP.join(parts), 0, _access(writable))
        logger.debug("Opened/created %s", self._child_path(parts))
        return NativeSection(hk, self._child_path(parts), writable=writable)

    # -- values -------------------------------------------------------------

    def _query(self, name: str) -> Optional[tuple]:
        try:
            return winreg.QueryValueEx(self._hkey, name)
        except FileNotFoundError:
            return None

    def _get_value(self, name: str, default: Any) -> Any:
        hit = self._query(name)
        if hit is None:
            return default
        value, t = hit
        kind = kind_of(t)
        if kind in _NATIVE_KINDS:
            return value
        return b"" if value is None else bytes(value)

    def _get_kind(self, name: str) -> Optional[RegType]:
        hit = self._query(name)
        return None if hit is None else kind_of(hit[1])

    def _set_value(self, name: str, kind: RegType, value: Any) -> None:
        payload = value if kind in _NATIVE_KINDS else encode_value(kind, value)
        winreg.SetValueEx(self._hkey, name, 0, int(kind), payload)

    def _delete_value(self, name: str) -> bool:
        try:
            winreg.DeleteValue(self._hkey, name)
        except FileNotFoundError:
            return False
        return True

    def _value_names(self) -> List[str]:
        _, nvals, _ = winreg.QueryInfoKey(self._hkey)
        return [winreg.EnumValue(self._hkey, i)[0] for i in range(nvals)]

    @property
    def value_count(self) -> int:
        self._check_open()
        return int(winreg.QueryInfoKey(self._hkey)[1])

    # -- children -----------------------------------------------------------

    def _child_names(self) -> List[str]:
        nsub = winreg.QueryInfoKey(self._hkey)[0]
        return [winreg.EnumKey(self._hkey, i) for i in range(nsub)]

    @property
    def subsection_count(self) -> int:
        self._check_open()
        return int(winreg.QueryInfoKey(self._hkey)[0])

    def _children_of(self, rel: str) -> Optional[List[str]]:
        try:
            with winreg.OpenKeyEx(self._hkey, rel, 0, winreg.KEY_READ) as hk:
                nsub = winreg.QueryInfoKey(hk)[0]
                return [winreg.EnumKey(hk, i) for i in range(nsub)]
        except FileNotFoundError:
            return None

    def _remove_tree(self, rel: str) -> None:
        for ch in self._children_of(rel) or []:
            self._remove_tree(rel + SEP + ch)
        winreg.DeleteKey(self._hkey, rel)

    def _delete_child(self, parts: List[str], *, recursive: bool) -> bool:
        rel = SEP.join(parts)
        kids = self._children_of(rel)
        if kids is None:
            return False
        if kids and not recursive:
            raise SectionNotEmptyError(msg=f"section has subsections: {self._child_path(parts)}").with_context(
                subsections=len(kids)
            )
        if recursive:
            self._remove_tree(rel)
        else:
            winreg.DeleteKey(self._hkey, rel)
        logger.debug("Deleted %s (recursive=%s)", self._child_path(parts), recursive)
        return True

    def _release(self) -> None:
        if self._owned:
            winreg.CloseKey(self._hkey)
