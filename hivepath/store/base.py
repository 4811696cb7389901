# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# hivepath/store/base.py
"""
Section handle interface shared by all registry backends.

A Section is an open handle on one registry key. The public methods do the
checks every backend needs (closed handle, writability, name validation,
value normalization) and hand the backend-specific work to the underscore
methods subclasses implement.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, FrozenSet, List, Optional

from ..core.exceptions import (
    InvalidPathError,
    ReadOnlySectionError,
    StoreClosedError,
    UnsupportedOptionError,
)
from .encoding import RegType, normalize_value

SEP = "\\"
MAX_KEY_NAME = 255
MAX_VALUE_NAME = 16383


class CreateOptions(Enum):
    """Section creation options (same numbers as REG_OPTION_*)."""
    NONE = 0
    VOLATILE = 1
    BACKUP_RESTORE = 4

    @classmethod
    def coerce(cls, v: Any) -> "CreateOptions":
        if isinstance(v, cls):
            return v
        if v is None:
            return cls.NONE
        if isinstance(v, str):
            key = v.strip().upper().replace("-", "_")
            if key in cls.__members__:
                return cls.__members__[key]
        elif isinstance(v, int) and not isinstance(v, bool):
            for m in cls:
                if m.value == v:
                    return m
        raise UnsupportedOptionError(msg=f"unknown creation option: {v!r}")


def split_path(path: Any) -> List[str]:
    """
    Split a backslash-separated section path into names.

    Empty names are dropped, so "" addresses the section itself.
    """
    if path is None:
        raise InvalidPathError(msg="section path must not be None")
    if not isinstance(path, str):
        raise InvalidPathError(msg=f"section path must be a string, got {type(path).__name__}")
    parts = [p for p in path.split(SEP) if p]
    for p in parts:
        if len(p) > MAX_KEY_NAME:
            raise InvalidPathError(msg=f"section name longer than {MAX_KEY_NAME} characters").with_context(
                name=p[:32] + "..."
            )
    return parts


def check_value_name(name: Any) -> str:
    if name is None:
        raise InvalidPathError(msg="parameter name must not be None")
    if not isinstance(name, str):
        raise InvalidPathError(msg=f"parameter name must be a string, got {type(name).__name__}")
    if len(name) > MAX_VALUE_NAME:
        raise InvalidPathError(msg=f"parameter name longer than {MAX_VALUE_NAME} characters")
    return name


class Section(ABC):
    supported_options: FrozenSet[CreateOptions] = frozenset({CreateOptions.NONE})

    def __init__(self, name: str, *, writable: bool) -> None:
        self.name = name
        self.writable = bool(writable)
        self._closed = False

    def __repr__(self) -> str:
        state = "closed" if self._closed else ("rw" if self.writable else "ro")
        return f"<{self.__class__.__name__} {self.name!r} {state}>"

    def __enter__(self) -> "Section":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise StoreClosedError(msg=f"section handle is closed: {self.name}")

    def _check_writable(self) -> None:
        if not self.writable:
            raise ReadOnlySectionError(msg=f"section opened read-only: {self.name}")

    # -- navigation ---------------------------------------------------------

    def open(self, path: str, writable: bool = False) -> Optional["Section"]:
        """Open an existing descendant; None when any part of `path` is missing."""
        self._check_open()
        return self._open(split_path(path), bool(writable))

    def create(self, path: str, writable: bool = True, options: Any = CreateOptions.NONE) -> "Section":
        """Open `path`, creating it and any missing ancestors."""
        self._check_open()
        parts = split_path(path)
        opts = CreateOptions.coerce(options)
        if opts not in self.supported_options:
            raise UnsupportedOptionError(
                msg=f"{self.__class__.__name__} does not support creation option {opts.name}"
            )
        self._check_writable()
        return self._create(parts, bool(writable), opts)

    # -- values -------------------------------------------------------------

    def get_value(self, name: str, default: Any = None) -> Any:
        self._check_open()
        return self._get_value(check_value_name(name), default)

    def get_kind(self, name: str) -> Optional[RegType]:
        self._check_open()
        return self._get_kind(check_value_name(name))

    def set_value(self, name: str, value: Any, kind: Optional[RegType] = None) -> None:
        self._check_open()
        name = check_value_name(name)
        self._check_writable()
        k, v = normalize_value(value, kind)
        self._set_value(name, k, v)

    def delete_value(self, name: str) -> bool:
        """Remove a value; returns False when it did not exist."""
        self._check_open()
        name = check_value_name(name)
        self._check_writable()
        return self._delete_value(name)

    def value_names(self) -> List[str]:
        self._check_open()
        return self._value_names()

    @property
    def value_count(self) -> int:
        return len(self.value_names())

    # -- children -----------------------------------------------------------

    def child_names(self) -> List[str]:
        self._check_open()
        return self._child_names()

    @property
    def subsection_count(self) -> int:
        return len(self.child_names())

    def delete_child(self, path: str) -> bool:
        """
        Delete a descendant that has no subsections of its own.
        Returns False when it did not exist; raises SectionNotEmptyError
        when it has subsections.
        """
        self._check_open()
        parts = split_path(path)
        if not parts:
            raise InvalidPathError(msg="cannot delete the section a handle is bound to")
        self._check_writable()
        return self._delete_child(parts, recursive=False)

    def delete_tree(self, path: str) -> bool:
        """Delete a descendant and everything below it; False when it did not exist."""
        self._check_open()
        parts = split_path(path)
        if not parts:
            raise InvalidPathError(msg="cannot delete the section a handle is bound to")
        self._check_writable()
        return self._delete_child(parts, recursive=True)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._release()

    # -- backend hooks ------------------------------------------------------

    @abstractmethod
    def _open(self, parts: List[str], writable: bool) -> Optional["Section"]: ...

    @abstractmethod
    def _create(self, parts: List[str], writable: bool, options: CreateOptions) -> "Section": ...

    @abstractmethod
    def _get_value(self, name: str, default: Any) -> Any: ...

    @abstractmethod
    def _get_kind(self, name: str) -> Optional[RegType]: ...

    @abstractmethod
    def _set_value(self, name: str, kind: RegType, value: Any) -> None: ...

    @abstractmethod
    def _delete_value(self, name: str) -> bool: ...

    @abstractmethod
    def _value_names(self) -> List[str]: ...

    @abstractmethod
    def _child_names(self) -> List[str]: ...

    @abstractmethod
    def _delete_child(self, parts: List[str], *, recursive: bool) -> bool: ...

    def _release(self) -> None:
        """Free backend resources held by this handle."""
