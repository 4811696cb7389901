# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# hivepath/__init__.py
"""
hivepath - path-based access to registry stores

Read, write and delete registry values by path against the live Windows
registry, an offline hive file, or an in-memory tree.

Usage as a library:

    from hivepath import PathStore, HiveStore

    store = PathStore()                     # HKEY_CURRENT_USER
    store.write("Software/Acme", "Enabled", 1)

    with HiveStore("/tmp/SOFTWARE", write=True) as hive:
        PathStore(hive.root()).read("Microsoft/Windows NT/CurrentVersion", "ProductName")
"""

__version__ = "0.1.0"

from .core.exceptions import (
    HivePathError,
    InvalidPathError,
    InvalidValueError,
    MissingSectionError,
    MissingValueError,
    ReadOnlySectionError,
    SectionNotEmptyError,
    StoreClosedError,
    StoreIOError,
    StoreUnavailableError,
    UnsupportedOptionError,
)
from .opener import open_store
from .path_store import PathStore, default_root
from .store import CreateOptions, HiveStore, MemorySection, NativeSection, RegType, Section

__all__ = [
    "__version__",
    "PathStore",
    "default_root",
    "open_store",
    "Section",
    "CreateOptions",
    "RegType",
    "HiveStore",
    "MemorySection",
    "NativeSection",
    "HivePathError",
    "InvalidPathError",
    "InvalidValueError",
    "MissingSectionError",
    "MissingValueError",
    "ReadOnlySectionError",
    "SectionNotEmptyError",
    "StoreClosedError",
    "StoreIOError",
    "StoreUnavailableError",
    "UnsupportedOptionError",
]
