# SPDX-License-Identifier: LGPL-3.0-or-later
# hivepath/store/__init__.py
"""
Registry store backends.

- base: Section handle interface, CreateOptions, path splitting
- encoding: RegType and value encode/decode
- memory: process-local tree
- hive: offline hive files via hivex
- native: live Windows registry via winreg
"""
from .base import CreateOptions, Section, split_path
from .encoding import RegType
from .hive import HiveSection, HiveStore
from .memory import MemorySection, shared_root
from .native import NativeSection

__all__ = [
    "CreateOptions",
    "Section",
    "split_path",
    "RegType",
    "HiveSection",
    "HiveStore",
    "MemorySection",
    "shared_root",
    "NativeSection",
]
