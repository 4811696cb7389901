# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# hivepath/core/optional_imports.py
"""
Centralized optional imports.

Backends and presentation helpers check the *_AVAILABLE flags here instead of
scattering import guards; require_*() turns a missing package into a
StoreUnavailableError with an install hint.
"""

from __future__ import annotations

from .exceptions import StoreUnavailableError

# hivex (offline registry hive files; distro package python3-hivex)
try:
    import hivex  # type: ignore

    HIVEX_AVAILABLE = True
except Exception:
    hivex = None  # type: ignore
    HIVEX_AVAILABLE = False

# winreg (live registry, Windows only)
try:
    import winreg  # type: ignore

    WINREG_AVAILABLE = True
except Exception:
    winreg = None  # type: ignore
    WINREG_AVAILABLE = False

# Rich library (tree/table rendering in the CLI)
try:
    from rich.console import Console
    from rich.table import Table
    from rich.tree import Tree

    RICH_AVAILABLE = True
except Exception:
    Console = None  # type: ignore
    Table = None  # type: ignore
    Tree = None  # type: ignore
    RICH_AVAILABLE = False


def require_hivex() -> None:
    """Raise StoreUnavailableError if the hivex bindings are not importable."""
    if not HIVEX_AVAILABLE:
        raise StoreUnavailableError(
            msg="hivex Python bindings are required for hive files. "
            "Install the python3-hivex package from your distribution",
        )


def require_winreg() -> None:
    """Raise StoreUnavailableError when not running on Windows."""
    if not WINREG_AVAILABLE:
        raise StoreUnavailableError(msg="the native registry backend is only available on Windows")


def require_rich() -> None:
    """Raise StoreUnavailableError if Rich is not available."""
    if not RICH_AVAILABLE:
        raise StoreUnavailableError(
            msg="Rich library is required but not installed. Install with: pip install rich"
        )
