# SPDX-License-Identifier: LGPL-3.0-or-later
import os
import sys
from pathlib import Path

import pytest

_THIS_DIR = Path(__file__).resolve().parent
_REPO_ROOT = _THIS_DIR.parent

if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

os.environ.setdefault("PYTHONPATH", str(_REPO_ROOT))


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests with no external store")
    config.addinivalue_line("markers", "security: secret redaction checks")
    config.addinivalue_line("markers", "windows: needs the live Windows registry")


@pytest.fixture
def mem_root():
    from hivepath.store.memory import MemorySection

    return MemorySection.new_root("HKEY_CURRENT_USER")


@pytest.fixture
def fake_hivex(monkeypatch):
    """Route hivepath.store.hive through FakeHivex; returns the fake module."""
    from fakes import fake_hivex as fh
    from hivepath.store import hive

    fh.FakeHivex.reset()
    monkeypatch.setattr(hive, "hivex", fh)
    return fh


@pytest.fixture
def hive_file(tmp_path):
    """A file that passes the regf sanity checks."""
    p = tmp_path / "SYSTEM"
    p.write_bytes(b"regf" + b"\0" * 4092)
    return p


@pytest.fixture
def fake_winreg(monkeypatch):
    """Route hivepath.store.native through the fake winreg module; returns it."""
    from fakes import fake_winreg as fw
    from hivepath.core import optional_imports
    from hivepath.store import native

    fw.reset()
    monkeypatch.setattr(native, "winreg", fw)
    monkeypatch.setattr(optional_imports, "WINREG_AVAILABLE", True)
    return fw
