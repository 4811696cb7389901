# SPDX-License-Identifier: LGPL-3.0-or-later
"""Hive-file backend driven through FakeHivex."""
from __future__ import annotations

import pytest

from fakes.fake_logger import FakeLogger
from hivepath.core import optional_imports
from hivepath.core.exceptions import (
    MissingValueError,
    ReadOnlySectionError,
    SectionNotEmptyError,
    StoreClosedError,
    StoreIOError,
    StoreUnavailableError,
    UnsupportedOptionError,
)
from hivepath.path_store import PathStore
from hivepath.store import hive
from hivepath.store.base import CreateOptions
from hivepath.store.encoding import RegType
from hivepath.store.hive import HiveStore


@pytest.mark.unit
class TestHiveOpen:
    def test_missing_file(self, fake_hivex, tmp_path):
        with pytest.raises(StoreIOError):
            HiveStore(tmp_path / "nope")

    def test_truncated_file(self, fake_hivex, tmp_path):
        p = tmp_path / "small"
        p.write_bytes(b"regf" + b"\0" * 100)
        with pytest.raises(StoreIOError) as ei:
            HiveStore(p)
        assert "too small" in str(ei.value)

    def test_bad_signature(self, fake_hivex, tmp_path):
        p = tmp_path / "bad"
        p.write_bytes(b"nope" + b"\0" * 5000)
        with pytest.raises(StoreIOError):
            HiveStore(p)

    def test_bindings_missing(self, monkeypatch, hive_file):
        monkeypatch.setattr(hive, "hivex", None)
        monkeypatch.setattr(optional_imports, "HIVEX_AVAILABLE", False)
        with pytest.raises(StoreUnavailableError):
            HiveStore(hive_file)


@pytest.mark.unit
class TestHiveReadWrite:
    def test_commit_on_clean_exit(self, fake_hivex, hive_file):
        with HiveStore(hive_file, write=True) as hs:
            PathStore(hs.root()).write("ControlSet001/Services/viostor", "Start", 0)
            assert hs.dirty

        with HiveStore(hive_file) as hs:
            store = PathStore(hs.root())
            assert store.read("ControlSet001\\Services\\viostor", "Start") == 0
            assert store.read_kind("ControlSet001/Services/viostor", "Start") == RegType.REG_DWORD

    def test_no_commit_when_block_fails(self, fake_hivex, hive_file):
        with pytest.raises(RuntimeError):
            with HiveStore(hive_file, write=True) as hs:
                PathStore(hs.root()).write("Select", "Current", 1)
                raise RuntimeError("boom")

        with HiveStore(hive_file) as hs:
            assert not PathStore(hs.root()).exists("Select")

    @pytest.mark.parametrize(
        "value",
        ["Red Hat VirtIO SCSI", 0xDEADBEEF, 1 << 40, b"\x01\x02", ["a", "b c"], ""],
    )
    def test_value_round_trip(self, fake_hivex, hive_file, value):
        with HiveStore(hive_file, write=True) as hs:
            store = PathStore(hs.root())
            store.write("Software/Acme", "v", value)
            assert store.read("Software/Acme", "v") == value

    def test_raw_encoding_is_registry_format(self, fake_hivex, hive_file):
        with HiveStore(hive_file, write=True) as hs:
            PathStore(hs.root()).write("S", "name", "ab")
            h = hs.handle()
            node = h.node_get_child(h.root(), "S")
            (val,) = h.node_values(node)
            assert h.value_value(val) == (1, "ab\0".encode("utf-16le"))

    def test_read_only_hive_refuses_writes(self, fake_hivex, hive_file):
        with HiveStore(hive_file) as hs:
            store = PathStore(hs.root())
            with pytest.raises(ReadOnlySectionError):
                store.write("a", "x", 1)
            with pytest.raises(ReadOnlySectionError):
                hs.commit()

    def test_volatile_not_supported(self, fake_hivex, hive_file):
        with HiveStore(hive_file, write=True) as hs:
            with pytest.raises(UnsupportedOptionError):
                PathStore(hs.root()).write("a", "x", 1, options=CreateOptions.VOLATILE)

    def test_delete_value_rewrites_value_list(self, fake_hivex, hive_file):
        with HiveStore(hive_file, write=True) as hs:
            store = PathStore(hs.root())
            store.write("a", "x", 1)
            store.write("a", "y", "keep")
            store.delete_value("a", "X")
            assert store.list_values("a") == ["y"]
            assert store.read("a", "y") == "keep"
            with pytest.raises(MissingValueError):
                store.delete_value("a", "x", missing_ok=False)

    def test_delete_key(self, fake_hivex, hive_file):
        with HiveStore(hive_file, write=True) as hs:
            store = PathStore(hs.root())
            store.write("a/b/c", "x", 1)
            stale = hs.root().open("a\\b\\c")
            with pytest.raises(SectionNotEmptyError):
                store.delete_key("a")
            store.delete_key("a", recursive=True)
            assert store.subkey_count == 0
            with pytest.raises(StoreIOError):
                stale.get_value("x")

    def test_closed_store(self, fake_hivex, hive_file):
        hs = HiveStore(hive_file, write=True)
        root = hs.root()
        hs.close()
        with pytest.raises(StoreClosedError):
            root.value_names()
        with pytest.raises(StoreClosedError):
            hs.root()

    def test_counts(self, fake_hivex, hive_file):
        with HiveStore(hive_file, write=True) as hs:
            store = PathStore(hs.root())
            store.write("a", "x", 1)
            store.write("a", "y", 2)
            store.write("a/b", "z", 3)
            assert store.get_value_count("a") == 2
            assert store.get_subkey_count("a") == 1
            assert store.subkey_count == 1

    def test_value_writes_logged_at_trace(self, fake_hivex, hive_file, monkeypatch):
        fake = FakeLogger()
        monkeypatch.setattr(hive, "logger", fake)
        with HiveStore(hive_file, write=True) as hs:
            PathStore(hs.root()).write("Select", "Current", 1)
        traces = [msg for level, msg in fake.records if level == "trace"]
        assert traces == ["Set Select [Current] REG_DWORD (4 bytes)"]
        assert any("Committing hive" in msg for _, msg in fake.records)
