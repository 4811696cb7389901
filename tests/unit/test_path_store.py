# SPDX-License-Identifier: LGPL-3.0-or-later
"""PathStore behavior against the in-memory backend."""
from __future__ import annotations

import pytest

from hivepath import path_store as path_store_mod
from hivepath.core.exceptions import (
    InvalidPathError,
    InvalidValueError,
    MissingSectionError,
    MissingValueError,
    ReadOnlySectionError,
    SectionNotEmptyError,
    UnsupportedOptionError,
)
from hivepath.path_store import PathStore
from hivepath.store.base import CreateOptions
from hivepath.store.encoding import RegType
from hivepath.store.memory import MemorySection


@pytest.fixture
def store(mem_root):
    return PathStore(mem_root)


@pytest.mark.unit
class TestPreparePath:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("a/b", "a\\b"),
            ("/a/b/", "a\\b"),
            ("a//b/", "a\\b"),
            ("\\a\\b\\", "a\\b"),
            ("a/b\\c", "a\\b\\c"),
            ("Software", "Software"),
            ("", ""),
            ("///", ""),
        ],
    )
    def test_normalizes(self, raw, expected):
        assert PathStore.prepare_path(raw) == expected

    @pytest.mark.parametrize("raw", ["a/b", "//x//y//", "\\Software\\Acme/App/", "plain"])
    def test_idempotent(self, raw):
        once = PathStore.prepare_path(raw)
        assert PathStore.prepare_path(once) == once

    def test_slash_and_native_forms_agree(self):
        assert PathStore.prepare_path("a/b/c") == PathStore.prepare_path("a\\b\\c")

    @pytest.mark.parametrize("bad", [None, 42, b"a/b"])
    def test_rejects_non_strings(self, bad):
        with pytest.raises(InvalidPathError):
            PathStore.prepare_path(bad)


@pytest.mark.unit
class TestReadWrite:
    def test_int_round_trip(self, store):
        store.write("a/b", "x", 42)
        assert store.read("a/b", "x") == 42
        assert store.read_kind("a/b", "x") == RegType.REG_DWORD

    def test_irregular_slashes_address_same_section(self, store):
        store.write("a//b/", "y", "s")
        assert store.read("a/b", "y") == "s"
        assert store.read("\\a\\b", "y") == "s"

    @pytest.mark.parametrize(
        "value, kind",
        [
            ("hello", RegType.REG_SZ),
            (7, RegType.REG_DWORD),
            (1 << 40, RegType.REG_QWORD),
            (b"\x00\x01\xff", RegType.REG_BINARY),
            (["one", "two"], RegType.REG_MULTI_SZ),
        ],
    )
    def test_value_kinds(self, store, value, kind):
        store.write("Software/Acme", "v", value)
        assert store.read("Software/Acme", "v") == value
        assert store.read_kind("Software/Acme", "v") == kind

    def test_explicit_kind(self, store):
        store.write("Env", "Path", "%SystemRoot%\\bin", kind=RegType.REG_EXPAND_SZ)
        assert store.read_kind("Env", "Path") == RegType.REG_EXPAND_SZ
        assert store.read("Env", "Path") == "%SystemRoot%\\bin"

    def test_overwrite(self, store):
        store.write("a", "x", 1)
        store.write("a", "x", "now a string")
        assert store.read("a", "x") == "now a string"
        assert store.get_value_count("a") == 1

    def test_names_are_case_insensitive(self, store):
        store.write("Software/Acme", "Name", "v")
        assert store.read("SOFTWARE/acme", "NAME") == "v"
        assert store.list_sections("") == ["Software"]

    def test_missing_parameter_reads_default(self, store):
        store.write("a", "x", 1)
        assert store.read("a", "nope") is None
        assert store.read("a", "nope", default="d") == "d"

    def test_missing_section_is_reported(self, store):
        with pytest.raises(MissingSectionError) as ei:
            store.read("no/such", "x")
        assert ei.value.context["path"] == "no/such"

    def test_none_parameter_is_argument_error(self, store):
        with pytest.raises(InvalidPathError):
            store.read("missing", None)
        with pytest.raises(InvalidPathError):
            store.write("a", None, 1)

    def test_negative_int_rejected(self, store):
        with pytest.raises(InvalidValueError):
            store.write("a", "x", -1)

    def test_read_only_write_creates_section_but_refuses_value(self, store):
        with pytest.raises(ReadOnlySectionError):
            store.write("locked/down", "x", 1, writable=False)
        assert store.exists("locked/down")
        assert store.get_value_count("locked/down") == 0

    def test_volatile_option(self, store, mem_root):
        store.write("Session", "id", 5, options=CreateOptions.VOLATILE)
        assert store.read("Session", "id") == 5
        assert mem_root.discard_volatile() == 1
        assert not store.exists("Session")

    def test_unknown_option(self, store):
        with pytest.raises(UnsupportedOptionError):
            store.write("a", "x", 1, options="turbo")


@pytest.mark.unit
class TestDeleteValue:
    def test_lenient_missing_value_is_noop(self, store):
        store.write("a", "x", 1)
        store.delete_value("a", "nope")
        assert store.get_value_count("a") == 1

    def test_lenient_missing_section_is_noop(self, store):
        store.delete_value("no/such", "x")
        assert not store.exists("no/such")

    def test_strict_missing_value_raises(self, store):
        store.write("a", "x", 1)
        with pytest.raises(MissingValueError):
            store.delete_value("a", "nope", missing_ok=False)

    def test_strict_missing_section_raises(self, store):
        with pytest.raises(MissingSectionError):
            store.delete_value("no/such", "x", missing_ok=False)

    def test_deletes(self, store):
        store.write("a", "x", 1)
        store.write("a", "y", 2)
        store.delete_value("a/", "X", missing_ok=False)
        assert store.list_values("a") == ["y"]


@pytest.mark.unit
class TestDeleteKey:
    def test_recursive_removes_subtree(self, store):
        store.write("a/b/c", "x", 1)
        store.write("a/b", "y", 2)
        store.delete_key("a/b", recursive=True)
        assert store.exists("a")
        for gone in ("a/b", "a/b/c"):
            with pytest.raises(MissingSectionError):
                store.get_subkey_count(gone)
            with pytest.raises(MissingSectionError):
                store.get_value_count(gone)

    def test_non_recursive_with_children_refused(self, store):
        store.write("a/b", "x", 1)
        with pytest.raises(SectionNotEmptyError):
            store.delete_key("a")
        assert store.read("a/b", "x") == 1

    def test_non_recursive_leaf(self, store):
        store.write("a/b", "x", 1)
        store.delete_key("/a/b/")
        assert store.get_subkey_count("a") == 0

    def test_missing_lenient_and_strict(self, store):
        store.delete_key("no/such")
        with pytest.raises(MissingSectionError):
            store.delete_key("no/such", missing_ok=False)

    def test_root_cannot_be_deleted(self, store):
        with pytest.raises(InvalidPathError):
            store.delete_key("/")


@pytest.mark.unit
class TestCounts:
    def test_root_counts_follow_writes_and_deletes(self, store):
        assert (store.value_count, store.subkey_count) == (0, 0)
        store.write("a", "x", 1)
        store.write("b", "y", 2)
        store.write("", "top", 3)
        assert store.subkey_count == 2
        assert store.value_count == 1

        store.delete_value("", "top")
        store.delete_key("b")
        assert store.subkey_count == 1
        assert store.value_count == 0

    def test_section_counts(self, store):
        store.write("a", "x", 1)
        store.write("a", "y", 2)
        store.write("a/c1", "z", 3)
        store.write("a/c2", "z", 3)
        assert store.get_value_count("a") == 2
        assert store.get_subkey_count("a") == 2

    def test_listing(self, store):
        store.write("a/B", "x", 1)
        store.write("a", "Y", 2)
        assert store.list_sections("a") == ["B"]
        assert store.list_values("a") == ["Y"]
        with pytest.raises(MissingSectionError):
            store.list_values("zzz")


@pytest.mark.unit
class TestRootBinding:
    def test_root_never_changes(self, store, mem_root):
        store.write("a", "x", 1)
        store.delete_key("a")
        assert store.root is mem_root

    def test_default_root_off_windows(self, monkeypatch):
        monkeypatch.setattr(path_store_mod, "WINREG_AVAILABLE", False)
        store = PathStore()
        assert isinstance(store.root, MemorySection)
        assert store.root.name == "HKEY_CURRENT_USER"

    def test_default_roots_share_state(self, monkeypatch):
        from hivepath.store import memory

        monkeypatch.setattr(path_store_mod, "WINREG_AVAILABLE", False)
        monkeypatch.setattr(memory, "_DEFAULT_ROOTS", {})
        PathStore().write("Shared", "x", 1)
        assert PathStore().read("Shared", "x") == 1
