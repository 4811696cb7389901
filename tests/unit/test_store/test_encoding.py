# SPDX-License-Identifier: LGPL-3.0-or-later
from __future__ import annotations

import pytest

from hivepath.core.exceptions import InvalidValueError
from hivepath.store.encoding import (
    RegType,
    decode_value,
    encode_value,
    infer_kind,
    kind_of,
    normalize_value,
)


@pytest.mark.unit
class TestInference:
    @pytest.mark.parametrize(
        "value, kind",
        [
            ("text", RegType.REG_SZ),
            (0, RegType.REG_DWORD),
            (0xFFFFFFFF, RegType.REG_DWORD),
            (0x100000000, RegType.REG_QWORD),
            (True, RegType.REG_DWORD),
            (b"", RegType.REG_BINARY),
            (bytearray(b"x"), RegType.REG_BINARY),
            (["a"], RegType.REG_MULTI_SZ),
            (("a", "b"), RegType.REG_MULTI_SZ),
            (3.5, RegType.REG_SZ),
        ],
    )
    def test_infer_kind(self, value, kind):
        assert infer_kind(value) == kind

    def test_fallback_is_str(self):
        assert normalize_value(3.5) == (RegType.REG_SZ, "3.5")

    def test_none_rejected(self):
        with pytest.raises(InvalidValueError):
            normalize_value(None)

    @pytest.mark.parametrize("value", [-1, 1 << 64])
    def test_out_of_range_ints(self, value):
        with pytest.raises(InvalidValueError):
            normalize_value(value)

    def test_dword_bounds_with_explicit_kind(self):
        with pytest.raises(InvalidValueError):
            normalize_value(1 << 32, RegType.REG_DWORD)
        assert normalize_value(True, RegType.REG_DWORD) == (RegType.REG_DWORD, 1)

    def test_multi_sz_needs_strings(self):
        with pytest.raises(InvalidValueError):
            normalize_value(["a", 1], RegType.REG_MULTI_SZ)
        with pytest.raises(InvalidValueError):
            normalize_value("ab", RegType.REG_MULTI_SZ)

    def test_binary_needs_bytes(self):
        with pytest.raises(InvalidValueError):
            normalize_value("ab", RegType.REG_BINARY)
        assert normalize_value(bytearray(b"ab"), RegType.REG_BINARY) == (RegType.REG_BINARY, b"ab")

    def test_kind_of_unknown_number(self):
        assert kind_of(4) is RegType.REG_DWORD
        assert kind_of(0x1234) is RegType.REG_BINARY


@pytest.mark.unit
class TestRawEncoding:
    def test_reg_sz(self):
        assert encode_value(RegType.REG_SZ, "ab") == b"a\x00b\x00\x00\x00"

    def test_reg_sz_decode_stops_at_nul(self):
        assert decode_value(RegType.REG_SZ, "ab\0junk".encode("utf-16le")) == "ab"

    def test_dword_is_little_endian(self):
        assert encode_value(RegType.REG_DWORD, 1) == b"\x01\x00\x00\x00"
        assert decode_value(RegType.REG_DWORD, b"\x01\x00\x00\x00") == 1

    def test_dword_big_endian(self):
        assert encode_value(RegType.REG_DWORD_BIG_ENDIAN, 1) == b"\x00\x00\x00\x01"
        assert decode_value(RegType.REG_DWORD_BIG_ENDIAN, b"\x00\x00\x00\x01") == 1

    def test_qword(self):
        raw = encode_value(RegType.REG_QWORD, 1 << 40)
        assert len(raw) == 8
        assert decode_value(RegType.REG_QWORD, raw) == 1 << 40

    def test_short_dword_is_padded(self):
        assert decode_value(RegType.REG_DWORD, b"\x05") == 5

    def test_multi_sz(self):
        raw = encode_value(RegType.REG_MULTI_SZ, ["a", "bc"])
        assert raw == "a\0bc\0\0".encode("utf-16le")
        assert decode_value(RegType.REG_MULTI_SZ, raw) == ["a", "bc"]

    def test_empty_multi_sz(self):
        assert decode_value(RegType.REG_MULTI_SZ, encode_value(RegType.REG_MULTI_SZ, [])) == []

    def test_other_kinds_are_bytes(self):
        assert decode_value(RegType.REG_RESOURCE_LIST, b"\x01\x02") == b"\x01\x02"
        assert decode_value(RegType.REG_NONE, None) == b""

    def test_lone_surrogate_survives(self):
        s = "a\ud800b"
        assert decode_value(RegType.REG_SZ, encode_value(RegType.REG_SZ, s)) == s
        assert decode_value(RegType.REG_MULTI_SZ, encode_value(RegType.REG_MULTI_SZ, [s])) == [s]

    def test_odd_trailing_byte_dropped(self):
        assert decode_value(RegType.REG_SZ, "ab".encode("utf-16le") + b"\x00") == "ab"
