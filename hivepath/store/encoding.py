# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
"""
Registry value kinds and their on-disk encoding.

Provides:
- RegType, the registry value kinds
- Kind inference from Python values (what a store does when no kind is given)
- Validation/normalization of a value for a kind
- Encoding/decoding to the raw bytes a hive stores (REG_SZ, REG_DWORD, ...)
"""
from __future__ import annotations

from enum import IntEnum
from typing import Any, List, Optional, Tuple

from ..core.exceptions import InvalidValueError


class RegType(IntEnum):
    REG_NONE = 0
    REG_SZ = 1
    REG_EXPAND_SZ = 2
    REG_BINARY = 3
    REG_DWORD = 4
    REG_DWORD_BIG_ENDIAN = 5
    REG_LINK = 6
    REG_MULTI_SZ = 7
    REG_RESOURCE_LIST = 8
    REG_FULL_RESOURCE_DESCRIPTOR = 9
    REG_RESOURCE_REQUIREMENTS_LIST = 10
    REG_QWORD = 11


_DWORD_LIMIT = 1 << 32
_QWORD_LIMIT = 1 << 64

_STRING_KINDS = (RegType.REG_SZ, RegType.REG_EXPAND_SZ, RegType.REG_LINK)


def kind_of(t: Any) -> RegType:
    """Map a raw hive/winreg type number to RegType (unknown numbers read as REG_BINARY)."""
    try:
        return RegType(int(t))
    except (TypeError, ValueError):
        return RegType.REG_BINARY


def infer_kind(value: Any) -> RegType:
    if value is None:
        raise InvalidValueError(msg="registry value must not be None")
    if isinstance(value, str):
        return RegType.REG_SZ
    if isinstance(value, int):
        if 0 <= value < _DWORD_LIMIT:
            return RegType.REG_DWORD
        return RegType.REG_QWORD
    if isinstance(value, (bytes, bytearray, memoryview)):
        return RegType.REG_BINARY
    if isinstance(value, (list, tuple)) and all(isinstance(x, str) for x in value):
        return RegType.REG_MULTI_SZ
    return RegType.REG_SZ


def _require_int(value: Any, limit: int, kind: RegType) -> int:
    if isinstance(value, bool):
        value = int(value)
    if not isinstance(value, int):
        raise InvalidValueError(msg=f"{kind.name} needs an integer, got {type(value).__name__}")
    if not (0 <= value < limit):
        raise InvalidValueError(msg=f"{value} does not fit in {kind.name}").with_context(value=value)
    return value


def normalize_value(value: Any, kind: Optional[RegType] = None) -> Tuple[RegType, Any]:
    """
    Validate `value` for `kind` (inferred when None) and return (kind, value)
    in the canonical Python form a read returns:
      REG_SZ/REG_EXPAND_SZ -> str, REG_DWORD/REG_QWORD -> int,
      REG_MULTI_SZ -> list[str], everything else -> bytes.
    """
    if value is None:
        raise InvalidValueError(msg="registry value must not be None")
    k = infer_kind(value) if kind is None else kind_of(kind)

    if k in _STRING_KINDS:
        return k, value if isinstance(value, str) else str(value)
    if k in (RegType.REG_DWORD, RegType.REG_DWORD_BIG_ENDIAN):
        return k, _require_int(value, _DWORD_LIMIT, k)
    if k == RegType.REG_QWORD:
        return k, _require_int(value, _QWORD_LIMIT, k)
    if k == RegType.REG_MULTI_SZ:
        if isinstance(value, str) or not isinstance(value, (list, tuple)):
            raise InvalidValueError(msg="REG_MULTI_SZ needs a list of strings")
        if not all(isinstance(x, str) for x in value):
            raise InvalidValueError(msg="REG_MULTI_SZ items must all be strings")
        return k, list(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return k, bytes(value)
    raise InvalidValueError(msg=f"{k.name} needs bytes, got {type(value).__name__}")


# ---------------------------------------------------------------------------
# Raw encoding (hive files store every value as (type, bytes))
# ---------------------------------------------------------------------------


def _reg_sz(s: str) -> bytes:
    """Encode string as REG_SZ (UTF-16LE with null terminator)."""
    return (s + "\0").encode("utf-16le", errors="surrogatepass")


def _utf16(raw: bytes) -> str:
    # hives sometimes carry an odd trailing byte
    if len(raw) % 2:
        raw = raw[:-1]
    return raw.decode("utf-16le", errors="surrogatepass")


def _decode_reg_sz(raw: bytes) -> str:
    """Decode REG_SZ; text ends at the first NUL."""
    return _utf16(raw).split("\0", 1)[0]


def _reg_multi_sz(items: List[str]) -> bytes:
    if not items:
        return "\0".encode("utf-16le")
    return ("\0".join(items) + "\0\0").encode("utf-16le", errors="surrogatepass")


def _decode_reg_multi_sz(raw: bytes) -> List[str]:
    text = _utf16(raw).rstrip("\0")
    return text.split("\0") if text else []


def encode_value(kind: RegType, value: Any) -> bytes:
    """Encode an already normalized value (see normalize_value) to raw bytes."""
    if kind in _STRING_KINDS:
        return _reg_sz(value)
    if kind == RegType.REG_DWORD:
        return int(value).to_bytes(4, "little", signed=False)
    if kind == RegType.REG_DWORD_BIG_ENDIAN:
        return int(value).to_bytes(4, "big", signed=False)
    if kind == RegType.REG_QWORD:
        return int(value).to_bytes(8, "little", signed=False)
    if kind == RegType.REG_MULTI_SZ:
        return _reg_multi_sz(value)
    return bytes(value)


def decode_value(kind: RegType, raw: bytes) -> Any:
    raw = bytes(raw or b"")
    if kind in _STRING_KINDS:
        return _decode_reg_sz(raw)
    if kind == RegType.REG_DWORD:
        return int.from_bytes(raw[:4].ljust(4, b"\0"), "little", signed=False)
    if kind == RegType.REG_DWORD_BIG_ENDIAN:
        return int.from_bytes(raw[:4].rjust(4, b"\0"), "big", signed=False)
    if kind == RegType.REG_QWORD:
        return int.from_bytes(raw[:8].ljust(8, b"\0"), "little", signed=False)
    if kind == RegType.REG_MULTI_SZ:
        return _decode_reg_multi_sz(raw)
    return raw
