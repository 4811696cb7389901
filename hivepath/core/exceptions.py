# SPDX-License-Identifier: LGPL-3.0-or-later
# hivepath/core/exceptions.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


def _safe_int(x: Any, default: int = 1) -> int:
    try:
        return int(x)
    except Exception:
        return default


def _clamp_exit_code(code: int) -> int:
    if code < 0:
        return 1
    if code > 255:
        return 255
    return code


def _one_line(s: str, limit: int = 600) -> str:
    s = (s or "").strip().replace("\r", " ").replace("\n", " ")
    s = " ".join(s.split())
    return s if len(s) <= limit else (s[: limit - 3] + "...")


_SECRET_KEY_PARTS = (
    "pass",
    "password",
    "passwd",
    "secret",
    "token",
    "apikey",
    "api_key",
    "auth",
    "cookie",
    "session",
    "bearer",
    "private",
)

REDACTED = "***REDACTED***"


def _is_secret_key(k: str) -> bool:
    ks = (k or "").lower()
    return any(p in ks for p in _SECRET_KEY_PARTS)


def _redact(v: Any) -> Any:
    if isinstance(v, dict):
        return {k: (REDACTED if _is_secret_key(str(k)) else _redact(x)) for k, x in v.items()}
    if isinstance(v, (list, tuple)):
        return [_redact(x) for x in v]
    return v


def _format_context_compact(ctx: Dict[str, Any]) -> str:
    # Stable order, redaction, single-line.
    parts = []
    for k in sorted(ctx.keys()):
        v = ctx.get(k)
        if _is_secret_key(str(k)):
            parts.append(f"{k}=<redacted>")
        else:
            parts.append(f"{k}={v!r}")
    return ", ".join(parts)


@dataclass(eq=False)
class HivePathError(Exception):
    """
    Base project error with:
      - stable fields for reporting/JSON
      - readable __str__ (what users see)
      - an exit code the CLI honors
    """
    code: int = 1
    msg: str = "error"
    cause: Optional[BaseException] = None
    context: Optional[Dict[str, Any]] = None

    def __post_init__(self) -> None:
        self.code = _clamp_exit_code(_safe_int(self.code, default=1))
        self.msg = _one_line(self.msg) or self.__class__.__name__
        if self.context is None:
            self.context = {}
        super().__init__(self.msg)
        self.args = (self.msg,)

    def with_context(self, **ctx: Any) -> "HivePathError":
        if self.context is None:
            self.context = {}
        self.context.update(ctx)
        return self

    def user_message(self, *, include_context: bool = False, include_cause: bool = False) -> str:
        """
        Human-friendly message for CLI output/logs.
        """
        parts = [self.msg or self.__class__.__name__]

        if include_context and self.context:
            parts.append(f"[{_one_line(_format_context_compact(self.context), limit=600)}]")

        if include_cause and self.cause is not None:
            parts.append(f"(cause: {type(self.cause).__name__}: {_one_line(str(self.cause))})")

        return " ".join(parts)

    def __str__(self) -> str:
        return self.user_message(include_context=False, include_cause=False)

    def to_dict(self, *, include_cause: bool = False) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "type": self.__class__.__name__,
            "code": self.code,
            "message": self.msg,
            "context": _redact(dict(self.context or {})),
        }
        if include_cause and self.cause is not None:
            d["cause"] = {"type": type(self.cause).__name__, "message": _one_line(str(self.cause))}
        return d


# ---------------------------------------------------------------------------
# Argument errors
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class InvalidPathError(HivePathError):
    """Null or malformed section path / parameter name."""
    code: int = 2
    msg: str = "invalid registry path"


@dataclass(eq=False)
class InvalidValueError(HivePathError):
    """Value cannot be stored as the requested (or inferred) kind."""
    code: int = 2
    msg: str = "invalid registry value"


@dataclass(eq=False)
class UnsupportedOptionError(HivePathError):
    """Creation option outside the closed set, or one the backend can't honor."""
    code: int = 2
    msg: str = "unsupported creation option"


# ---------------------------------------------------------------------------
# Missing targets (raised only when the caller asks for strict behavior)
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class MissingTargetError(HivePathError):
    code: int = 3
    msg: str = "registry target not found"


@dataclass(eq=False)
class MissingSectionError(MissingTargetError):
    msg: str = "registry section not found"


@dataclass(eq=False)
class MissingValueError(MissingTargetError):
    msg: str = "registry value not found"


# ---------------------------------------------------------------------------
# Store state / access
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class SectionNotEmptyError(HivePathError):
    """Non-recursive delete of a section that still has subsections."""
    code: int = 4
    msg: str = "registry section has subsections"


@dataclass(eq=False)
class ReadOnlySectionError(HivePathError):
    code: int = 5
    msg: str = "registry section is not writable"


@dataclass(eq=False)
class StoreClosedError(HivePathError):
    code: int = 6
    msg: str = "registry handle is closed"


@dataclass(eq=False)
class StoreIOError(HivePathError):
    code: int = 7
    msg: str = "registry store I/O error"


@dataclass(eq=False)
class StoreUnavailableError(HivePathError):
    code: int = 8
    msg: str = "registry backend unavailable"


@dataclass(eq=False)
class ConfigError(HivePathError):
    code: int = 9
    msg: str = "invalid configuration"


def format_exception_for_cli(e: BaseException, *, verbose: int = 0) -> str:
    """
    One-liner output for CLI.

    verbose=0: just message
    verbose=1: message + compact context (if any)
    verbose>=2: message + context + cause
    """
    if isinstance(e, HivePathError):
        return e.user_message(
            include_context=(verbose >= 1),
            include_cause=(verbose >= 2),
        )

    if verbose >= 2:
        return f"{type(e).__name__}: {_one_line(str(e))}"
    return _one_line(str(e)) or type(e).__name__
