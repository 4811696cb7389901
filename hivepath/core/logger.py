# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# hivepath/core/logger.py
"""
Logging setup for the hivepath CLI.

Library modules only call logging.getLogger("hivepath.<module>"); Log.setup()
attaches the handlers. Structured context travels as extra={"ctx": {...}}
and is rendered as key=value pairs (text) or a "ctx" object (NDJSON).
"""
from __future__ import annotations

import datetime as _dt
import json
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Set, Tuple, Union

try:
    from termcolor import colored as _colored  # type: ignore
except Exception:  # pragma: no cover
    _colored = None

# Below DEBUG: per-value traffic of the hive backend (-vvv).
TRACE = 5
logging.addLevelName(TRACE, "TRACE")

# level -> (emoji, color)
_LEVELS: Dict[str, Tuple[str, str]] = {
    "TRACE": ("🧬", "cyan"),
    "DEBUG": ("🔍", "blue"),
    "INFO": ("✅", "green"),
    "WARNING": ("⚠️", "yellow"),
    "ERROR": ("💥", "red"),
    "CRITICAL": ("🧨", "red"),
}


def _stderr_can(text: str) -> bool:
    try:
        text.encode(getattr(sys.stderr, "encoding", None) or "utf-8")
        return True
    except (UnicodeEncodeError, LookupError):
        return False


def _ctx_of(record: logging.LogRecord) -> Dict[str, str]:
    ctx = getattr(record, "ctx", None) or {}
    return {str(k): str(v).replace("\n", "\\n") for k, v in sorted(dict(ctx).items(), key=lambda kv: str(kv[0]))}


@dataclass(frozen=True)
class LogStyle:
    color: bool = True
    show_ms: bool = False
    show_src: bool = False
    show_pid: bool = False
    show_logger: bool = False
    utc: bool = False
    unicode: bool = True


class EmojiFormatter(logging.Formatter):
    """`HH:MM:SS ✅ INFO     [bits] message key=value ...`"""

    def __init__(self, style: LogStyle):
        super().__init__()
        self.style = style

    def _paint(self, text: str, levelname: str, bold: bool = False) -> str:
        if not (self.style.color and _colored is not None and sys.stderr.isatty()):
            return text
        return _colored(text, _LEVELS.get(levelname, ("", "white"))[1], attrs=["bold"] if bold else [])

    def format(self, record: logging.LogRecord) -> str:
        st = self.style
        tz = _dt.timezone.utc if st.utc else None
        when = _dt.datetime.fromtimestamp(record.created, tz=tz)
        ts = when.strftime("%H:%M:%S.%f")[:-3] if st.show_ms else when.strftime("%H:%M:%S")
        mark = _LEVELS.get(record.levelname, ("•", ""))[0] if st.unicode else "·"

        bits = []
        if st.show_pid:
            bits.append(f"pid={os.getpid()}")
        if st.show_logger:
            bits.append(record.name)
        if st.show_src:
            bits.append(f"{record.module}:{record.lineno}")
        prefix = f" [{' '.join(bits)}]" if bits else ""

        msg = record.getMessage()
        if record.levelno >= logging.WARNING:
            msg = self._paint(msg, record.levelname, bold=True)
        level = self._paint(f"{record.levelname:<8}", record.levelname)
        ctx = "".join(f" {k}={v}" for k, v in _ctx_of(record).items())

        line = f"{ts} {mark} {level}{prefix} {msg}{ctx}"
        if record.exc_info:
            line += "\n" + "\n".join("  " + ln for ln in self.formatException(record.exc_info).splitlines())
        return line


class JsonFormatter(logging.Formatter):
    """One JSON object per line (--json-logs)."""

    def __init__(self, *, utc: bool = True):
        super().__init__()
        self.utc = utc

    def format(self, record: logging.LogRecord) -> str:
        tz = _dt.timezone.utc if self.utc else None
        obj: Dict[str, Any] = {
            "ts": _dt.datetime.fromtimestamp(record.created, tz=tz).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "pid": os.getpid(),
            "module": record.module,
            "lineno": record.lineno,
        }
        ctx = _ctx_of(record)
        if ctx:
            obj["ctx"] = ctx
        if record.exc_info:
            obj["exc_type"] = record.exc_info[0].__name__ if record.exc_info[0] else "Exception"
            obj["traceback"] = self.formatException(record.exc_info)
        return json.dumps(obj, ensure_ascii=False)


_warned: Set[str] = set()


class Log:
    @staticmethod
    def _level_from_flags(verbose: int, quiet: int) -> int:
        """-q WARNING, -qq ERROR, -vv DEBUG, -vvv TRACE, otherwise INFO; quiet wins."""
        if quiet:
            return logging.ERROR if quiet >= 2 else logging.WARNING
        return {0: logging.INFO, 1: logging.INFO, 2: logging.DEBUG}.get(verbose, TRACE)

    @staticmethod
    def _emit(logger: logging.Logger, level: int, mark: str, msg: str, ctx: Dict[str, Any]) -> None:
        logger.log(level, "%s %s", mark, msg, extra={"ctx": ctx} if ctx else None)

    @staticmethod
    def ok(logger: logging.Logger, msg: str, **ctx: Any) -> None:
        Log._emit(logger, logging.INFO, "✅", msg, ctx)

    @staticmethod
    def fail(logger: logging.Logger, msg: str, **ctx: Any) -> None:
        Log._emit(logger, logging.ERROR, "💥", msg, ctx)

    @staticmethod
    def warn_once(logger: logging.Logger, key: Union[str, Tuple[Any, ...]], msg: str, **ctx: Any) -> bool:
        """Warn once per process for `key`; True if this call logged."""
        k = key if isinstance(key, str) else "|".join(map(str, key))
        if k in _warned:
            return False
        _warned.add(k)
        Log._emit(logger, logging.WARNING, "⚠️ ", msg, ctx)
        return True

    @staticmethod
    def setup(
        verbose: int = 0,
        log_file: Optional[str] = None,
        *,
        quiet: int = 0,
        color: bool = True,
        utc: bool = False,
        logger_name: str = "hivepath",
        json_logs: bool = False,
    ) -> logging.Logger:
        """
        (Re)configure the `logger_name` logger: one stderr handler, plus a
        file handler when log_file is set. File logs always carry ms
        timestamps, pid, logger name and source location.
        """
        logger = logging.getLogger(logger_name)
        logger.propagate = False
        level = Log._level_from_flags(verbose, quiet)
        logger.setLevel(level)

        for h in list(logger.handlers):
            logger.removeHandler(h)
            h.close()

        unicode = _stderr_can("✅")
        handlers = [
            (
                logging.StreamHandler(sys.stderr),
                EmojiFormatter(
                    LogStyle(
                        color=color,
                        show_ms=verbose >= 3,
                        show_src=verbose >= 3,
                        show_pid=verbose >= 2,
                        utc=utc,
                        unicode=unicode,
                    )
                ),
            )
        ]
        if log_file:
            fp = Path(log_file).expanduser().resolve()
            fp.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(
                (
                    logging.FileHandler(fp, encoding="utf-8"),
                    EmojiFormatter(
                        LogStyle(color=False, show_ms=True, show_src=True, show_pid=True,
                                 show_logger=True, utc=utc, unicode=unicode)
                    ),
                )
            )

        for h, fmt in handlers:
            h.setLevel(level)
            h.setFormatter(JsonFormatter(utc=utc) if json_logs else fmt)
            logger.addHandler(h)

        logger.debug("Logging ready (level=%s)", logging.getLevelName(level))
        return logger
