# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# hivepath/config/store_config.py
"""Validated store settings built from a merged config mapping."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional

from ..core.exceptions import ConfigError

BACKENDS = ("auto", "memory", "hive", "winreg")

_KNOWN_KEYS = {
    "backend",
    "hive_path",
    "hive_write",
    "root_key",
    "base_path",
    "logging",
}
_LOG_KEYS = {"verbose", "quiet", "json", "file"}


@dataclass(frozen=True)
class LogConfig:
    verbose: int = 0
    quiet: int = 0
    json: bool = False
    file: Optional[str] = None


@dataclass(frozen=True)
class StoreConfig:
    backend: str = "auto"
    hive_path: Optional[Path] = None
    hive_write: bool = False
    root_key: str = "HKEY_CURRENT_USER"
    base_path: str = ""
    logging: LogConfig = field(default_factory=LogConfig)

    @classmethod
    def from_dict(cls, conf: Dict[str, Any]) -> "StoreConfig":
        unknown = set(conf) - _KNOWN_KEYS
        if unknown:
            raise ConfigError(msg=f"unknown config keys: {', '.join(sorted(unknown))}")

        backend = str(conf.get("backend") or "auto").strip().lower()
        hive_path = conf.get("hive_path")

        log = conf.get("logging") or {}
        if not isinstance(log, dict):
            raise ConfigError(msg="logging must be a mapping")
        bad_log = set(log) - _LOG_KEYS
        if bad_log:
            raise ConfigError(msg=f"unknown logging keys: {', '.join(sorted(bad_log))}")

        try:
            log_cfg = LogConfig(
                verbose=int(log.get("verbose") or 0),
                quiet=int(log.get("quiet") or 0),
                json=bool(log.get("json", False)),
                file=(str(log["file"]) if log.get("file") else None),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(msg=f"bad logging settings: {e}", cause=e)

        return cls(
            backend=backend,
            hive_path=Path(str(hive_path)).expanduser() if hive_path else None,
            hive_write=bool(conf.get("hive_write", False)),
            root_key=str(conf.get("root_key") or "HKEY_CURRENT_USER"),
            base_path=str(conf.get("base_path") or ""),
            logging=log_cfg,
        ).validate()

    def validate(self) -> "StoreConfig":
        if self.backend not in BACKENDS:
            raise ConfigError(msg=f"backend must be one of {', '.join(BACKENDS)}, got {self.backend!r}")
        if self.backend == "hive" and self.hive_path is None:
            raise ConfigError(msg="backend 'hive' needs hive_path")
        return self

    def merged(self, **overrides: Any) -> "StoreConfig":
        """Copy with every non-None override applied (CLI flags over file values)."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None}).validate()
