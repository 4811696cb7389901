# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# hivepath/config/config_loader.py
"""
Load JSON/YAML configuration files and merge them.

Several files may be given (base + overrides); later files win, nested
mappings merge key by key.
"""
from __future__ import annotations

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import yaml

from ..core.exceptions import ConfigError

logger = logging.getLogger("hivepath.config")

ENV_CONFIG = "HIVEPATH_CONFIG"

PathLike = Union[str, Path]


def _read_structured_file(path: Path) -> Dict[str, Any]:
    """
    Read a JSON/YAML file into a dict.

    Supported:
      - *.json
      - *.yml / *.yaml
      - anything else: JSON first, then YAML
    """
    try:
        raw = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise ConfigError(msg=f"cannot read config file: {path}", cause=e)

    sfx = path.suffix.lower()
    try:
        if sfx == ".json":
            parsed = json.loads(raw)
        elif sfx in (".yml", ".yaml"):
            parsed = yaml.safe_load(raw)
        else:
            try:
                parsed = json.loads(raw)
            except ValueError:
                parsed = yaml.safe_load(raw)
    except (ValueError, yaml.YAMLError) as e:
        raise ConfigError(msg=f"cannot parse config file: {path}", cause=e)

    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ConfigError(msg=f"top-level config must be a mapping: {path}")
    return parsed


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = deep_merge(out[k], v)
        else:
            out[k] = copy.deepcopy(v)
    return out


def config_paths(paths: Optional[Iterable[PathLike]] = None) -> List[Path]:
    """Explicit paths, or the file named by $HIVEPATH_CONFIG when none are given."""
    out = [Path(p).expanduser() for p in (paths or [])]
    if not out:
        env = os.environ.get(ENV_CONFIG, "").strip()
        if env:
            out.append(Path(env).expanduser())
    return out


def load_config(paths: Optional[Iterable[PathLike]] = None) -> Dict[str, Any]:
    merged: Dict[str, Any] = {}
    for p in config_paths(paths):
        if not p.is_file():
            raise ConfigError(msg=f"config file not found: {p}")
        merged = deep_merge(merged, _read_structured_file(p))
        logger.debug("Loaded config %s", p)
    return merged
