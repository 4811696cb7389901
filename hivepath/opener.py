# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# hivepath/opener.py
"""Build a PathStore from a StoreConfig and release what it opened afterwards."""
from __future__ import annotations

import logging
from contextlib import ExitStack, contextmanager
from typing import Iterator

from .config.store_config import StoreConfig
from .core.exceptions import MissingSectionError
from .core.logger import Log
from .core.optional_imports import WINREG_AVAILABLE
from .path_store import PathStore
from .store.base import Section
from .store.hive import HiveStore
from .store.memory import shared_root
from .store.native import NativeSection, root_name

logger = logging.getLogger("hivepath.opener")


def resolve_backend(cfg: StoreConfig) -> str:
    """Concrete backend for cfg: 'auto' picks hive, then winreg, then memory."""
    if cfg.backend != "auto":
        return cfg.backend
    if cfg.hive_path is not None:
        return "hive"
    if WINREG_AVAILABLE:
        return "winreg"
    return "memory"


def _bind_base(root: Section, base: str) -> Section:
    p = PathStore.prepare_path(base)
    if not p:
        return root
    section = root.open(p, writable=root.writable)
    if section is not None:
        return section
    if not root.writable:
        raise MissingSectionError(msg=f"base section not found: {base}").with_context(base_path=base)
    logger.debug("Creating base section %s", p)
    return root.create(p, writable=True)


@contextmanager
def open_store(cfg: StoreConfig) -> Iterator[PathStore]:
    """
    Yield a PathStore bound to cfg's root (and base_path below it).

    Hive files opened for writing are committed when the block exits
    cleanly and closed either way.
    """
    backend = resolve_backend(cfg.validate())
    with ExitStack() as stack:
        if backend == "hive":
            hs = stack.enter_context(HiveStore(cfg.hive_path, write=cfg.hive_write))
            root: Section = hs.root()
        elif backend == "winreg":
            root = NativeSection.predefined(cfg.root_key)
        else:
            name = root_name(cfg.root_key)
            Log.warn_once(
                logger,
                ("memory-backend", name),
                "Using the in-memory registry; changes last only for this process",
                root=name,
            )
            root = shared_root(name)

        bound = _bind_base(root, cfg.base_path)
        if bound is not root:
            stack.callback(bound.close)

        logger.debug("Store ready (backend=%s, root=%s)", backend, bound.name)
        yield PathStore(bound)
