# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# hivepath/cli.py
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional, Sequence

from .config.config_loader import load_config
from .config.store_config import BACKENDS, LogConfig, StoreConfig
from .core.exceptions import (
    HivePathError,
    InvalidValueError,
    StoreUnavailableError,
    format_exception_for_cli,
)
from .core.logger import Log
from .core.optional_imports import Console, Table, Tree, require_rich
from .opener import open_store, resolve_backend
from .path_store import PathStore
from .store.encoding import RegType

_MUTATING = ("set", "del-value", "del-key")

_TYPES = {
    "sz": RegType.REG_SZ,
    "expand_sz": RegType.REG_EXPAND_SZ,
    "binary": RegType.REG_BINARY,
    "dword": RegType.REG_DWORD,
    "qword": RegType.REG_QWORD,
    "multi_sz": RegType.REG_MULTI_SZ,
}


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="hivepath",
        description="Read and edit registry sections by path (live registry or offline hive files).",
    )
    p.add_argument("--config", action="append", default=[], metavar="FILE",
                   help="YAML/JSON config file (repeatable; later files override earlier ones).")
    p.add_argument("--backend", choices=BACKENDS, default=None, help="Registry backend (default: auto).")
    p.add_argument("--hive", dest="hive_path", default=None, metavar="FILE", help="Offline hive file to open.")
    p.add_argument("--write", dest="hive_write", action="store_true", default=None,
                   help="Open the hive file for writing and commit changes on success.")
    p.add_argument("--root-key", default=None, metavar="NAME", help="Predefined root, e.g. HKCU or HKLM.")
    p.add_argument("--base", dest="base_path", default=None, metavar="PATH",
                   help="Section all command paths are relative to.")
    p.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-vv debug, -vvv trace).")
    p.add_argument("-q", "--quiet", action="count", default=0, help="Less logging.")
    p.add_argument("--json-logs", action="store_true", help="Emit NDJSON logs on stderr.")
    p.add_argument("--log-file", default=None, metavar="FILE", help="Also write logs to FILE.")

    sub = p.add_subparsers(dest="command", required=True)

    g = sub.add_parser("get", help="Print a parameter value.")
    g.add_argument("path")
    g.add_argument("name")

    s = sub.add_parser("set", help="Write a parameter value (creates sections as needed).")
    s.add_argument("path")
    s.add_argument("name")
    s.add_argument("value", nargs="+")
    s.add_argument("--type", dest="kind", choices=sorted(_TYPES), default="sz")

    dv = sub.add_parser("del-value", help="Delete a parameter.")
    dv.add_argument("path")
    dv.add_argument("name")
    dv.add_argument("--strict", action="store_true", help="Fail when the parameter does not exist.")

    dk = sub.add_parser("del-key", help="Delete a section.")
    dk.add_argument("path")
    dk.add_argument("-r", "--recursive", action="store_true", help="Delete subsections too.")
    dk.add_argument("--strict", action="store_true", help="Fail when the section does not exist.")

    c = sub.add_parser("count", help="Print parameter and subsection counts.")
    c.add_argument("path", nargs="?", default="")

    ls = sub.add_parser("ls", help="List subsections and parameters.")
    ls.add_argument("path", nargs="?", default="")

    t = sub.add_parser("tree", help="Show the section tree.")
    t.add_argument("path", nargs="?", default="")
    t.add_argument("--depth", type=int, default=3)

    return p


def parse_value(raw: Sequence[str], kind: RegType) -> Any:
    """Turn command-line words into a value of `kind`."""
    try:
        if kind == RegType.REG_MULTI_SZ:
            return list(raw)
        if len(raw) != 1 and kind != RegType.REG_BINARY:
            raise InvalidValueError(msg=f"{kind.name} takes exactly one value")
        if kind in (RegType.REG_DWORD, RegType.REG_QWORD):
            return int(raw[0], 0)
        if kind == RegType.REG_BINARY:
            return bytes.fromhex("".join(raw))
    except ValueError as e:
        raise InvalidValueError(msg=f"cannot parse {' '.join(raw)!r} as {kind.name}", cause=e)
    return raw[0]


def format_value(v: Any) -> str:
    if isinstance(v, (bytes, bytearray)):
        return bytes(v).hex(" ")
    if isinstance(v, list):
        return "\n".join(str(x) for x in v)
    return str(v)


def _config_from_args(args: argparse.Namespace) -> StoreConfig:
    cfg = StoreConfig.from_dict(load_config(args.config))
    log = cfg.logging
    cfg = cfg.merged(
        backend=args.backend,
        hive_path=Path(args.hive_path).expanduser() if args.hive_path else None,
        hive_write=args.hive_write,
        root_key=args.root_key,
        base_path=args.base_path,
        logging=LogConfig(
            verbose=args.verbose or log.verbose,
            quiet=args.quiet or log.quiet,
            json=args.json_logs or log.json,
            file=args.log_file or log.file,
        ),
    )
    return cfg


def _print_tree(store: PathStore, path: str, depth: int) -> None:
    require_rich()
    top = store.prepare_path(path) or store.root.name
    tree = Tree(f"[bold]{top}[/bold]")

    def walk(node: Any, p: str, level: int) -> None:
        for name in store.list_values(p):
            node.add(f"{name or '(default)'} = {format_value(store.read(p, name))!r}")
        if level >= depth:
            return
        for sec in store.list_sections(p):
            child_path = f"{p}\\{sec}" if p else sec
            walk(node.add(f"[bold]{sec}[/bold]"), child_path, level + 1)

    walk(tree, store.prepare_path(path), 0)
    Console().print(tree)


def _print_listing(store: PathStore, path: str) -> None:
    require_rich()
    table = Table(title=store.prepare_path(path) or store.root.name)
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Value")
    for sec in store.list_sections(path):
        table.add_row(sec, "<section>", "")
    for name in store.list_values(path):
        kind = store.read_kind(path, name)
        table.add_row(name or "(default)", kind.name if kind is not None else "?",
                      format_value(store.read(path, name)))
    Console().print(table)


def _check_persistent(cfg: StoreConfig, command: str) -> str:
    """Concrete backend for cfg; refuse edits that would only land in a throwaway tree."""
    backend = resolve_backend(cfg)
    if command in _MUTATING and backend == "memory" and cfg.backend == "auto":
        raise StoreUnavailableError(
            msg="no persistent registry on this platform; pass --hive FILE, or --backend memory to edit a scratch tree"
        ).with_context(command=command)
    return backend


def run_command(args: argparse.Namespace, store: PathStore, logger: logging.Logger) -> int:
    cmd = args.command
    if cmd == "get":
        value = store.read(args.path, args.name)
        if value is None:
            logger.warning("No value %r under %s", args.name, args.path)
            return 1
        print(format_value(value))
    elif cmd == "set":
        kind = _TYPES[args.kind]
        store.write(args.path, args.name, parse_value(args.value, kind), kind=kind)
        Log.ok(logger, "Value written", path=args.path, name=args.name, type=kind.name)
    elif cmd == "del-value":
        store.delete_value(args.path, args.name, missing_ok=not args.strict)
        Log.ok(logger, "Value deleted", path=args.path, name=args.name)
    elif cmd == "del-key":
        store.delete_key(args.path, recursive=args.recursive, missing_ok=not args.strict)
        Log.ok(logger, "Section deleted", path=args.path, recursive=args.recursive)
    elif cmd == "count":
        if store.prepare_path(args.path):
            values, sections = store.get_value_count(args.path), store.get_subkey_count(args.path)
        else:
            values, sections = store.value_count, store.subkey_count
        print(f"values={values} sections={sections}")
    elif cmd == "ls":
        _print_listing(store, args.path)
    elif cmd == "tree":
        _print_tree(store, args.path, max(0, args.depth))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        cfg = _config_from_args(args)
    except HivePathError as e:
        print(f"💥 ERROR    {format_exception_for_cli(e, verbose=args.verbose)}", file=sys.stderr)
        return e.code

    lc = cfg.logging
    logger = Log.setup(lc.verbose, lc.file, quiet=lc.quiet, json_logs=lc.json)
    verbose = lc.verbose

    try:
        backend = _check_persistent(cfg, args.command)
        logger.debug("Running %s (backend=%s)", args.command, backend)
        with open_store(cfg) as store:
            return run_command(args, store, logger)
    except HivePathError as e:
        Log.fail(logger, format_exception_for_cli(e, verbose=verbose))
        return e.code
    except KeyboardInterrupt:
        logger.warning("Interrupted by user (Ctrl+C).")
        return 130
