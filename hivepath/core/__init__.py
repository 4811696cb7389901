# hivepath/core/__init__.py
from .exceptions import (
    ConfigError,
    HivePathError,
    InvalidPathError,
    InvalidValueError,
    MissingSectionError,
    MissingTargetError,
    MissingValueError,
    ReadOnlySectionError,
    SectionNotEmptyError,
    StoreClosedError,
    StoreIOError,
    StoreUnavailableError,
    UnsupportedOptionError,
    format_exception_for_cli,
)
from .logger import Log

__all__ = [
    "ConfigError",
    "HivePathError",
    "InvalidPathError",
    "InvalidValueError",
    "MissingSectionError",
    "MissingTargetError",
    "MissingValueError",
    "ReadOnlySectionError",
    "SectionNotEmptyError",
    "StoreClosedError",
    "StoreIOError",
    "StoreUnavailableError",
    "UnsupportedOptionError",
    "format_exception_for_cli",
    "Log",
]
