# hivepath/config/__init__.py
from .config_loader import ENV_CONFIG, deep_merge, load_config
from .store_config import BACKENDS, LogConfig, StoreConfig

__all__ = ["ENV_CONFIG", "deep_merge", "load_config", "BACKENDS", "LogConfig", "StoreConfig"]
