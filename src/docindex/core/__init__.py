"""Core configuration for docindex."""

from .config import DocIndexConfig, load_config

__all__ = ["DocIndexConfig", "load_config"]
