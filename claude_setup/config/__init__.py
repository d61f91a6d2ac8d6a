"""
Configuration for claude-setup.
"""

from .parser import CacheConfig, SetupConfig, load_config, parse_config

__all__ = ["CacheConfig", "SetupConfig", "load_config", "parse_config"]
