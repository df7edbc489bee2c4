"""Configuration module for advisorbridge."""

from advisorbridge.config.loader import load_config, get_config_path
from advisorbridge.config.schema import Config
from advisorbridge.config.access import get_config, clear_config_cache

__all__ = ["Config", "load_config", "get_config_path", "get_config", "clear_config_cache"]
