"""Configuration module."""
from .settings import AppSettings, StageParams, get_settings
from .manager import Config, ConfigManager, get_home_dir

__all__ = ["AppSettings", "StageParams", "get_settings", "Config", "ConfigManager", "get_home_dir"]
