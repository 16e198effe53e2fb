"""Configuration module: exports Settings and load_config."""

from linkscout.config.loader import load_config
from linkscout.config.settings import Settings

__all__ = ["Settings", "load_config"]
