"""Configuration system."""

from voltra.config.loader import load_config
from voltra.config.schema import AppConfig, TradingConfig

__all__ = ["AppConfig", "TradingConfig", "load_config"]
