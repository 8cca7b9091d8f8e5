"""Structured logging."""

from voltra.logging.setup import TRADE_LOGGER, get_logger, setup_logging

__all__ = ["TRADE_LOGGER", "get_logger", "setup_logging"]
