"""Voltra — buys coins that move fast and sells them on take profit or stop loss."""

__version__ = "0.1.0"
