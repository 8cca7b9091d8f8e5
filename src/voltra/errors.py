"""Exception hierarchy shared by the window, engine and collaborators."""

from __future__ import annotations


class VoltraError(Exception):
    """Base class for all voltra errors."""


class EmptyWindowError(VoltraError):
    """The volatility window was queried before any snapshot was added."""


class EngineStartupError(VoltraError):
    """The engine could not take its initial price reading."""


class MarketError(VoltraError):
    """An exchange request failed or returned an error payload."""

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


class SymbolNotFoundError(MarketError):
    """The exchange does not list the requested symbol."""

    def __init__(self, symbol: str) -> None:
        super().__init__(f"symbol not found: {symbol}")
        self.symbol = symbol
