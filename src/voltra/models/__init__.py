"""Pydantic domain models."""

from voltra.models.market import Coin, CoinMap, Fill, SymbolInfo, VolatileCoin
from voltra.models.position import ClosedOrder, Position

__all__ = [
    "ClosedOrder",
    "Coin",
    "CoinMap",
    "Fill",
    "Position",
    "SymbolInfo",
    "VolatileCoin",
]
