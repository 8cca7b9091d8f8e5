"""Market data models — sampled coins, volatile coins, exchange fills."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel


class Coin(BaseModel):
    """Last-trade price of one symbol at the moment it was sampled."""

    symbol: str
    price: Decimal
    volume: Decimal = Decimal("0")
    sampled_at: datetime


CoinMap = dict[str, Coin]


class VolatileCoin(BaseModel):
    """A coin whose price moved past the threshold within the current window."""

    symbol: str
    price: Decimal
    volume: Decimal = Decimal("0")
    percentage: Decimal

    @classmethod
    def from_coin(cls, coin: Coin, percentage: Decimal) -> VolatileCoin:
        return cls(
            symbol=coin.symbol,
            price=coin.price,
            volume=coin.volume,
            percentage=percentage,
        )


class SymbolInfo(BaseModel):
    """Trading rules for a symbol."""

    symbol: str
    step_size: Decimal


class Fill(BaseModel):
    """An executed (or simulated) market order."""

    order_id: int = 0
    symbol: str
    price: Decimal
    transaction_time: datetime
