"""Open positions and closed sell orders."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel


class Position(BaseModel):
    """An open buy order.

    ``take_profit`` and ``stop_loss`` are percentages relative to ``price``
    and may be ratcheted in place by the trailing stop.
    """

    id: int | None = None
    market: str
    symbol: str
    side: Literal["BUY"] = "BUY"
    volume: Decimal
    price: Decimal
    take_profit: Decimal
    stop_loss: Decimal
    opened_at: datetime
    order_id: int = 0
    is_test_mode: bool = False


class ClosedOrder(BaseModel):
    """The sell that closed a position."""

    id: int | None = None
    market: str
    symbol: str
    side: Literal["SELL"] = "SELL"
    volume: Decimal
    price: Decimal
    price_change_percentage: Decimal
    profit_loss: Decimal
    closed_at: datetime
    order_id: int = 0
    is_test_mode: bool = False
