"""Order sizing and exit calculations — pure functions, no I/O."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from decimal import Decimal

from voltra.trading.step_size import round_to_step

# Gains at or above this percentage ratchet the stop loss tightly behind the
# new take profit instead of behind the previous one.
SIGNIFICANT_MOVE_PCT = Decimal("0.8")


def _dec(value: float | Decimal) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def convert_volume(
    quote_amount: Decimal,
    price: Decimal,
    step_size: Decimal,
) -> Decimal:
    """Convert a quote currency amount into base volume at *price*.

    volume = quote_amount / price, rounded to the symbol's step size.
    """
    if price == 0:
        return Decimal("0")
    volume = _dec(quote_amount) / price
    if step_size != 0:
        volume = round_to_step(volume, step_size)
    return volume


def calculate_take_profit_price(entry_price: Decimal, take_profit_pct: Decimal) -> Decimal:
    """entry + entry * tp / 100"""
    return entry_price + entry_price * _dec(take_profit_pct) / 100


def calculate_stop_loss_price(entry_price: Decimal, stop_loss_pct: Decimal) -> Decimal:
    """entry - entry * |sl| / 100

    The stop loss is a downside bound whichever sign it was configured with.
    """
    return entry_price - entry_price * abs(_dec(stop_loss_pct)) / 100


def calculate_price_change_pct(entry_price: Decimal, current_price: Decimal) -> Decimal:
    """(current - entry) / entry * 100"""
    return (current_price - entry_price) / entry_price * 100


def calculate_fee_fraction(maker_fee_pct: float, taker_fee_pct: float) -> Decimal:
    """Round-trip fee as a fraction: maker fee on entry plus taker fee on exit."""
    return (_dec(maker_fee_pct) + _dec(taker_fee_pct)) / 100


def calculate_fees(
    entry_price: Decimal,
    exit_price: Decimal,
    volume: Decimal,
    maker_fee_pct: float,
    taker_fee_pct: float,
) -> Decimal:
    """Fees charged on the notional value at entry and at exit."""
    entry_fee = entry_price * volume * _dec(maker_fee_pct) / 100
    exit_fee = exit_price * volume * _dec(taker_fee_pct) / 100
    return entry_fee + exit_fee


def calculate_profit_loss(
    entry_price: Decimal,
    exit_price: Decimal,
    volume: Decimal,
    fee_fraction: Decimal,
) -> Decimal:
    """(exit - entry) * volume * (1 - fee_fraction)"""
    return (exit_price - entry_price) * volume * (1 - fee_fraction)


@dataclass
class TrailingTargets:
    """Take profit and stop loss percentages after a ratchet."""

    take_profit: Decimal
    stop_loss: Decimal
    stop_loss_moved: bool


def calculate_trailing_targets(
    change_pct: Decimal,
    take_profit_pct: Decimal,
    stop_loss_pct: Decimal,
    trailing_take_profit: float,
    trailing_stop_loss: float,
) -> TrailingTargets:
    """Ratchet take profit and stop loss once the take profit price is reached.

    tp' = change + trailing_tp
    sl' = tp' - trailing_sl      when change >= SIGNIFICANT_MOVE_PCT
    sl' = tp  - trailing_sl      otherwise

    A candidate stop loss <= 0 is discarded and the current one kept.
    """
    new_take_profit = change_pct + _dec(trailing_take_profit)
    if change_pct >= SIGNIFICANT_MOVE_PCT:
        candidate = new_take_profit - _dec(trailing_stop_loss)
    else:
        candidate = take_profit_pct - _dec(trailing_stop_loss)
    if candidate <= 0:
        return TrailingTargets(new_take_profit, stop_loss_pct, stop_loss_moved=False)
    return TrailingTargets(new_take_profit, candidate, stop_loss_moved=True)


class QuoteBudget:
    """Per-trade quote amount shared by the buy and sell loops.

    The buy loop reads it, the sell loop adjusts it when dynamic sizing is on.
    Never drops below zero.
    """

    def __init__(self, amount: float | Decimal) -> None:
        self._amount = _dec(amount)
        self._lock = threading.Lock()

    def get(self) -> Decimal:
        with self._lock:
            return self._amount

    def adjust(self, delta: Decimal) -> Decimal:
        """Add *delta* and return the new amount."""
        with self._lock:
            self._amount = max(Decimal("0"), self._amount + delta)
            return self._amount
