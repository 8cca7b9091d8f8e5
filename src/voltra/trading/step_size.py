"""Step sizes — quantity precision per symbol, cached forever."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from voltra.exchange.base import Market
    from voltra.store.base import Store

log = structlog.get_logger("step_size")


def _dec(value: float | Decimal) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def round_to_step(quantity: float | Decimal, step_size: float | Decimal) -> Decimal:
    """Round *quantity* to the number of decimals implied by *step_size*.

    A step of 0.001 gives 3 decimals, a step of 1 gives none. Halves round up.
    A zero step leaves the quantity untouched.
    """
    quantity = _dec(quantity)
    step_size = _dec(step_size)
    if step_size == 0:
        return quantity
    precision = round(-step_size.log10())
    return quantity.quantize(Decimal(1).scaleb(-precision), rounding=ROUND_HALF_UP)


class StepSizeCache:
    """In-process step size cache in front of the store's persistent cache.

    A symbol's step size never changes, so entries never expire.
    """

    def __init__(self, store: Store | None = None) -> None:
        self._store = store
        self._entries: dict[str, Decimal] = {}

    def get(self, symbol: str) -> Decimal | None:
        step_size = self._entries.get(symbol)
        if step_size is None and self._store is not None:
            step_size = self._store.get_cached_step_size(symbol)
            if step_size is not None:
                self._entries[symbol] = step_size
        return step_size

    def put(self, symbol: str, step_size: Decimal) -> None:
        self._entries[symbol] = step_size
        if self._store is not None:
            self._store.put_cached_step_size(symbol, step_size)

    async def resolve(self, symbol: str, market: Market) -> Decimal:
        """Cached step size, or ask the market once and remember the answer."""
        step_size = self.get(symbol)
        if step_size is not None:
            return step_size
        info = await market.get_symbol_info(symbol)
        self.put(symbol, info.step_size)
        log.debug("step_size_cached", symbol=symbol, step_size=str(info.step_size))
        return info.step_size
