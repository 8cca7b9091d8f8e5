"""In-memory store — dict-backed, for dry runs and tests."""

from __future__ import annotations

import itertools
import threading
from decimal import Decimal

from voltra.models import ClosedOrder, Position
from voltra.store.base import Store


class InMemoryStore(Store):
    """Positions keyed by (market, symbol); everything lost on restart."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._positions: dict[tuple[str, str], Position] = {}
        self._closed: list[ClosedOrder] = []
        self._step_sizes: dict[str, Decimal] = {}

    def save_open_position(self, position: Position) -> Position:
        with self._lock:
            stored = position.model_copy()
            if stored.id is None:
                stored.id = next(self._ids)
            self._positions[(stored.market, stored.symbol)] = stored
            return stored.model_copy()

    def has_open_position(self, market: str, symbol: str) -> bool:
        with self._lock:
            return (market, symbol) in self._positions

    def count_open_positions(self, market: str) -> int:
        with self._lock:
            return sum(1 for m, _ in self._positions if m == market)

    def list_open_positions(self, market: str) -> list[Position]:
        with self._lock:
            return [p.model_copy() for (m, _), p in self._positions.items() if m == market]

    def delete_position(self, position: Position) -> None:
        with self._lock:
            self._positions.pop((position.market, position.symbol), None)

    def save_closed_order(self, order: ClosedOrder) -> ClosedOrder:
        with self._lock:
            stored = order.model_copy(update={"id": next(self._ids)})
            self._closed.append(stored)
            return stored.model_copy()

    def get_most_recent_closed_order(self, market: str, symbol: str) -> ClosedOrder | None:
        with self._lock:
            for order in reversed(self._closed):
                if order.market == market and order.symbol == symbol:
                    return order.model_copy()
            return None

    def closed_orders(self) -> list[ClosedOrder]:
        """Every sell recorded so far, oldest first."""
        with self._lock:
            return [o.model_copy() for o in self._closed]

    def get_cached_step_size(self, symbol: str) -> Decimal | None:
        with self._lock:
            return self._step_sizes.get(symbol)

    def put_cached_step_size(self, symbol: str, step_size: Decimal) -> None:
        with self._lock:
            self._step_sizes[symbol] = step_size
