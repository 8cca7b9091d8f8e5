"""Store abstract base class."""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from voltra.models import ClosedOrder, Position


class Store(ABC):
    """Persistence for positions, sell records and the step size cache.

    Both engine loops call into the same store concurrently, so every method
    must be atomic on its own.
    """

    @abstractmethod
    def save_open_position(self, position: Position) -> Position:
        """Insert a new position or update an existing one in place.

        Returns the stored position (with ``id`` set).
        """
        ...

    @abstractmethod
    def has_open_position(self, market: str, symbol: str) -> bool:
        ...

    @abstractmethod
    def count_open_positions(self, market: str) -> int:
        ...

    @abstractmethod
    def list_open_positions(self, market: str) -> list[Position]:
        ...

    @abstractmethod
    def delete_position(self, position: Position) -> None:
        ...

    @abstractmethod
    def save_closed_order(self, order: ClosedOrder) -> ClosedOrder:
        ...

    @abstractmethod
    def get_most_recent_closed_order(self, market: str, symbol: str) -> ClosedOrder | None:
        ...

    @abstractmethod
    def get_cached_step_size(self, symbol: str) -> Decimal | None:
        ...

    @abstractmethod
    def put_cached_step_size(self, symbol: str, step_size: Decimal) -> None:
        ...
