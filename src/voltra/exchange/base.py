"""Market abstract base class."""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from voltra.exchange.filters import CoinFilter
from voltra.models import CoinMap, Fill, SymbolInfo


class Market(ABC):
    """An exchange the engine samples prices from and trades on.

    Subclasses set ``name`` and implement the async operations below.
    """

    name: str

    def __init__(self, coin_filter: CoinFilter | None = None) -> None:
        self.coin_filter = coin_filter or CoinFilter()

    @abstractmethod
    async def get_coins(self, filtered: bool = True) -> CoinMap:
        """Latest price of every symbol, in one batched call.

        With ``filtered`` the coin filter is applied; the sell side passes
        False so held symbols stay visible after they drop out of the filter.
        """
        ...

    @abstractmethod
    async def get_symbol_info(self, symbol: str) -> SymbolInfo:
        ...

    @abstractmethod
    async def buy(self, symbol: str, volume: Decimal) -> Fill:
        ...

    @abstractmethod
    async def sell(self, symbol: str, volume: Decimal) -> Fill:
        ...

    @abstractmethod
    async def get_24h_volumes(self) -> dict[str, Decimal]:
        """24h quote volume per symbol."""
        ...

    async def close(self) -> None:
        """Release network resources."""
