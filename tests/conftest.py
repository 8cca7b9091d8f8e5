"""Shared test fixtures."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from voltra.db.engine import create_tables
from voltra.errors import MarketError
from voltra.exchange.base import Market
from voltra.exchange.filters import CoinFilter
from voltra.models import Coin, CoinMap, Fill, SymbolInfo
from voltra.store.memory import InMemoryStore
from voltra.store.sql import SqlStore

NOW = datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


def make_coins(prices: dict[str, float | int | str], at: datetime = NOW) -> CoinMap:
    """Build a CoinMap from symbol -> price."""
    return {
        symbol: Coin(symbol=symbol, price=Decimal(str(price)), sampled_at=at)
        for symbol, price in prices.items()
    }


class FakeMarket(Market):
    """Scripted market.

    Filtered reads (the buy side) pop the next queued snapshot; unfiltered
    reads (the sell side) return whatever was served or set last. When the
    queue runs dry ``on_exhausted`` is called and the read fails.
    """

    name = "fake"

    def __init__(
        self,
        snapshots: list[dict] | None = None,
        step_size: Decimal = Decimal("0.0000001"),
        coin_filter: CoinFilter | None = None,
    ):
        super().__init__(coin_filter)
        self.snapshots = [make_coins(s) for s in snapshots or []]
        self.current: CoinMap = {}
        self.step_size = step_size
        self.volumes: dict[str, Decimal] = {}
        self.fail_orders = False
        self.fail_volumes = False
        self.fill_price: Decimal | None = None
        self.on_exhausted = None
        self.buys: list[tuple[str, Decimal]] = []
        self.sells: list[tuple[str, Decimal]] = []
        self.symbol_info_calls = 0

    def set_prices(self, prices: dict) -> None:
        self.current = make_coins(prices)

    async def get_coins(self, filtered: bool = True) -> CoinMap:
        if not filtered:
            return dict(self.current)
        if not self.snapshots:
            if self.on_exhausted is not None:
                self.on_exhausted()
            raise MarketError("no more prices")
        self.current = self.snapshots.pop(0)
        return {
            symbol: coin for symbol, coin in self.current.items()
            if self.coin_filter.is_available_for_trading(symbol)
        }

    async def get_symbol_info(self, symbol: str) -> SymbolInfo:
        self.symbol_info_calls += 1
        return SymbolInfo(symbol=symbol, step_size=self.step_size)

    async def buy(self, symbol: str, volume: Decimal) -> Fill:
        return self._fill(symbol, volume, self.buys)

    async def sell(self, symbol: str, volume: Decimal) -> Fill:
        return self._fill(symbol, volume, self.sells)

    def _fill(self, symbol: str, volume: Decimal, book: list) -> Fill:
        if self.fail_orders:
            raise MarketError("insufficient balance", code=-2010)
        book.append((symbol, volume))
        price = self.fill_price if self.fill_price is not None else self.current[symbol].price
        return Fill(order_id=1000 + len(book), symbol=symbol, price=price, transaction_time=NOW)

    async def get_24h_volumes(self) -> dict[str, Decimal]:
        if self.fail_volumes:
            raise MarketError("rate limited", code=-1003)
        return dict(self.volumes)


@pytest.fixture
def fake_market():
    return FakeMarket()


@pytest.fixture
def memory_store():
    return InMemoryStore()


@pytest.fixture
def sql_engine():
    """In-memory SQLite engine shared across threads, with all tables created."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def sql_store(sql_engine):
    return SqlStore(sql_engine)


@pytest.fixture(params=["memory", "sql"])
def store(request):
    """Every Store implementation, so contract tests run against both."""
    if request.param == "memory":
        return InMemoryStore()
    return request.getfixturevalue("sql_store")
