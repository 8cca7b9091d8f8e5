"""Tests for the Store contract, run against every implementation."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from voltra.models import ClosedOrder, Position

from conftest import NOW


def _position(symbol="BTCUSDT", market="binance", **overrides):
    fields = dict(
        market=market,
        symbol=symbol,
        volume=Decimal("0.5"),
        price=Decimal("20000"),
        take_profit=Decimal("0.8"),
        stop_loss=Decimal("5"),
        opened_at=NOW,
        order_id=42,
    )
    fields.update(overrides)
    return Position(**fields)


def _closed(symbol="BTCUSDT", market="binance", closed_at=NOW, **overrides):
    fields = dict(
        market=market,
        symbol=symbol,
        volume=Decimal("0.5"),
        price=Decimal("21000"),
        price_change_percentage=Decimal("5"),
        profit_loss=Decimal("500"),
        closed_at=closed_at,
    )
    fields.update(overrides)
    return ClosedOrder(**fields)


# ── Positions ─────────────────────────────────────────────────


class TestPositions:
    def test_save_assigns_id(self, store):
        saved = store.save_open_position(_position())
        assert saved.id is not None
        assert store.has_open_position("binance", "BTCUSDT")

    def test_has_open_position_is_per_market(self, store):
        store.save_open_position(_position())
        assert not store.has_open_position("kraken", "BTCUSDT")
        assert not store.has_open_position("binance", "ETHUSDT")

    def test_count_and_list(self, store):
        store.save_open_position(_position("BTCUSDT"))
        store.save_open_position(_position("ETHUSDT"))
        store.save_open_position(_position("BTCUSDT", market="kraken"))

        assert store.count_open_positions("binance") == 2
        assert store.count_open_positions("kraken") == 1
        symbols = sorted(p.symbol for p in store.list_open_positions("binance"))
        assert symbols == ["BTCUSDT", "ETHUSDT"]

    def test_save_existing_updates_in_place(self, store):
        saved = store.save_open_position(_position())
        saved.take_profit = Decimal("10.1")
        saved.stop_loss = Decimal("9.7")
        store.save_open_position(saved)

        positions = store.list_open_positions("binance")
        assert len(positions) == 1
        assert positions[0].id == saved.id
        assert positions[0].take_profit == Decimal("10.1")
        assert positions[0].stop_loss == Decimal("9.7")

    def test_round_trip_preserves_fields(self, store):
        store.save_open_position(_position(is_test_mode=True))
        loaded = store.list_open_positions("binance")[0]
        assert loaded.volume == Decimal("0.5")
        assert loaded.price == Decimal("20000")
        assert loaded.opened_at == NOW
        assert loaded.order_id == 42
        assert loaded.is_test_mode is True

    def test_round_trip_keeps_full_precision(self, store):
        store.save_open_position(_position(
            volume=Decimal("0.0009091"),
            price=Decimal("0.000012345678901"),
            take_profit=Decimal("10.123456789012"),
            stop_loss=Decimal("9.723456789012"),
        ))
        loaded = store.list_open_positions("binance")[0]
        assert loaded.volume == Decimal("0.0009091")
        assert loaded.price == Decimal("0.000012345678901")
        assert loaded.take_profit == Decimal("10.123456789012")
        assert loaded.stop_loss == Decimal("9.723456789012")

    def test_delete_position(self, store):
        saved = store.save_open_position(_position())
        store.save_open_position(_position("ETHUSDT"))
        store.delete_position(saved)

        assert not store.has_open_position("binance", "BTCUSDT")
        assert store.count_open_positions("binance") == 1

    def test_empty_market(self, store):
        assert store.count_open_positions("binance") == 0
        assert store.list_open_positions("binance") == []


# ── Closed orders ─────────────────────────────────────────────


class TestClosedOrders:
    def test_round_trip_keeps_full_precision(self, store):
        store.save_closed_order(_closed(
            price=Decimal("64012.345678901234"),
            price_change_percentage=Decimal("-10.000000000001"),
            profit_loss=Decimal("-9.98500000000123"),
        ))
        latest = store.get_most_recent_closed_order("binance", "BTCUSDT")
        assert latest.price == Decimal("64012.345678901234")
        assert latest.price_change_percentage == Decimal("-10.000000000001")
        assert latest.profit_loss == Decimal("-9.98500000000123")

    def test_most_recent_none_when_never_sold(self, store):
        assert store.get_most_recent_closed_order("binance", "BTCUSDT") is None

    def test_most_recent_by_close_time(self, store):
        store.save_closed_order(_closed(closed_at=NOW - timedelta(minutes=30), profit_loss=Decimal("1")))
        store.save_closed_order(_closed(closed_at=NOW - timedelta(minutes=5), profit_loss=Decimal("2")))
        store.save_closed_order(_closed("ETHUSDT", closed_at=NOW, profit_loss=Decimal("3")))

        latest = store.get_most_recent_closed_order("binance", "BTCUSDT")
        assert latest is not None
        assert latest.profit_loss == Decimal("2")
        assert latest.closed_at == NOW - timedelta(minutes=5)

    def test_save_assigns_id(self, store):
        saved = store.save_closed_order(_closed())
        assert saved.id is not None
        assert saved.side == "SELL"


# ── Step size cache ───────────────────────────────────────────


class TestStepSizeCache:
    def test_miss(self, store):
        assert store.get_cached_step_size("BTCUSDT") is None

    def test_put_then_get(self, store):
        store.put_cached_step_size("BTCUSDT", Decimal("0.00001"))
        assert store.get_cached_step_size("BTCUSDT") == Decimal("0.00001")

    def test_put_overwrites(self, store):
        store.put_cached_step_size("BTCUSDT", Decimal("0.01"))
        store.put_cached_step_size("BTCUSDT", Decimal("0.001"))
        assert store.get_cached_step_size("BTCUSDT") == Decimal("0.001")

    def test_small_step_exact(self, store):
        store.put_cached_step_size("SHIBUSDT", Decimal("0.000000000001"))
        assert store.get_cached_step_size("SHIBUSDT") == Decimal("0.000000000001")
