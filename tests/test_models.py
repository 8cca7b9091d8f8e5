"""Tests for Pydantic domain models."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from voltra.models import ClosedOrder, Coin, Fill, Position, VolatileCoin

NOW = datetime.now(timezone.utc)


class TestCoin:
    def test_price_from_string(self):
        c = Coin(symbol="BTCUSDT", price="64000.01", sampled_at=NOW)
        assert c.price == Decimal("64000.01")
        assert c.volume == 0

    def test_missing_price_rejected(self):
        with pytest.raises(ValidationError):
            Coin(symbol="BTCUSDT", sampled_at=NOW)

    def test_volatile_from_coin(self):
        c = Coin(symbol="BTCUSDT", price=Decimal("11000"), volume=Decimal("5"), sampled_at=NOW)
        v = VolatileCoin.from_coin(c, Decimal("10"))
        assert v.symbol == "BTCUSDT"
        assert v.price == Decimal("11000")
        assert v.volume == Decimal("5")
        assert v.percentage == Decimal("10")


class TestPosition:
    def test_defaults(self):
        p = Position(
            market="binance",
            symbol="BTCUSDT",
            volume=Decimal("0.0009091"),
            price=Decimal("11000"),
            take_profit=Decimal("0.8"),
            stop_loss=Decimal("5"),
            opened_at=NOW,
        )
        assert p.id is None
        assert p.side == "BUY"
        assert p.order_id == 0
        assert p.is_test_mode is False

    def test_side_fixed(self):
        with pytest.raises(ValidationError):
            Position(
                market="binance",
                symbol="BTCUSDT",
                side="SELL",
                volume=1,
                price=1,
                take_profit=1,
                stop_loss=1,
                opened_at=NOW,
            )


class TestClosedOrder:
    def test_valid(self):
        o = ClosedOrder(
            market="binance",
            symbol="BTCUSDT",
            volume=Decimal("1"),
            price=Decimal("90"),
            price_change_percentage=Decimal("-10"),
            profit_loss=Decimal("-9.985"),
            closed_at=NOW,
        )
        assert o.side == "SELL"
        assert o.profit_loss < 0


class TestFill:
    def test_simulated_fill(self):
        f = Fill(symbol="ETHUSDT", price=Decimal("3000"), transaction_time=NOW)
        assert f.order_id == 0
