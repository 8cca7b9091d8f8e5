"""SQLAlchemy ORM models for open positions and closed sell orders."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, Index, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import DateTime

from voltra.db.base import Base
from voltra.db.types import ExactDecimal


class PositionRow(Base):
    __tablename__ = "positions"
    __table_args__ = (UniqueConstraint("market", "symbol", "side"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    market: Mapped[str] = mapped_column(Text, nullable=False)
    symbol: Mapped[str] = mapped_column(Text, nullable=False)
    side: Mapped[str] = mapped_column(Text, nullable=False, default="BUY")
    volume: Mapped[Decimal] = mapped_column(ExactDecimal, nullable=False)
    price: Mapped[Decimal] = mapped_column(ExactDecimal, nullable=False)
    take_profit: Mapped[Decimal] = mapped_column(ExactDecimal, nullable=False)
    stop_loss: Mapped[Decimal] = mapped_column(ExactDecimal, nullable=False)
    opened_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    order_id: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_test_mode: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class ClosedOrderRow(Base):
    __tablename__ = "closed_orders"
    __table_args__ = (Index("ix_closed_orders_market_symbol", "market", "symbol", "closed_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    market: Mapped[str] = mapped_column(Text, nullable=False)
    symbol: Mapped[str] = mapped_column(Text, nullable=False)
    side: Mapped[str] = mapped_column(Text, nullable=False, default="SELL")
    volume: Mapped[Decimal] = mapped_column(ExactDecimal, nullable=False)
    price: Mapped[Decimal] = mapped_column(ExactDecimal, nullable=False)
    price_change_percentage: Mapped[Decimal] = mapped_column(ExactDecimal, nullable=False)
    profit_loss: Mapped[Decimal] = mapped_column(ExactDecimal, nullable=False)
    closed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    order_id: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_test_mode: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
