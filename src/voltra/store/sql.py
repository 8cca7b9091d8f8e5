"""SQL store — positions, sell records and step sizes in a relational database."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from decimal import Decimal

from sqlalchemy import Engine, delete, desc, func, select
from sqlalchemy.orm import Session, sessionmaker

from voltra.db.tables import ClosedOrderRow, PositionRow, StepSizeRow
from voltra.models import ClosedOrder, Position
from voltra.store.base import Store
from voltra.utils.time import as_utc, utcnow


def _position_from_row(row: PositionRow) -> Position:
    return Position(
        id=row.id,
        market=row.market,
        symbol=row.symbol,
        volume=Decimal(str(row.volume)),
        price=Decimal(str(row.price)),
        take_profit=Decimal(str(row.take_profit)),
        stop_loss=Decimal(str(row.stop_loss)),
        opened_at=as_utc(row.opened_at),
        order_id=row.order_id,
        is_test_mode=row.is_test_mode,
    )


def _closed_order_from_row(row: ClosedOrderRow) -> ClosedOrder:
    return ClosedOrder(
        id=row.id,
        market=row.market,
        symbol=row.symbol,
        volume=Decimal(str(row.volume)),
        price=Decimal(str(row.price)),
        price_change_percentage=Decimal(str(row.price_change_percentage)),
        profit_loss=Decimal(str(row.profit_loss)),
        closed_at=as_utc(row.closed_at),
        order_id=row.order_id,
        is_test_mode=row.is_test_mode,
    )


class SqlStore(Store):
    """Store backed by SQLAlchemy; one short session per call, serialized by a lock."""

    def __init__(self, engine: Engine) -> None:
        self._sessions = sessionmaker(bind=engine, expire_on_commit=False)
        self._lock = threading.Lock()

    @contextmanager
    def _session(self) -> Iterator[Session]:
        with self._lock, self._sessions() as session:
            yield session

    # ── Positions ─────────────────────────────────────────────

    def save_open_position(self, position: Position) -> Position:
        with self._session() as session:
            row = session.get(PositionRow, position.id) if position.id is not None else None
            if row is None:
                row = session.scalars(
                    select(PositionRow).where(
                        PositionRow.market == position.market,
                        PositionRow.symbol == position.symbol,
                        PositionRow.side == position.side,
                    )
                ).first()
            if row is None:
                row = PositionRow(market=position.market, symbol=position.symbol, side=position.side)
                session.add(row)
            row.volume = position.volume
            row.price = position.price
            row.take_profit = position.take_profit
            row.stop_loss = position.stop_loss
            row.opened_at = position.opened_at
            row.order_id = position.order_id
            row.is_test_mode = position.is_test_mode
            session.commit()
            return position.model_copy(update={"id": row.id})

    def has_open_position(self, market: str, symbol: str) -> bool:
        return self._count_positions(market, symbol) > 0

    def count_open_positions(self, market: str) -> int:
        return self._count_positions(market)

    def _count_positions(self, market: str, symbol: str | None = None) -> int:
        query = select(func.count(PositionRow.id)).where(PositionRow.market == market)
        if symbol is not None:
            query = query.where(PositionRow.symbol == symbol)
        with self._session() as session:
            return session.scalar(query) or 0

    def list_open_positions(self, market: str) -> list[Position]:
        with self._session() as session:
            rows = session.scalars(
                select(PositionRow)
                .where(PositionRow.market == market)
                .order_by(PositionRow.id)
            ).all()
            return [_position_from_row(r) for r in rows]

    def delete_position(self, position: Position) -> None:
        query = delete(PositionRow)
        if position.id is not None:
            query = query.where(PositionRow.id == position.id)
        else:
            query = query.where(
                PositionRow.market == position.market,
                PositionRow.symbol == position.symbol,
            )
        with self._session() as session:
            session.execute(query)
            session.commit()

    # ── Closed orders ─────────────────────────────────────────

    def save_closed_order(self, order: ClosedOrder) -> ClosedOrder:
        with self._session() as session:
            row = ClosedOrderRow(
                market=order.market,
                symbol=order.symbol,
                side=order.side,
                volume=order.volume,
                price=order.price,
                price_change_percentage=order.price_change_percentage,
                profit_loss=order.profit_loss,
                closed_at=order.closed_at,
                order_id=order.order_id,
                is_test_mode=order.is_test_mode,
            )
            session.add(row)
            session.commit()
            return order.model_copy(update={"id": row.id})

    def get_most_recent_closed_order(self, market: str, symbol: str) -> ClosedOrder | None:
        with self._session() as session:
            row = session.scalars(
                select(ClosedOrderRow)
                .where(ClosedOrderRow.market == market, ClosedOrderRow.symbol == symbol)
                .order_by(desc(ClosedOrderRow.closed_at), desc(ClosedOrderRow.id))
                .limit(1)
            ).first()
            return _closed_order_from_row(row) if row is not None else None

    # ── Step size cache ───────────────────────────────────────

    def get_cached_step_size(self, symbol: str) -> Decimal | None:
        with self._session() as session:
            row = session.get(StepSizeRow, symbol)
            return Decimal(str(row.step_size)) if row is not None else None

    def put_cached_step_size(self, symbol: str, step_size: Decimal) -> None:
        with self._session() as session:
            row = session.get(StepSizeRow, symbol)
            if row is None:
                session.add(StepSizeRow(symbol=symbol, step_size=step_size, created_at=utcnow()))
            else:
                row.step_size = step_size
            session.commit()
