"""SQLAlchemy ORM model for the per-symbol step size cache."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import DateTime

from voltra.db.base import Base
from voltra.db.types import ExactDecimal


class StepSizeRow(Base):
    __tablename__ = "step_size_cache"

    symbol: Mapped[str] = mapped_column(Text, primary_key=True)
    step_size: Mapped[Decimal] = mapped_column(ExactDecimal, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
