"""Import all table modules so Base.metadata knows about them."""

from voltra.db.tables.cache import StepSizeRow
from voltra.db.tables.orders import ClosedOrderRow, PositionRow

__all__ = [
    "ClosedOrderRow",
    "PositionRow",
    "StepSizeRow",
]
