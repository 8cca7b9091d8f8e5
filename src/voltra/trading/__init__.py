"""Trading engine — volatility window, sizing, buy checks and the buy/sell loops."""

from voltra.trading.engine import TradingEngine
from voltra.trading.risk import BuyVerdict, evaluate_buy
from voltra.trading.sizing import (
    QuoteBudget,
    TrailingTargets,
    calculate_fee_fraction,
    calculate_fees,
    calculate_price_change_pct,
    calculate_profit_loss,
    calculate_stop_loss_price,
    calculate_take_profit_price,
    calculate_trailing_targets,
    convert_volume,
)
from voltra.trading.step_size import StepSizeCache, round_to_step
from voltra.trading.window import Snapshot, VolatilityWindow

__all__ = [
    "BuyVerdict",
    "QuoteBudget",
    "Snapshot",
    "StepSizeCache",
    "TradingEngine",
    "TrailingTargets",
    "VolatilityWindow",
    "calculate_fee_fraction",
    "calculate_fees",
    "calculate_price_change_pct",
    "calculate_profit_loss",
    "calculate_stop_loss_price",
    "calculate_take_profit_price",
    "calculate_trailing_targets",
    "convert_volume",
    "evaluate_buy",
    "round_to_step",
]
