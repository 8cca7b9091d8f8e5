"""Buy gating — checks a volatile coin must pass before it is bought."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from voltra.config.schema import TradingConfig
from voltra.models import ClosedOrder
from voltra.store.base import Store
from voltra.utils.time import as_utc


@dataclass(frozen=True)
class BuyVerdict:
    """Result of a buy check — allowed or rejected with a reason.

    ``halt`` means no other coin may be bought in the current cycle either.
    """

    allowed: bool
    reason: str = ""
    halt: bool = False


ALLOW = BuyVerdict(allowed=True)


# ── Pure check functions ──────────────────────────────────────


def check_open_position(has_open_position: bool) -> BuyVerdict:
    """Reject if the coin is already held."""
    if has_open_position:
        return BuyVerdict(allowed=False, reason="already_bought")
    return ALLOW


def check_max_positions(open_count: int, limit: int) -> BuyVerdict:
    """Reject (and halt the cycle) once a nonzero position limit is reached."""
    if limit != 0 and open_count >= limit:
        return BuyVerdict(
            allowed=False,
            reason=f"max_positions_reached ({open_count}/{limit})",
            halt=True,
        )
    return ALLOW


def check_cool_off(
    last_sell: ClosedOrder | None,
    cool_off_minutes: float,
    now: datetime,
) -> BuyVerdict:
    """Reject if the coin was sold less than *cool_off_minutes* ago."""
    if cool_off_minutes == 0 or last_sell is None:
        return ALLOW
    elapsed = now - as_utc(last_sell.closed_at)
    if elapsed < timedelta(minutes=cool_off_minutes):
        return BuyVerdict(
            allowed=False,
            reason=f"cool_off_active ({int(elapsed.total_seconds())}s since last sell)",
        )
    return ALLOW


def evaluate_buy(
    config: TradingConfig,
    store: Store,
    market: str,
    symbol: str,
    now: datetime,
) -> BuyVerdict:
    """Composite buy check — returns the first failing verdict or ALLOW."""
    verdict = check_open_position(store.has_open_position(market, symbol))
    if not verdict.allowed:
        return verdict

    verdict = check_max_positions(store.count_open_positions(market), config.max_coins)
    if not verdict.allowed:
        return verdict

    if config.cool_off_delay:
        verdict = check_cool_off(
            store.get_most_recent_closed_order(market, symbol),
            config.cool_off_delay,
            now,
        )
        if not verdict.allowed:
            return verdict

    return ALLOW
