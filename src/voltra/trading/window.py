"""VolatilityWindow — rolling buffer of price snapshots used to spot volatile coins."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from types import MappingProxyType

from voltra.errors import EmptyWindowError
from voltra.models import Coin, VolatileCoin
from voltra.utils.time import utcnow

# Only meant for tests: an unbounded window grows forever.
UNLIMITED_WINDOW_LENGTH = 0


@dataclass(frozen=True)
class Snapshot:
    """All coin prices sampled at one point in time."""

    captured_at: datetime
    coins: Mapping[str, Coin] = field(default_factory=dict)

    def price(self, symbol: str) -> Decimal | None:
        coin = self.coins.get(symbol)
        return coin.price if coin is not None else None


def _min_key(symbol: str) -> Callable[[Snapshot], tuple[int, Decimal]]:
    # Absent symbols sort after every present price.
    def key(snapshot: Snapshot) -> tuple[int, Decimal]:
        price = snapshot.price(symbol)
        return (1, Decimal(0)) if price is None else (0, price)

    return key


def _max_key(symbol: str) -> Callable[[Snapshot], tuple[int, Decimal]]:
    # Absent symbols sort before every present price.
    def key(snapshot: Snapshot) -> tuple[int, Decimal]:
        price = snapshot.price(symbol)
        return (0, Decimal(0)) if price is None else (1, price)

    return key


class VolatilityWindow:
    """Bounded buffer of snapshots plus the coins flagged volatile in it.

    When a snapshot is added to a full window, the whole buffer and the set of
    volatile coins are cleared before the new snapshot is stored. Coins stay
    flagged until that reset, even if their price falls back.
    """

    def __init__(
        self,
        max_length: int,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        if max_length < 0:
            raise ValueError(f"max_length must be >= 0, got {max_length}")
        self.max_length = max_length
        self._clock = clock
        self._snapshots: list[Snapshot] = []
        self._volatile: dict[str, VolatileCoin] = {}

    def size(self) -> int:
        """Number of buffered snapshots."""
        return len(self._snapshots)

    def __len__(self) -> int:
        return self.size()

    def add_snapshot(self, coins: Mapping[str, Coin] | None) -> None:
        """Append a snapshot stamped with the current time."""
        if self.max_length != UNLIMITED_WINDOW_LENGTH and self.size() >= self.max_length:
            self._snapshots = []
            self._volatile = {}
        frozen = MappingProxyType(dict(coins or {}))
        self._snapshots.append(Snapshot(captured_at=self._clock(), coins=frozen))

    def latest(self) -> Snapshot:
        """Return the most recent snapshot."""
        if not self._snapshots:
            raise EmptyWindowError("volatility window has no snapshots yet")
        return self._snapshots[-1]

    def min_for(self, symbol: str) -> Snapshot:
        """Snapshot holding the lowest price of *symbol* (first one on ties)."""
        if not self._snapshots:
            raise EmptyWindowError("volatility window has no snapshots yet")
        return min(self._snapshots, key=_min_key(symbol))

    def max_for(self, symbol: str) -> Snapshot:
        """Snapshot holding the highest price of *symbol* (first one on ties)."""
        if not self._snapshots:
            raise EmptyWindowError("volatility window has no snapshots yet")
        return max(self._snapshots, key=_max_key(symbol))

    def _position(self, snapshot: Snapshot) -> int:
        for index, candidate in enumerate(self._snapshots):
            if candidate is snapshot:
                return index
        raise ValueError("snapshot is not part of this window")

    def price_change(self, symbol: str) -> Decimal | None:
        """Signed min-to-max change of *symbol* in percent over the window.

        Positive when the minimum came first (the price rose), negative when
        the maximum came first. None when the symbol has no usable minimum.
        """
        low = self.min_for(symbol)
        high = self.max_for(symbol)
        low_price = low.price(symbol)
        high_price = high.price(symbol)
        if low_price is None or high_price is None or low_price == 0:
            return None
        polarity = 1 if self._position(low) <= self._position(high) else -1
        return polarity * (high_price - low_price) / low_price * 100

    def identify_volatile_coins(self, threshold: Decimal | float) -> dict[str, VolatileCoin]:
        """Flag coins of the latest snapshot whose change reached *threshold* percent.

        Returns every coin flagged since the last reset, not only new ones.
        """
        threshold = Decimal(str(threshold))
        current = self.latest()
        for symbol, coin in current.coins.items():
            if symbol in self._volatile:
                continue
            change = self.price_change(symbol)
            if change is not None and change >= threshold:
                self._volatile[symbol] = VolatileCoin.from_coin(coin, change)
        return dict(self._volatile)
