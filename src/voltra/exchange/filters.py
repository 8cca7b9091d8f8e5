"""CoinFilter — decides which exchange symbols the bot samples."""

from __future__ import annotations

import threading
from collections.abc import Mapping
from decimal import Decimal


class CoinFilter:
    """Allow/deny lists, quote pairing and an optional 24h liquidity floor.

    ``allow_list`` holds base assets ("BTC") joined with ``pair_with``;
    ``deny_list`` holds full symbols ("EURUSDT"). Volumes are pushed in by the
    engine's refresh timer, so reads and writes are guarded by a lock.
    """

    def __init__(
        self,
        pair_with: str = "USDT",
        allow_list: list[str] | None = None,
        deny_list: list[str] | None = None,
        min_quote_volume: Decimal | float = 0,
    ) -> None:
        self.pair_with = pair_with.upper()
        self.allowed = {f"{asset.upper()}{self.pair_with}" for asset in allow_list or []}
        self.denied = {symbol.upper() for symbol in deny_list or []}
        self.min_quote_volume = Decimal(str(min_quote_volume))
        self._volumes: dict[str, Decimal] = {}
        self._lock = threading.Lock()

    @property
    def volume_filter_enabled(self) -> bool:
        return self.min_quote_volume > 0

    def update_volumes(self, volumes: Mapping[str, Decimal]) -> None:
        with self._lock:
            self._volumes = dict(volumes)

    def volume_of(self, symbol: str) -> Decimal:
        with self._lock:
            return self._volumes.get(symbol, Decimal("0"))

    def is_available_for_trading(self, symbol: str) -> bool:
        """True if *symbol* passes every configured rule."""
        symbol = symbol.upper()
        if not symbol.endswith(self.pair_with):
            return False
        if self.allowed and symbol not in self.allowed:
            return False
        if symbol in self.denied:
            return False
        if self.volume_filter_enabled and self.volume_of(symbol) < self.min_quote_volume:
            return False
        return True
