"""TradingEngine — buys volatile coins and manages open positions until they exit."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime
from decimal import Decimal

import structlog

from voltra.config.schema import AppConfig
from voltra.errors import EngineStartupError
from voltra.exchange.base import Market
from voltra.logging.setup import TRADE_LOGGER
from voltra.models import ClosedOrder, CoinMap, Fill, Position, VolatileCoin
from voltra.store.base import Store
from voltra.trading.risk import evaluate_buy
from voltra.trading.sizing import (
    QuoteBudget,
    calculate_fee_fraction,
    calculate_fees,
    calculate_price_change_pct,
    calculate_profit_loss,
    calculate_stop_loss_price,
    calculate_take_profit_price,
    calculate_trailing_targets,
    convert_volume,
)
from voltra.trading.step_size import StepSizeCache
from voltra.trading.window import VolatilityWindow
from voltra.utils.time import calculate_time_delta, utcnow

log = structlog.get_logger("trading_engine")
trade_log = structlog.get_logger(TRADE_LOGGER)


class TradingEngine:
    """Runs the buy loop and the sell loop against one market and one store.

    The window is only touched by the buy loop. The per-trade quote amount is
    the one piece of state both loops share and lives in a QuoteBudget.
    """

    def __init__(
        self,
        config: AppConfig,
        market: Market,
        store: Store,
        window: VolatilityWindow | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.config = config
        self.trading = config.trading
        self.market = market
        self.store = store
        self._clock = clock
        if window is None:
            window = VolatilityWindow(self.trading.recheck_interval, clock=clock)
        self.window = window
        self.step_sizes = StepSizeCache(store)
        self.quote_budget = QuoteBudget(self.trading.quantity)
        self._running = False
        self._last_failed_fetch: datetime | None = None

    @property
    def running(self) -> bool:
        return self._running

    # ── Lifecycle ─────────────────────────────────────────────

    async def run(self) -> None:
        """Take the initial reading, then run both loops until stop() is called.

        Raises EngineStartupError if the initial reading fails.
        """
        self._running = True
        log.info(
            "engine_started",
            market=self.market.name,
            test_mode=self.config.test_mode,
            window_length=self.window.max_length,
        )

        volume_filter = self.market.coin_filter.volume_filter_enabled
        if volume_filter:
            await self.refresh_volumes()

        try:
            coins = await self.market.get_coins()
        except Exception as exc:
            self._running = False
            log.error("initial_fetch_failed", market=self.market.name, error=str(exc))
            raise EngineStartupError(f"failed to load initial coins from {self.market.name}") from exc
        self.window.add_snapshot(coins)

        refresher = asyncio.create_task(self._volume_refresh_loop()) if volume_filter else None
        try:
            await asyncio.gather(self._buy_loop(), self._sell_loop())
        finally:
            self._running = False
            if refresher is not None:
                refresher.cancel()
                try:
                    await refresher
                except asyncio.CancelledError:
                    pass
            log.info("engine_stopped", market=self.market.name)

    def stop(self) -> None:
        """Ask both loops to finish after their current iteration."""
        if self._running:
            log.info("engine_stopping", market=self.market.name)
        self._running = False

    # ── Buy side ──────────────────────────────────────────────

    async def _buy_loop(self) -> None:
        log.info("watching_coins_to_buy")
        while self._running:
            try:
                await self._wait_for_next_sample()
                await self.buy_cycle()
            except Exception:
                log.exception("buy_cycle_error")
        log.info("buy_loop_stopped")

    async def _wait_for_next_sample(self) -> None:
        """Sleep so that recheck_interval samples span time_difference minutes."""
        delta = calculate_time_delta(self.trading.time_difference, self.trading.recheck_interval)
        last = self.window.latest().captured_at
        if self._last_failed_fetch is not None and self._last_failed_fetch > last:
            last = self._last_failed_fetch
        elapsed = self._clock() - last
        if elapsed < delta:
            interval = (delta - elapsed).total_seconds()
            log.debug("sleeping", seconds=round(interval, 3))
            await asyncio.sleep(interval)

    async def _update_latest_coins(self) -> bool:
        """Fetch a fresh snapshot into the window. False if the fetch failed."""
        try:
            coins = await self.market.get_coins()
        except Exception:
            self._last_failed_fetch = self._clock()
            log.exception("fetch_coins_failed", market=self.market.name)
            return False
        self._last_failed_fetch = None
        self.window.add_snapshot(coins)
        return True

    async def buy_cycle(self) -> list[Position]:
        """Sample once, then buy every volatile coin that passes the buy checks."""
        if not await self._update_latest_coins():
            return []

        volatile = self.window.identify_volatile_coins(self.trading.change_in_price)
        log.info("volatile_coins_found", count=len(volatile), window_size=self.window.size())

        opened: list[Position] = []
        for coin in volatile.values():
            verdict = evaluate_buy(
                self.trading, self.store, self.market.name, coin.symbol, self._clock(),
            )
            if not verdict.allowed:
                log.info("buy_skipped", symbol=coin.symbol, reason=verdict.reason)
                if verdict.halt:
                    break
                continue

            try:
                position = await self.open_position(coin)
            except Exception:
                log.exception("open_position_error", symbol=coin.symbol)
                continue
            if position is not None:
                opened.append(position)
        return opened

    async def open_position(self, coin: VolatileCoin) -> Position | None:
        """Size, execute and record a buy. None if the buy was skipped."""
        quote_amount = self.quote_budget.get()
        try:
            step_size = await self.step_sizes.resolve(coin.symbol, self.market)
        except Exception:
            log.exception("symbol_info_failed", symbol=coin.symbol)
            return None

        volume = convert_volume(quote_amount, coin.price, step_size)
        if volume <= 0:
            log.warning(
                "zero_volume_skipped",
                symbol=coin.symbol,
                quote_amount=float(quote_amount),
                price=float(coin.price),
                step_size=str(step_size),
            )
            return None

        log.info(
            "buying",
            symbol=coin.symbol,
            volume=float(volume),
            quote_amount=float(quote_amount),
            pair_with=self.trading.pair_with,
            price=float(coin.price),
            percentage=float(coin.percentage),
            test_mode=self.config.test_mode,
        )

        if self.config.test_mode:
            fill = Fill(order_id=0, symbol=coin.symbol, price=coin.price, transaction_time=self._clock())
        else:
            try:
                fill = await self.market.buy(coin.symbol, volume)
            except Exception:
                log.exception("buy_failed", symbol=coin.symbol, volume=float(volume))
                return None

        position = self.store.save_open_position(Position(
            market=self.market.name,
            symbol=coin.symbol,
            volume=volume,
            price=fill.price,
            take_profit=Decimal(str(self.trading.take_profit)),
            stop_loss=Decimal(str(self.trading.stop_loss)),
            opened_at=fill.transaction_time,
            order_id=fill.order_id,
            is_test_mode=self.config.test_mode,
        ))

        log.info(
            "position_opened",
            position_id=position.id,
            symbol=position.symbol,
            volume=float(position.volume),
            entry_price=float(position.price),
            take_profit=float(position.take_profit),
            stop_loss=float(position.stop_loss),
        )
        trade_log.info(
            "buy",
            market=position.market,
            symbol=position.symbol,
            volume=str(position.volume),
            price=str(position.price),
            order_id=position.order_id,
            test_mode=position.is_test_mode,
        )
        return position

    # ── Sell side ─────────────────────────────────────────────

    async def _sell_loop(self) -> None:
        log.info("watching_coins_to_sell")
        while self._running:
            try:
                await self.sell_cycle()
            except Exception:
                log.exception("sell_cycle_error")
            await asyncio.sleep(self.trading.sell_timeout)
        log.info("sell_loop_stopped")

    async def sell_cycle(self) -> list[ClosedOrder]:
        """Check every open position against the latest prices."""
        try:
            coins = await self.market.get_coins(filtered=False)
        except Exception:
            log.exception("fetch_coins_failed", market=self.market.name)
            return []

        closed: list[ClosedOrder] = []
        for position in self.store.list_open_positions(self.market.name):
            try:
                order = await self.check_position(position, coins)
            except Exception:
                log.exception("position_check_error", symbol=position.symbol)
                continue
            if order is not None:
                closed.append(order)
        return closed

    async def check_position(self, position: Position, coins: CoinMap) -> ClosedOrder | None:
        """Ratchet, close or keep one position. Returns the sell if it closed."""
        coin = coins.get(position.symbol)
        if coin is None:
            log.warning("price_missing", symbol=position.symbol, market=position.market)
            return None

        last_price = coin.price
        entry = position.price
        take_profit_price = calculate_take_profit_price(entry, position.take_profit)
        stop_loss_price = calculate_stop_loss_price(entry, position.stop_loss)
        change = calculate_price_change_pct(entry, last_price)

        trailing = self.trading.trailing_stop
        if trailing.enable and last_price >= take_profit_price:
            targets = calculate_trailing_targets(
                change,
                position.take_profit,
                position.stop_loss,
                trailing.trailing_take_profit,
                trailing.trailing_stop_loss,
            )
            if not targets.stop_loss_moved:
                log.info(
                    "trailing_stop_loss_kept",
                    symbol=position.symbol,
                    stop_loss=float(position.stop_loss),
                )
            position.take_profit = targets.take_profit
            position.stop_loss = targets.stop_loss
            self.store.save_open_position(position)
            log.info(
                "trailing_stop_adjusted",
                symbol=position.symbol,
                price_change_pct=float(change),
                take_profit=float(position.take_profit),
                stop_loss=float(position.stop_loss),
            )
            return None

        if last_price <= stop_loss_price:
            return await self.close_position(position, last_price, "stop_loss")
        if last_price >= take_profit_price:
            return await self.close_position(position, last_price, "take_profit")
        return None

    async def close_position(
        self,
        position: Position,
        last_price: Decimal,
        exit_reason: str,
    ) -> ClosedOrder | None:
        """Sell a position and record the result. None if a live sell failed."""
        entry = position.price
        fee_fraction = calculate_fee_fraction(
            self.trading.trading_fee_maker, self.trading.trading_fee_taker,
        )
        estimated = calculate_profit_loss(entry, last_price, position.volume, fee_fraction)
        log.info(
            "selling",
            symbol=position.symbol,
            volume=float(position.volume),
            exit_reason=exit_reason,
            buy_price=float(entry),
            current_price=float(last_price),
            price_change_pct=float(calculate_price_change_pct(entry, last_price)),
            estimated_profit_loss=float(estimated),
            fee_pct=float(fee_fraction * 100),
            test_mode=self.config.test_mode,
        )

        if self.config.test_mode:
            fill = Fill(order_id=0, symbol=position.symbol, price=last_price, transaction_time=self._clock())
        else:
            try:
                fill = await self.market.sell(position.symbol, position.volume)
            except Exception:
                log.exception("sell_failed", symbol=position.symbol, volume=float(position.volume))
                return None

        exit_price = fill.price
        profit_loss = calculate_profit_loss(entry, exit_price, position.volume, fee_fraction)
        fees = calculate_fees(
            entry, exit_price, position.volume,
            self.trading.trading_fee_maker, self.trading.trading_fee_taker,
        )
        order = self.store.save_closed_order(ClosedOrder(
            market=position.market,
            symbol=position.symbol,
            volume=position.volume,
            price=exit_price,
            price_change_percentage=calculate_price_change_pct(entry, exit_price),
            profit_loss=profit_loss,
            closed_at=fill.transaction_time,
            order_id=fill.order_id,
            is_test_mode=self.config.test_mode,
        ))
        self.store.delete_position(position)

        if self.trading.dynamic_quantity:
            share = profit_loss / max(self.trading.max_coins, 1)
            amount = self.quote_budget.adjust(share)
            log.info("quote_amount_adjusted", delta=float(share), quote_amount=float(amount))

        log.info(
            "position_closed",
            position_id=position.id,
            symbol=order.symbol,
            exit_reason=exit_reason,
            exit_price=float(order.price),
            price_change_pct=float(order.price_change_percentage),
            profit_loss=float(order.profit_loss),
            fees=float(fees),
        )
        trade_log.info(
            "sell",
            market=order.market,
            symbol=order.symbol,
            volume=str(order.volume),
            price=str(order.price),
            price_change_pct=str(order.price_change_percentage),
            profit_loss=str(order.profit_loss),
            exit_reason=exit_reason,
            order_id=order.order_id,
            test_mode=order.is_test_mode,
        )
        return order

    # ── 24h volumes ───────────────────────────────────────────

    async def refresh_volumes(self) -> bool:
        """Push fresh 24h volumes into the market's coin filter."""
        try:
            volumes = await self.market.get_24h_volumes()
        except Exception:
            log.exception("volume_refresh_failed", market=self.market.name)
            return False
        self.market.coin_filter.update_volumes(volumes)
        log.info("volumes_refreshed", symbols=len(volumes))
        return True

    async def _volume_refresh_loop(self) -> None:
        while True:
            await asyncio.sleep(self.trading.volume_refresh_interval)
            await self.refresh_volumes()
