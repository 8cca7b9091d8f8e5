"""Bot runner — wires config, logging, market, store and engine together."""

from __future__ import annotations

import asyncio
import signal

import structlog

from voltra.config.loader import load_config
from voltra.config.schema import AppConfig
from voltra.db.engine import create_tables, init_engine
from voltra.exchange.binance import BinanceMarket
from voltra.exchange.filters import CoinFilter
from voltra.logging.setup import setup_logging
from voltra.store.sql import SqlStore
from voltra.trading.engine import TradingEngine

log = structlog.get_logger("bot_runner")


def build_market(config: AppConfig) -> BinanceMarket:
    """Create the Binance client with a coin filter built from trading options."""
    trading = config.trading
    coin_filter = CoinFilter(
        pair_with=trading.pair_with,
        allow_list=trading.allow_list,
        deny_list=trading.deny_list,
        min_quote_volume=trading.min_quote_volume,
    )
    binance = config.markets.binance
    return BinanceMarket(
        api_key=binance.api_key,
        secret_key=binance.secret_key,
        base_url=binance.base_url,
        coin_filter=coin_filter,
        recv_window_ms=binance.recv_window_ms,
    )


async def run_bot(config: AppConfig) -> None:
    """Run the engine until SIGINT/SIGTERM."""
    db_engine = init_engine(config.database.url)
    create_tables(db_engine)
    store = SqlStore(db_engine)
    market = build_market(config)
    engine = TradingEngine(config, market, store)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, engine.stop)
        except NotImplementedError:
            # Windows event loops have no signal handler support.
            pass

    if not config.test_mode:
        log.warning("live_trading_enabled", market=market.name)

    try:
        await engine.run()
    finally:
        await market.close()
        db_engine.dispose()


def main(config_path: str | None = None) -> None:
    """Entry point — load config, set up logging, run the async loop."""
    config = load_config(config_path)
    setup_logging(
        level=config.logging.level,
        log_format=config.logging.format,
        enabled=config.logging.enabled,
        trade_log_file=config.logging.trade_log_file,
    )
    asyncio.run(run_bot(config))
