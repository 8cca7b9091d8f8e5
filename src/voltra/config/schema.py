"""Configuration schema — Pydantic models for config.yaml."""

from __future__ import annotations

from pydantic import BaseModel, Field


class BinanceConfig(BaseModel):
    api_key: str = ""
    secret_key: str = ""
    base_url: str = "https://api.binance.com"
    recv_window_ms: int = 5000


class MarketsConfig(BaseModel):
    binance: BinanceConfig = Field(default_factory=BinanceConfig)


class TrailingStopConfig(BaseModel):
    enable: bool = False
    # Percentage points below the new take profit for the ratcheted stop loss.
    trailing_stop_loss: float = 0.4
    # Percentage points added to the current gain for the ratcheted take profit.
    trailing_take_profit: float = 0.1


class TradingConfig(BaseModel):
    pair_with: str = "USDT"
    # Quote currency amount spent per trade.
    quantity: float = Field(default=15.0, ge=0)
    allow_list: list[str] = Field(default_factory=list)
    deny_list: list[str] = Field(default_factory=list)
    # Minimum 24h quote volume a symbol needs to be sampled, 0 disables.
    min_quote_volume: float = Field(default=0.0, ge=0)
    volume_refresh_interval: int = Field(default=3600, gt=0)
    # 0 means unlimited.
    max_coins: int = Field(default=0, ge=0)
    # Minutes covered by one volatility window.
    time_difference: float = Field(default=2.0, ge=0)
    # Snapshots taken per window.
    recheck_interval: int = Field(default=10, gt=0)
    # Seconds between sell loop cycles.
    sell_timeout: float = Field(default=10.0, ge=0)
    change_in_price: float = 10.0
    stop_loss: float = 5.0
    take_profit: float = 0.8
    trading_fee_maker: float = Field(default=0.075, ge=0)
    trading_fee_taker: float = Field(default=0.075, ge=0)
    # Minutes after a sell before the same symbol may be bought again, 0 disables.
    cool_off_delay: float = Field(default=0.0, ge=0)
    dynamic_quantity: bool = False
    trailing_stop: TrailingStopConfig = Field(default_factory=TrailingStopConfig)


class DatabaseConfig(BaseModel):
    url: str = "sqlite:///data/voltra.db"


class LoggingConfig(BaseModel):
    enabled: bool = True
    level: str = "INFO"
    format: str = "json"
    trade_log_file: str | None = None


class AppConfig(BaseModel):
    test_mode: bool = True
    markets: MarketsConfig = Field(default_factory=MarketsConfig)
    trading: TradingConfig = Field(default_factory=TradingConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
