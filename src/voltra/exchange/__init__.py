"""Exchange API clients."""

from voltra.exchange.base import Market
from voltra.exchange.binance import BinanceMarket
from voltra.exchange.filters import CoinFilter

__all__ = ["BinanceMarket", "CoinFilter", "Market"]
