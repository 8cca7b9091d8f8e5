"""Binance spot client — REST prices, symbol rules and market orders."""

from __future__ import annotations

import hashlib
import hmac
import time
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any
from urllib.parse import urlencode

import httpx

from voltra.errors import MarketError, SymbolNotFoundError
from voltra.exchange.base import Market
from voltra.exchange.filters import CoinFilter
from voltra.models import Coin, CoinMap, Fill, SymbolInfo


def _ms_to_dt(ms: int) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


class BinanceMarket(Market):
    """Async client for Binance's spot REST API."""

    name = "binance"

    def __init__(
        self,
        api_key: str = "",
        secret_key: str = "",
        base_url: str = "https://api.binance.com",
        coin_filter: CoinFilter | None = None,
        recv_window_ms: int = 5000,
        http: httpx.AsyncClient | None = None,
    ):
        super().__init__(coin_filter)
        self.base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._secret_key = secret_key
        self._recv_window_ms = recv_window_ms
        self._http = http

    async def _get_http(self) -> httpx.AsyncClient:
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(timeout=15.0)
        return self._http

    async def close(self) -> None:
        if self._http and not self._http.is_closed:
            await self._http.aclose()

    # --- REST ---

    def sign(self, params: dict[str, Any]) -> dict[str, Any]:
        """Add timestamp, recvWindow and the HMAC-SHA256 signature."""
        signed = dict(params)
        signed["timestamp"] = int(time.time() * 1000)
        signed["recvWindow"] = self._recv_window_ms
        query = urlencode(signed)
        signed["signature"] = hmac.new(
            self._secret_key.encode(), query.encode(), hashlib.sha256,
        ).hexdigest()
        return signed

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        signed: bool = False,
    ) -> Any:
        http = await self._get_http()
        headers: dict[str, str] = {}
        if signed:
            params = self.sign(params or {})
            headers["X-MBX-APIKEY"] = self._api_key
        try:
            resp = await http.request(method, f"{self.base_url}{path}", params=params, headers=headers)
        except httpx.HTTPError as exc:
            raise MarketError(f"{method} {path} failed: {exc}") from exc
        if resp.is_error:
            # Binance error bodies look like {"code": -1121, "msg": "Invalid symbol."}
            try:
                body = resp.json()
            except ValueError:
                body = {}
            code = body.get("code") if isinstance(body, dict) else None
            msg = body.get("msg") if isinstance(body, dict) else None
            raise MarketError(
                f"{method} {path} returned {resp.status_code}: {msg or resp.text}",
                code=code,
            )
        return resp.json()

    async def get_coins(self, filtered: bool = True) -> CoinMap:
        data = await self._request("GET", "/api/v3/ticker/price")
        now = datetime.now(timezone.utc)
        coins: CoinMap = {}
        for entry in data:
            symbol = entry["symbol"]
            if filtered and not self.coin_filter.is_available_for_trading(symbol):
                continue
            coins[symbol] = Coin(
                symbol=symbol,
                price=Decimal(entry["price"]),
                volume=self.coin_filter.volume_of(symbol),
                sampled_at=now,
            )
        return coins

    async def get_symbol_info(self, symbol: str) -> SymbolInfo:
        """Fetch the LOT_SIZE step size for a symbol."""
        try:
            data = await self._request("GET", "/api/v3/exchangeInfo", params={"symbol": symbol.upper()})
        except MarketError as exc:
            # -1121: invalid symbol
            if exc.code == -1121:
                raise SymbolNotFoundError(symbol) from exc
            raise

        for info in data.get("symbols", []):
            if info.get("symbol") != symbol.upper():
                continue
            step_size = Decimal("0")
            for f in info.get("filters", []):
                if f.get("filterType") == "LOT_SIZE":
                    step_size = Decimal(f["stepSize"]).normalize()
                    break
            return SymbolInfo(symbol=info["symbol"], step_size=step_size)

        raise SymbolNotFoundError(symbol)

    async def buy(self, symbol: str, volume: Decimal) -> Fill:
        return await self._market_order(symbol, "BUY", volume)

    async def sell(self, symbol: str, volume: Decimal) -> Fill:
        return await self._market_order(symbol, "SELL", volume)

    async def _market_order(self, symbol: str, side: str, volume: Decimal) -> Fill:
        data = await self._request(
            "POST",
            "/api/v3/order",
            params={
                "symbol": symbol.upper(),
                "side": side,
                "type": "MARKET",
                "quantity": format(volume, "f"),
                "newOrderRespType": "FULL",
            },
            signed=True,
        )
        return self.parse_fill(data)

    @staticmethod
    def parse_fill(data: dict) -> Fill:
        """Turn an order response into a Fill priced at the volume-weighted average."""
        fills = data.get("fills") or []
        qty = sum((Decimal(f["qty"]) for f in fills), Decimal("0"))
        if qty > 0:
            price = sum((Decimal(f["price"]) * Decimal(f["qty"]) for f in fills), Decimal("0")) / qty
        else:
            executed = Decimal(data.get("executedQty", "0"))
            quote = Decimal(data.get("cummulativeQuoteQty", "0"))
            price = quote / executed if executed > 0 else Decimal(data.get("price", "0"))
        return Fill(
            order_id=int(data.get("orderId", 0)),
            symbol=data["symbol"],
            price=price,
            transaction_time=_ms_to_dt(data.get("transactTime", int(time.time() * 1000))),
        )

    async def get_24h_volumes(self) -> dict[str, Decimal]:
        data = await self._request("GET", "/api/v3/ticker/24hr")
        return {entry["symbol"]: Decimal(entry["quoteVolume"]) for entry in data}
