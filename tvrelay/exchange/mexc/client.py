from __future__ import annotations

import logging
from typing import Any

import ccxt
import ccxt.async_support as ccxt_async

from tvrelay.core.errors import AdapterFailure

log = logging.getLogger("tvrelay.exchange")


class MexcFuturesClient:
    """
    Thin async wrapper over ccxt's MEXC exchange.

    One long-lived credentialed handle, created on first use and reused
    across requests. ccxt errors are re-raised as AdapterFailure with the
    exchange's message untouched; nothing is retried.
    """

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        enable_rate_limit: bool = True,
        quote_currency: str = "USDT",
        exchange: Any = None,
    ):
        self.api_key = api_key
        self.api_secret = api_secret
        self.enable_rate_limit = enable_rate_limit
        self.quote_currency = quote_currency
        self._exchange = exchange

    @property
    def exchange(self):
        if self._exchange is None:
            self._exchange = ccxt_async.mexc(
                {
                    "apiKey": self.api_key,
                    "secret": self.api_secret,
                    "enableRateLimit": self.enable_rate_limit,
                }
            )
        return self._exchange

    async def _call(self, name: str, *args):
        try:
            return await getattr(self.exchange, name)(*args)
        except ccxt.BaseError as e:
            raise AdapterFailure(str(e)) from e

    # ---------------- ACCOUNT ----------------

    async def fetch_balance(self, params: dict | None = None) -> dict:
        return await self._call("fetch_balance", params or {})

    async def fetch_positions(self) -> list:
        data = await self._call("fetch_positions")
        return data if isinstance(data, list) else []

    async def fetch_and_log_balance(self, account_type: str = "swap") -> dict:
        """Startup check: log futures balance and open positions."""
        try:
            balance = await self.fetch_balance({"type": account_type})

            q = self.quote_currency
            log.info("Futures Account Balance:")
            log.info("Total %s: %s", q, (balance.get("total") or {}).get(q))
            log.info("Free %s: %s", q, (balance.get("free") or {}).get(q))
            log.info("Used %s: %s", q, (balance.get("used") or {}).get(q))

            positions = await self.fetch_positions()
            log.info("Current Positions: %s", positions)

            return balance
        except Exception:
            log.exception("Error fetching balance")
            raise

    # ---------------- TRADING ----------------

    async def create_market_sell_order(self, symbol: str, amount: float) -> dict:
        return await self._call("create_market_sell_order", symbol, amount)

    async def create_market_buy_order(self, symbol: str, amount: float) -> dict:
        return await self._call("create_market_buy_order", symbol, amount)

    async def create_order(
        self,
        symbol: str,
        type: str,
        side: str,
        amount: float,
        price: float | None = None,
        params: dict | None = None,
    ) -> dict:
        return await self._call(
            "create_order", symbol, type, side, amount, price, params or {}
        )

    async def close(self) -> None:
        if self._exchange is None:
            return
        await self._exchange.close()
        self._exchange = None
