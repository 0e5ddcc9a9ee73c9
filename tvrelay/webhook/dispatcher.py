from __future__ import annotations

import json
import logging
from typing import Any

from tvrelay.alerts.models import (
    Alert,
    AlertKind,
    Position,
    bare_crypto_name,
    find_position,
)
from tvrelay.core.errors import MalformedRequest, NoActiveTrade, PositionNotFound
from tvrelay.execution.executor import ActionExecutor, ExecResult
from tvrelay.state.registry import TradeStateRegistry

log = logging.getLogger("tvrelay.webhook")


def parse_body(raw: bytes | str) -> Any:
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as e:
        raise MalformedRequest(f"invalid JSON body: {e}") from e


class WebhookDispatcher:
    """
    Validates a TradingView alert against the trade flags and live
    positions, then routes it to the matching action.
    """

    def __init__(
        self,
        client,
        registry: TradeStateRegistry,
        quote_currency: str = "USDT",
        executor: ActionExecutor | None = None,
    ):
        self.client = client
        self.registry = registry
        self.quote_currency = quote_currency
        self.executor = executor or ActionExecutor(client, registry)

    async def _find_position(self, symbol: str) -> Position:
        raw = await self.client.fetch_positions()
        positions = [Position.from_ccxt(p) for p in raw if isinstance(p, dict)]

        name = bare_crypto_name(symbol, self.quote_currency)
        position = find_position(positions, name)
        if position is None:
            raise PositionNotFound(f"no position matching {name!r} for {symbol}")
        log.debug("matched position for %s: %s", symbol, position.raw)
        return position

    async def handle(self, raw_body: bytes | str) -> ExecResult:
        alert = Alert.from_payload(parse_body(raw_body))
        log.info(
            "alert received symbol=%s (raw %s) kind=%s",
            alert.symbol,
            alert.raw_symbol,
            alert.kind.value,
        )
        return await self.dispatch(alert)

    async def dispatch(self, alert: Alert) -> ExecResult:
        symbol = alert.symbol

        async with self.registry.guard(symbol):
            # gate before touching the exchange
            if not self.registry.get(symbol).in_trade:
                raise NoActiveTrade(f"{symbol} is not in trade")

            position = await self._find_position(symbol)

            if alert.kind is AlertKind.TAKE_PROFIT:
                res = await self.executor.take_profit(symbol, position)
            else:
                res = await self.executor.break_even(symbol, position)

        log.info("alert handled symbol=%s action=%s", symbol, res.action)
        return res
