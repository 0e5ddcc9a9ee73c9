from __future__ import annotations

import logging
from dataclasses import dataclass

from tvrelay.alerts.models import Position
from tvrelay.core.errors import MissingEntryPrice
from tvrelay.state.registry import TradeStateRegistry

log = logging.getLogger("tvrelay.execution")


# =========================
# Execution Result
# =========================
@dataclass
class ExecResult:
    action: str
    details: dict


# =========================
# Action Executor
# =========================
class ActionExecutor:
    """Turns a validated alert + live position into exactly one order."""

    def __init__(self, client, registry: TradeStateRegistry):
        self.client = client
        self.registry = registry

    async def take_profit(self, symbol: str, position: Position) -> ExecResult:
        log.info("TP hit for %s", symbol)

        # close opposite to the position, full size
        if position.is_long:
            order = await self.client.create_market_sell_order(symbol, position.contracts)
        else:
            order = await self.client.create_market_buy_order(symbol, position.contracts)

        log.info("Close Position: %s", order)
        self.registry.reset(symbol)

        return ExecResult(
            "TAKE_PROFIT_CLOSED",
            {
                "symbol": symbol,
                "position_side": position.side,
                "order_side": position.closing_side,
                "amount": position.contracts,
                "close_order": order,
            },
        )

    async def break_even(self, symbol: str, position: Position) -> ExecResult:
        log.info("BE hit for %s", symbol)

        if not position.entry_price:
            raise MissingEntryPrice()

        params = {
            "stopPrice": position.entry_price,
            "positionId": position.position_id,
            "triggerType": "mark_price",
            "stopType": "full",
        }
        side = position.closing_side
        amount = abs(float(position.contracts))

        order = await self.client.create_order(
            position.symbol,
            "stop_limit",
            side,
            amount,
            position.entry_price,
            params,
        )

        log.info(
            "Stop limit loss moved to break-even at %s for %s",
            position.entry_price,
            symbol,
        )
        log.info("Order details: %s", order)

        # position stays open; in_trade is left as is
        return ExecResult(
            "STOP_MOVED_TO_BREAK_EVEN",
            {
                "symbol": symbol,
                "exchange_symbol": position.symbol,
                "order_side": side,
                "amount": amount,
                "stop_price": position.entry_price,
                "stop_order": order,
            },
        )
