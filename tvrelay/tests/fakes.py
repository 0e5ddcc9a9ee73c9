import asyncio


class FakeExchangeClient:
    """Minimal fake MEXC client; records every call the relay makes."""

    def __init__(self, positions=None, *, order_error=None, positions_error=None, fetch_delay=0.0):
        self.positions = list(positions or [])
        self.order_error = order_error
        self.positions_error = positions_error
        # >0 makes fetch_positions suspend, like a real network call
        self.fetch_delay = fetch_delay
        self.calls = []
        self.closed = False

    def _record(self, name, *args):
        self.calls.append((name, args))

    def order_calls(self):
        return [c for c in self.calls if c[0].startswith("create_")]

    async def fetch_balance(self, params=None):
        self._record("fetch_balance", params)
        return {"total": {"USDT": 100.0}, "free": {"USDT": 80.0}, "used": {"USDT": 20.0}}

    async def fetch_and_log_balance(self, account_type="swap"):
        return await self.fetch_balance({"type": account_type})

    async def fetch_positions(self):
        self._record("fetch_positions")
        if self.fetch_delay:
            await asyncio.sleep(self.fetch_delay)
        if self.positions_error is not None:
            raise self.positions_error
        return self.positions

    async def create_market_sell_order(self, symbol, amount):
        self._record("create_market_sell_order", symbol, amount)
        if self.order_error is not None:
            raise self.order_error
        return {"id": "sell-1", "symbol": symbol, "amount": amount}

    async def create_market_buy_order(self, symbol, amount):
        self._record("create_market_buy_order", symbol, amount)
        if self.order_error is not None:
            raise self.order_error
        return {"id": "buy-1", "symbol": symbol, "amount": amount}

    async def create_order(self, symbol, type, side, amount, price=None, params=None):
        self._record("create_order", symbol, type, side, amount, price, params)
        if self.order_error is not None:
            raise self.order_error
        return {"id": "stop-1", "symbol": symbol, "type": type}

    async def close(self):
        self.closed = True


def ccxt_position(symbol, side, contracts, entry_price=None, position_id=123):
    """Shape of a ccxt unified position dict (only the fields the relay reads)."""
    return {
        "symbol": symbol,
        "side": side,
        "contracts": contracts,
        "entryPrice": entry_price,
        "info": {"positionId": position_id},
    }
