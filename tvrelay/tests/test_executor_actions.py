import asyncio

import pytest

from tvrelay.alerts.models import Position
from tvrelay.core.errors import AdapterFailure, MissingEntryPrice
from tvrelay.execution.executor import ActionExecutor
from tvrelay.state.registry import TradeStateRegistry
from tvrelay.tests.fakes import FakeExchangeClient, ccxt_position


def _setup(**client_kwargs):
    client = FakeExchangeClient(**client_kwargs)
    reg = TradeStateRegistry()
    reg.mark_in_trade("BTCUSDT", short_5min=True, trade_info={"id": 7})
    return client, reg, ActionExecutor(client, reg)


def test_take_profit_long_sells_full_size_and_resets():
    client, reg, ex = _setup()
    pos = Position.from_ccxt(ccxt_position("BTC/USDT:USDT", "long", 4, 60000))

    r = asyncio.run(ex.take_profit("BTCUSDT", pos))

    assert r.action == "TAKE_PROFIT_CLOSED"
    assert client.order_calls() == [("create_market_sell_order", ("BTCUSDT", 4.0))]
    assert reg.get("BTCUSDT").is_empty()


def test_take_profit_short_buys_full_size():
    client, reg, ex = _setup()
    pos = Position.from_ccxt(ccxt_position("BTC/USDT:USDT", "short", 2.5, 60000))

    r = asyncio.run(ex.take_profit("BTCUSDT", pos))

    assert r.details["order_side"] == "buy"
    assert client.order_calls() == [("create_market_buy_order", ("BTCUSDT", 2.5))]
    assert reg.get("BTCUSDT").in_trade is False


def test_take_profit_order_failure_keeps_trade_flags():
    client, reg, ex = _setup(order_error=AdapterFailure("insufficient margin"))
    pos = Position.from_ccxt(ccxt_position("BTC/USDT:USDT", "long", 1, 60000))

    with pytest.raises(AdapterFailure):
        asyncio.run(ex.take_profit("BTCUSDT", pos))

    assert reg.get("BTCUSDT").in_trade is True


def test_break_even_places_stop_limit_at_entry():
    client, reg, ex = _setup()
    pos = Position.from_ccxt(ccxt_position("BTC/USDT:USDT", "long", 3, 61234.5, 555))

    r = asyncio.run(ex.break_even("BTCUSDT", pos))

    assert r.action == "STOP_MOVED_TO_BREAK_EVEN"
    calls = client.order_calls()
    assert len(calls) == 1
    name, (symbol, type_, side, amount, price, params) = calls[0]
    assert name == "create_order"
    assert symbol == "BTC/USDT:USDT"
    assert type_ == "stop_limit"
    assert side == "sell"
    assert amount == 3.0
    assert price == 61234.5
    assert params == {
        "stopPrice": 61234.5,
        "positionId": 555,
        "triggerType": "mark_price",
        "stopType": "full",
    }
    # position is still open
    assert reg.get("BTCUSDT").in_trade is True
    assert reg.get("BTCUSDT").trade_info == {"id": 7}


def test_break_even_short_uses_abs_contracts_and_buy_side():
    client, reg, ex = _setup()
    pos = Position.from_ccxt(ccxt_position("BTC/USDT:USDT", "short", -2, 59000))

    asyncio.run(ex.break_even("BTCUSDT", pos))

    _, (_, _, side, amount, _, _) = client.order_calls()[0]
    assert side == "buy"
    assert amount == 2.0


@pytest.mark.parametrize("entry", [None, 0])
def test_break_even_without_entry_price_places_nothing(entry):
    client, reg, ex = _setup()
    pos = Position.from_ccxt(ccxt_position("BTC/USDT:USDT", "long", 3, entry))

    with pytest.raises(MissingEntryPrice):
        asyncio.run(ex.break_even("BTCUSDT", pos))

    assert client.order_calls() == []
    assert reg.get("BTCUSDT").in_trade is True
