# tvrelay/alerts/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from tvrelay.core.errors import InvalidSymbol, UnsupportedMessageKind


class AlertKind(str, Enum):
    TAKE_PROFIT = "TP"
    BREAK_EVEN = "BE"


def tradable_symbol(raw: Any) -> str:
    """
    TradingView sends the chart ticker, e.g. "BTCUSDT.P".
    The tradable symbol is everything before the first dot.
    """
    if not isinstance(raw, str):
        raise InvalidSymbol("symbol missing or not a string")
    sym = raw.split(".", 1)[0].strip().upper()
    if not sym:
        raise InvalidSymbol(f"symbol {raw!r} has no tradable part")
    return sym


def bare_crypto_name(symbol: str, quote: str = "USDT") -> str:
    # "ETHUSDT" -> "ETH"; text before the first occurrence of the quote currency
    if not quote:
        return symbol
    return symbol.split(quote, 1)[0]


def alert_kind(raw: Any) -> AlertKind:
    try:
        return AlertKind(raw)
    except ValueError:
        raise UnsupportedMessageKind(f"unsupported message {raw!r}") from None


@dataclass(frozen=True)
class Alert:
    symbol: str  # tradable symbol (dot suffix removed)
    kind: AlertKind
    raw_symbol: str = ""

    @classmethod
    def from_payload(cls, body: Any) -> "Alert":
        """Validation order: symbol first, then message kind."""
        data = body if isinstance(body, dict) else {}
        raw = data.get("symbol")
        symbol = tradable_symbol(raw)
        kind = alert_kind(data.get("message"))
        return cls(symbol=symbol, kind=kind, raw_symbol=raw)


def _float_or_none(v: Any) -> Optional[float]:
    if v is None or v == "":
        return None
    try:
        return float(v)
    except (TypeError, ValueError):
        return None


@dataclass
class Position:
    symbol: str  # exchange (ccxt unified) symbol, e.g. "BTC/USDT:USDT"
    side: str  # "long" | "short"
    contracts: float
    entry_price: Optional[float] = None
    position_id: Any = None
    raw: dict = field(default_factory=dict, repr=False)

    @property
    def is_long(self) -> bool:
        return self.side == "long"

    @property
    def closing_side(self) -> str:
        return "sell" if self.is_long else "buy"

    @classmethod
    def from_ccxt(cls, p: dict) -> "Position":
        info = p.get("info") or {}
        return cls(
            symbol=str(p.get("symbol") or ""),
            side=str(p.get("side") or "").lower(),
            contracts=_float_or_none(p.get("contracts")) or 0.0,
            entry_price=_float_or_none(p.get("entryPrice")),
            position_id=info.get("positionId") if isinstance(info, dict) else None,
            raw=p,
        )


def find_position(positions: list[Position], name: str) -> Optional[Position]:
    """
    First position whose exchange symbol contains `name`.
    Substring match: "BTC" also matches any other listed symbol containing BTC.
    """
    if not name:
        return None
    for pos in positions:
        if name in pos.symbol:
            return pos
    return None
