# tvrelay/state/models.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class SymbolFlags:
    in_trade: bool = False
    # set by the entry side (outside the webhook relay); never read here
    long_5min: bool = False
    short_5min: bool = False
    trade_info: Any = None

    def is_empty(self) -> bool:
        return self == SymbolFlags()
