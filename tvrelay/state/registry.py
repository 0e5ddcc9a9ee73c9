# tvrelay/state/registry.py
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import replace
from typing import Any, AsyncIterator, Dict

from tvrelay.state.models import SymbolFlags

log = logging.getLogger("tvrelay.state")


def _key(symbol: str) -> str:
    return (symbol or "").strip().upper()


class TradeStateRegistry:
    """
    In-memory trade flags per symbol. Lost on restart.

    Mutations for one symbol are serialized through `guard()`; callers that
    read-then-act (dispatcher) must hold it for the whole sequence.
    """

    def __init__(self) -> None:
        self._flags: Dict[str, SymbolFlags] = {}
        self._symbol_locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}

    def get(self, symbol: str) -> SymbolFlags:
        # unknown symbols read as empty flags and are not stored
        st = self._flags.get(_key(symbol))
        return st if st is not None else SymbolFlags()

    def reset(self, symbol: str) -> None:
        sym = _key(symbol)
        self._flags[sym] = SymbolFlags(
            in_trade=False,
            long_5min=False,
            short_5min=False,
            trade_info=None,
        )
        log.info("trade flags reset for %s", sym)

    def mark_in_trade(
        self,
        symbol: str,
        *,
        long_5min: bool = False,
        short_5min: bool = False,
        trade_info: Any = None,
    ) -> SymbolFlags:
        sym = _key(symbol)
        st = SymbolFlags(
            in_trade=True,
            long_5min=long_5min,
            short_5min=short_5min,
            trade_info=trade_info,
        )
        self._flags[sym] = st
        log.info("trade flags set in_trade for %s", sym)
        return st

    def snapshot(self) -> Dict[str, SymbolFlags]:
        return {sym: replace(st) for sym, st in self._flags.items()}

    @asynccontextmanager
    async def guard(self, symbol: str) -> AsyncIterator[None]:
        """Hold the per-symbol lock; dropped once no task holds or waits on it."""
        sym = _key(symbol)
        lock = self._symbol_locks.get(sym)
        if lock is None:
            lock = self._symbol_locks[sym] = asyncio.Lock()
        self._lock_users[sym] = self._lock_users.get(sym, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[sym] -= 1
            if self._lock_users[sym] == 0:
                del self._lock_users[sym]
                del self._symbol_locks[sym]
