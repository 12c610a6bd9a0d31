from __future__ import annotations

import asyncio
import math
import time
from typing import Any

from xpay_gateway.errors import SymbolNotFoundError
from xpay_gateway.schemas.price import TokenPriceSnapshot

STATE_EMPTY = "EMPTY"
STATE_LOADING = "LOADING"
STATE_READY = "READY"


def _parse_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    # "nan" / "inf" parse but are not prices
    return number if math.isfinite(number) else None


def _to_float_default(value: Any, default: float = 0.0) -> float:
    number = _parse_float(value)
    return default if number is None else number


def _symbol_of(row: dict) -> str:
    return str(row.get("symbol") or "").strip().upper()


def build_snapshot(row: dict, previous: TokenPriceSnapshot | None = None) -> TokenPriceSnapshot:
    """Market row -> snapshot; missing fields fall back to ``previous`` then zero."""
    symbol = _symbol_of(row) or (previous.symbol if previous else "")
    prev_price = previous.price if previous else 0.0
    prev_change = previous.change_24h if previous else 0.0
    prev_cap = previous.market_cap if previous else 0.0
    return TokenPriceSnapshot(
        symbol=symbol,
        price=max(_to_float_default(row.get("current_price"), prev_price), 0.0),
        change_24h=_to_float_default(row.get("price_change_percentage_24h"), prev_change),
        market_cap=max(_to_float_default(row.get("market_cap"), prev_cap), 0.0),
        name=str(row.get("name") or (previous.name if previous else None) or symbol),
        image=str(row.get("image") or (previous.image if previous else None) or ""),
    )


class PriceFeed:
    """Symbol -> last known market snapshot, preloaded once and refreshed on a timer.

    All mutation happens on the event loop thread; blocking HTTP calls run in
    worker threads through ``asyncio.to_thread``.
    """

    def __init__(
        self,
        rest_client,
        *,
        preload_pages: int = 2,
        per_page: int = 250,
        refresh_interval_sec: float = 15.0,
    ) -> None:
        self.rest_client = rest_client
        self.preload_pages = preload_pages
        self.per_page = per_page
        self.refresh_interval_sec = refresh_interval_sec

        self.prices: dict[str, TokenPriceSnapshot] = {}
        self.symbol_index: dict[str, str] = {}
        self.loading = False
        self.state = STATE_EMPTY

        self._closed = False
        self._preload_task: asyncio.Task | None = None
        self._refresh_task: asyncio.Task | None = None
        self._tick_tasks: set[asyncio.Task] = set()

        self.refresh_ticks = 0
        self.refresh_skipped = 0
        self.refresh_failures = 0
        self.refresh_updates = 0
        self.resolve_hits = 0
        self.resolve_misses = 0
        self.last_refresh_ts: int | None = None

    @property
    def closed(self) -> bool:
        return self._closed

    async def preload(self) -> None:
        prior_state = self.state
        self.loading = True
        self.state = STATE_LOADING
        try:
            pages = await asyncio.gather(
                *(
                    asyncio.to_thread(self.rest_client.get_markets_page, page, self.per_page)
                    for page in range(1, self.preload_pages + 1)
                )
            )
            if self._closed:
                self.state = prior_state
                return

            next_prices: dict[str, TokenPriceSnapshot] = {}
            next_index: dict[str, str] = {}
            for rows in pages:
                for row in rows:
                    symbol = _symbol_of(row)
                    if not symbol or symbol in next_prices:
                        continue
                    next_prices[symbol] = build_snapshot(row)
                    if row.get("id"):
                        next_index[symbol] = str(row["id"])

            # symbols resolved while the pages were in flight survive the swap
            for symbol, snap in self.prices.items():
                if symbol not in next_prices:
                    next_prices[symbol] = snap
                    if symbol in self.symbol_index:
                        next_index[symbol] = self.symbol_index[symbol]

            self.prices = next_prices
            self.symbol_index = next_index
            self.state = STATE_READY
            print(
                f"[PRICE][preload_done] pages={self.preload_pages} symbols={len(next_prices)} "
                f"indexed={len(next_index)}",
                flush=True,
            )
        except asyncio.CancelledError:
            self.state = prior_state
            raise
        except Exception as exc:
            self.state = prior_state
            print(f"[PRICE][preload_error] error={exc!r}", flush=True)
        finally:
            self.loading = False

    def _tracked_ids(self) -> list[str]:
        return [self.symbol_index[s] for s in self.prices if s in self.symbol_index]

    async def refresh(self) -> int:
        """One refresh tick; returns the number of snapshots overwritten."""
        self.refresh_ticks += 1
        ids = self._tracked_ids()
        if not ids:
            self.refresh_skipped += 1
            return 0

        try:
            rows = await asyncio.to_thread(self.rest_client.get_markets_by_ids, ids)
            if self._closed:
                return 0

            # a bad row discards the whole tick
            staged: dict[str, TokenPriceSnapshot] = {}
            for row in rows:
                symbol = _symbol_of(row)
                previous = self.prices.get(symbol)
                if previous is None:
                    continue
                staged[symbol] = build_snapshot(row, previous)
        except Exception as exc:
            self.refresh_failures += 1
            print(f"[PRICE][refresh_error] ids={len(ids)} error={exc!r}", flush=True)
            return 0

        self.prices.update(staged)
        self.refresh_updates += len(staged)
        self.last_refresh_ts = int(time.time())
        return len(staged)

    def _spawn_tick(self) -> asyncio.Task:
        task = asyncio.create_task(self.refresh())
        self._tick_tasks.add(task)
        task.add_done_callback(self._tick_tasks.discard)
        return task

    async def run_refresh_loop(self) -> None:
        # ticks are not awaited, so a slow request can overlap the next one
        while not self._closed:
            await asyncio.sleep(self.refresh_interval_sec)
            if self._closed:
                break
            self._spawn_tick()

    async def resolve_and_add(self, symbol_input: str) -> str | None:
        sym = (symbol_input or "").strip().upper()
        if not sym:
            return None
        if sym in self.prices:
            return sym

        try:
            coins = await asyncio.to_thread(self.rest_client.search, sym)
            exact = next((c for c in coins if _symbol_of(c) == sym), None)
            pick = exact or (coins[0] if coins else None)
            if not pick or not pick.get("id"):
                self.resolve_misses += 1
                return None

            coin_id = str(pick["id"])
            market = await asyncio.to_thread(self.rest_client.get_markets_by_ids, [coin_id])
            row = market[0] if market else None
            if row is None or _parse_float(row.get("current_price")) is None:
                self.resolve_misses += 1
                return None

            resolved = _symbol_of(row) or _symbol_of(pick) or sym
            snap = build_snapshot({**row, "symbol": resolved})
        except Exception as exc:
            self.resolve_misses += 1
            print(f"[PRICE][resolve_error] symbol={sym} error={exc!r}", flush=True)
            return None

        if self._closed:
            return None

        self.prices[resolved] = snap
        self.symbol_index[resolved] = coin_id
        if self.state == STATE_EMPTY:
            self.state = STATE_READY
        self.resolve_hits += 1
        print(f"[PRICE][resolve_added] input={sym} symbol={resolved} id={coin_id}", flush=True)
        return resolved

    def get_price(self, symbol: str) -> TokenPriceSnapshot | None:
        return self.prices.get(str(symbol).strip().upper())

    def require_price(self, symbol: str) -> TokenPriceSnapshot:
        snap = self.get_price(symbol)
        if snap is None:
            raise SymbolNotFoundError(str(symbol).strip().upper())
        return snap

    def snapshot(self) -> dict[str, TokenPriceSnapshot]:
        return dict(self.prices)

    def start(self) -> None:
        """Kick off preload and the refresh timer on the running loop."""
        if self._refresh_task is not None:
            return
        self._closed = False
        self._preload_task = asyncio.create_task(self.preload())
        self._refresh_task = asyncio.create_task(self.run_refresh_loop())
        print(f"[PRICE][feed_start] interval_sec={self.refresh_interval_sec}", flush=True)

    async def close(self) -> None:
        self._closed = True
        tasks = [t for t in (self._preload_task, self._refresh_task, *self._tick_tasks) if t is not None]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._preload_task = None
        self._refresh_task = None
        self._tick_tasks.clear()
        self.loading = False
        print("[PRICE][feed_stop]", flush=True)

    def metrics(self) -> dict:
        return {
            "state": self.state,
            "loading": self.loading,
            "tracked_symbols": len(self.prices),
            "indexed_symbols": len(self.symbol_index),
            "refresh_ticks": self.refresh_ticks,
            "refresh_skipped": self.refresh_skipped,
            "refresh_failures": self.refresh_failures,
            "refresh_updates": self.refresh_updates,
            "refresh_in_flight": len(self._tick_tasks),
            "resolve_hits": self.resolve_hits,
            "resolve_misses": self.resolve_misses,
            "last_refresh_ts": self.last_refresh_ts,
        }
