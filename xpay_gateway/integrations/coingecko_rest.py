from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests


class CoinGeckoRestClient:
    """Public market-data client: top markets by cap, markets by id, text search."""

    def __init__(
        self,
        base_url: str = "https://api.coingecko.com/api/v3",
        session: Optional[Any] = None,
        timeout: float = 10.0,
        vs_currency: str = "usd",
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests
        self.timeout = timeout
        self.vs_currency = vs_currency

    def _get(self, path: str, params: Dict[str, Any]) -> Any:
        response = self.session.get(
            f"{self.base_url}{path}",
            headers={"accept": "application/json"},
            params=params,
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    def _markets(self, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        payload = self._get(
            "/coins/markets",
            {"vs_currency": self.vs_currency, **params, "price_change_percentage": "24h"},
        )
        if not isinstance(payload, list):
            raise ValueError("markets payload must be a list")
        return [row for row in payload if isinstance(row, dict)]

    def get_markets_page(self, page: int, per_page: int = 250) -> List[Dict[str, Any]]:
        return self._markets({"order": "market_cap_desc", "per_page": per_page, "page": page})

    def get_markets_by_ids(self, ids: List[str]) -> List[Dict[str, Any]]:
        if not ids:
            return []
        return self._markets({"ids": ",".join(ids)})

    def search(self, query: str) -> List[Dict[str, Any]]:
        payload = self._get("/search", {"query": query})
        if not isinstance(payload, dict):
            raise ValueError("search payload must be an object")
        coins = payload.get("coins") or []
        return [c for c in coins if isinstance(c, dict)]
