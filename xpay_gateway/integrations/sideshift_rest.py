from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests

from xpay_gateway.errors import SwapConfigError, SwapUpstreamError


class SideShiftRestClient:
    """Pass-through client for the SideShift v2 order/quote API."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://api.sideshift.ai/v2",
        session: Optional[Any] = None,
        timeout: float = 10.0,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.session = session or requests
        self.timeout = timeout

    def _headers(self, *, json_body: bool = False) -> Dict[str, str]:
        if not self.api_key:
            raise SwapConfigError("SideShift API key not configured")
        headers = {"x-sideshift-secret": self.api_key}
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    def _unwrap(self, response: Any, default_error: str) -> Any:
        try:
            data = response.json()
        except ValueError as exc:
            if response.ok:
                raise SwapUpstreamError(502, "Invalid response from SideShift", None) from exc
            data = None
        if not response.ok:
            message = data.get("message") if isinstance(data, dict) else None
            if isinstance(message, dict):
                message = message.get("message")
            raise SwapUpstreamError(response.status_code, str(message or default_error), data)
        return data

    def create_order(
        self,
        *,
        deposit_coin: str,
        settle_coin: str,
        deposit_amount: Optional[str] = None,
        settle_amount: Optional[str] = None,
        affiliate_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        headers = self._headers(json_body=True)
        body = {
            "type": "fixed",
            "depositCoin": deposit_coin,
            "settleCoin": settle_coin,
            "depositAmount": deposit_amount,
            "settleAmount": settle_amount,
            "affiliateId": affiliate_id,
        }
        response = self.session.post(
            f"{self.base_url}/orders",
            headers=headers,
            json={k: v for k, v in body.items() if v is not None},
            timeout=self.timeout,
        )
        return self._unwrap(response, "Failed to create swap order")

    def get_order(self, order_id: str) -> Dict[str, Any]:
        headers = self._headers()
        response = self.session.get(
            f"{self.base_url}/orders/{requests.utils.quote(order_id, safe='')}",
            headers=headers,
            timeout=self.timeout,
        )
        return self._unwrap(response, "Failed to get swap status")

    def get_quote(
        self,
        deposit_coin: str,
        settle_coin: str,
        deposit_amount: Optional[str] = None,
        settle_amount: Optional[str] = None,
        quote_type: str = "fixed",
    ) -> Dict[str, Any]:
        headers = self._headers()
        params: Dict[str, Any] = {
            "depositCoin": deposit_coin,
            "settleCoin": settle_coin,
            "type": quote_type,
        }
        if deposit_amount:
            params["depositAmount"] = deposit_amount
        if settle_amount:
            params["settleAmount"] = settle_amount
        response = self.session.get(
            f"{self.base_url}/quotes",
            headers=headers,
            params=params,
            timeout=self.timeout,
        )
        return self._unwrap(response, "Failed to get quote")

    def get_pairs(
        self,
        deposit_coin: Optional[str] = None,
        settle_coin: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        headers = self._headers()
        params: Dict[str, Any] = {}
        # settleCoin filter only applies alongside depositCoin
        if deposit_coin:
            params["depositCoin"] = deposit_coin
            if settle_coin:
                params["settleCoin"] = settle_coin
        response = self.session.get(
            f"{self.base_url}/pairs",
            headers=headers,
            params=params,
            timeout=self.timeout,
        )
        return self._unwrap(response, "Failed to get trading pairs")
