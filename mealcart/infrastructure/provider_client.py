# mealcart/infrastructure/provider_client.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

import requests

from mealcart.domain.entities import CartSessionItem, Store
from mealcart.domain.errors import ProviderUnavailableError

log = logging.getLogger("infra.provider_client")


@dataclass(frozen=True)
class ProviderReply:
    status_code: int
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class TargetCartClient:
    """Thin HTTP client for the Target cart-session connector. One POST, no retries."""

    def __init__(
        self,
        endpoint: str,
        api_key: Optional[str] = None,
        timeout_ms: int = 10_000,
        session: Any = None,
    ) -> None:
        self.endpoint = endpoint
        self.api_key = api_key
        self.timeout_s = max(1, int(timeout_ms)) / 1000.0
        self._http = session or requests.Session()

    def create_session(self, store: Store, target_store_id: str, items: List[CartSessionItem]) -> ProviderReply:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        payload = {
            "store": {"id": store.id, "name": store.name, "targetStoreId": target_store_id},
            "items": [i.to_dict() for i in items],
        }
        try:
            r = self._http.post(self.endpoint, json=payload, headers=headers, timeout=self.timeout_s)
        except requests.RequestException as e:
            log.warning("Target cart provider unreachable (%s): %s", type(e).__name__, e)
            raise ProviderUnavailableError() from e
        return ProviderReply(status_code=int(r.status_code), text=r.text or "")

    def close(self) -> None:
        close = getattr(self._http, "close", None)
        if callable(close):
            close()
