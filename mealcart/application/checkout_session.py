# mealcart/application/checkout_session.py
from __future__ import annotations

import json
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from mealcart.application.normalize import collation_key
from mealcart.application.provider_response import (
    ParseFailure,
    parse_provider_response,
    provider_error_message,
)
from mealcart.domain.entities import (
    TARGET_PROVIDER,
    CartSessionItem,
    CartSessionResult,
    IncompleteOnlineOrdering,
    NoOnlineOrdering,
    Store,
    TargetOrdering,
    UnmatchedItem,
)
from mealcart.domain.errors import (
    EmptyItemsError,
    InvalidProviderResponseError,
    MissingProviderConfigError,
    MissingProviderError,
    ProviderError,
    ProviderNotConfiguredError,
    UnsupportedProviderError,
    UnsupportedStoreError,
)
from mealcart.infrastructure.provider_client import TargetCartClient
from mealcart.infrastructure.session_cache import CartSessionCache

log = logging.getLogger("app.checkout_session")

DEFAULT_UNMATCHED_REASON = "No product match found."


# ----------------------------
# Item normalization & cache key
# ----------------------------
def normalize_cart_items(items: Iterable[CartSessionItem]) -> List[CartSessionItem]:
    """Trim, drop nameless items, merge (name, unit) case-insensitively; unknown qty wins."""
    merged: Dict[Tuple[str, str], CartSessionItem] = {}
    for item in items:
        name = (item.name or "").strip()
        if not name:
            continue
        unit = (item.unit or "").strip()
        key = (name.lower(), unit.lower())
        prev = merged.get(key)
        if prev is None:
            merged[key] = CartSessionItem(name=name, qty=item.qty, unit=unit)
        elif prev.qty is None or item.qty is None:
            merged[key] = CartSessionItem(name=prev.name, qty=None, unit=prev.unit)
        else:
            merged[key] = CartSessionItem(name=prev.name, qty=prev.qty + item.qty, unit=prev.unit)
    return sorted(merged.values(), key=lambda i: (collation_key(i.name), collation_key(i.unit)))


def cart_cache_key(store_id: str, provider_store_id: str, items: List[CartSessionItem]) -> str:
    return json.dumps(
        {
            "storeId": store_id,
            "providerStoreId": provider_store_id,
            "items": [
                {"name": i.name.lower(), "qty": None if i.qty is None else float(i.qty), "unit": i.unit.lower()}
                for i in items
            ],
        },
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )


def resolve_target(store: Store) -> TargetOrdering:
    ordering = store.online_ordering
    if isinstance(ordering, NoOnlineOrdering) or not ordering.enabled:
        raise UnsupportedStoreError()
    if isinstance(ordering, IncompleteOnlineOrdering):
        if not ordering.provider:
            raise MissingProviderError()
        if ordering.provider != TARGET_PROVIDER:
            raise UnsupportedProviderError()
        raise MissingProviderConfigError()
    if isinstance(ordering, TargetOrdering):
        return ordering
    raise UnsupportedProviderError()


# ----------------------------
# Builder
# ----------------------------
class CheckoutSessionBuilder:
    """store + items -> provider checkout session (cached), or a typed CartSessionError."""

    def __init__(self, client: Optional[TargetCartClient], cache: CartSessionCache) -> None:
        self.client = client
        self.cache = cache

    def create(self, store: Store, items: Iterable[CartSessionItem]) -> CartSessionResult:
        target = resolve_target(store)
        if self.client is None:
            raise ProviderNotConfiguredError()

        normalized = normalize_cart_items(items)
        if not normalized:
            raise EmptyItemsError()

        key = cart_cache_key(store.id, target.target_store_id, normalized)
        cached = self.cache.get(key)
        if cached is not None:
            log.info("Cart session cache hit for store %s (%d items)", store.id, len(normalized))
            return cached

        reply = self.client.create_session(store, target.target_store_id, normalized)
        if not reply.ok:
            log.warning("Target cart provider rejected request: HTTP %s", reply.status_code)
            raise ProviderError(provider_error_message(reply.text))

        parsed = parse_provider_response(reply.text)
        if isinstance(parsed, ParseFailure):
            log.warning("Target cart provider returned invalid payload: %s", parsed.reason)
            raise InvalidProviderResponseError()

        payload = parsed.payload
        result = CartSessionResult(
            provider=TARGET_PROVIDER,
            session_id=payload.sessionId,
            checkout_url=payload.checkoutUrl,
            unmatched_items=[
                UnmatchedItem(
                    name=u.name,
                    qty=u.qty,
                    unit=u.unit or "",
                    reason=u.reason or DEFAULT_UNMATCHED_REASON,
                )
                for u in (payload.unmatchedItems or [])
            ],
        )
        self.cache.put(key, result)
        return result
