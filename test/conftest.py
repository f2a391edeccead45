from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pytest

from mealcart.domain.entities import (
    IncompleteOnlineOrdering,
    Ingredient,
    NoOnlineOrdering,
    Recipe,
    Store,
    TargetOrdering,
)


class FakeClock:
    def __init__(self, now: int = 1_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@dataclass
class FakeResponse:
    status_code: int
    text: str


@dataclass
class FakeHttp:
    """Stands in for requests.Session: scripted replies, recorded calls."""

    status_code: int = 200
    body: Any = None
    raises: Optional[Exception] = None
    calls: List[Dict[str, Any]] = field(default_factory=list)
    closed: bool = False

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        if self.raises is not None:
            raise self.raises
        body = self.body
        if body is None:
            body = {"sessionId": f"sess_{len(self.calls)}", "checkoutUrl": "https://www.target.com/checkout/abc123"}
        text = body if isinstance(body, str) else _dumps(body)
        return FakeResponse(self.status_code, text)

    def close(self):
        self.closed = True


def _dumps(obj: Any) -> str:
    return json.dumps(obj)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def stores() -> List[Store]:
    return [
        Store(id="st_target", name="Target", online_ordering=TargetOrdering(target_store_id="3342")),
        Store(id="st_sprouts", name="Sprouts"),
        Store(id="st_aldi", name="Aldi"),
        Store(id="st_tj", name="Trader Joe's"),
        Store(id="st_broken", name="Corner Market", online_ordering=IncompleteOnlineOrdering(provider="target")),
        Store(id="st_off", name="Farm Stand", online_ordering=NoOnlineOrdering()),
    ]


@pytest.fixture
def taco_bowls() -> Recipe:
    return Recipe(
        id="r_taco",
        title="Turkey Taco Bowls",
        servings=4,
        ingredients=[
            Ingredient(name="Ground turkey", qty=1.25, unit="lb", store="Sprouts"),
            Ingredient(name="Jasmine rice", qty=2, unit="cups", store="Target"),
            Ingredient(name="Black beans", qty=1, unit="can", store="Aldi"),
            Ingredient(name="Salsa", qty=1, unit="jar", store="Target"),
            Ingredient(name="Salt", qty=1, unit="tsp", store="Target"),
        ],
        tags=["30-min", "high-protein", "kid-friendly"],
    )


@pytest.fixture
def pesto_salmon() -> Recipe:
    return Recipe(
        id="r_pesto",
        title="Pesto Pasta + Salmon",
        servings=4,
        ingredients=[
            Ingredient(name="Salmon fillet", qty=1.25, unit="lb", store="Trader Joe's"),
            Ingredient(name="Pasta", qty=16, unit="ounces", store="Aldi"),
            Ingredient(name="Pesto", qty=1, unit="jar", store="Trader Joe's"),
            Ingredient(name="Parmesan", qty=None, unit="oz", store="Target"),
        ],
        tags=["35-min", "omega-3"],
    )
