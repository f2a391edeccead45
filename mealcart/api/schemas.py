# mealcart/api/schemas.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class CartItemIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    qty: Optional[float] = Field(default=None, gt=0, allow_inf_nan=False)
    unit: str = Field(default="", max_length=32)

    @field_validator("name", "unit", mode="before")
    @classmethod
    def _strip(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v


class CartSessionRequest(BaseModel):
    storeId: str = Field(..., min_length=1, max_length=128, examples=["store_target_1"])
    items: List[CartItemIn] = Field(..., min_length=1, max_length=400)

    @field_validator("storeId", mode="before")
    @classmethod
    def _strip_store(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v


class UnmatchedItemOut(BaseModel):
    name: str
    qty: Optional[float] = None
    unit: str
    reason: str


class CartSessionResponse(BaseModel):
    provider: str
    sessionId: str
    checkoutUrl: str
    unmatchedItems: List[UnmatchedItemOut]


class ErrorResponse(BaseModel):
    error: str
    code: Optional[str] = None
    retryAfterMs: Optional[int] = None


class GroceryItemOut(BaseModel):
    name: str
    unit: str
    storeId: Optional[str] = None
    store: str
    qty: Optional[float] = None


class StoreBucketOut(BaseModel):
    storeId: Optional[str] = None
    store: str
    count: int
    items: List[GroceryItemOut]


class GroceryListResponse(BaseModel):
    start: str
    end: str
    stores: List[StoreBucketOut]


class PlanBalanceResponse(BaseModel):
    start: str
    end: str
    balance: Dict[str, Any]
