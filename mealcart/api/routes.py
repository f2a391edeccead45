# mealcart/api/routes.py
from __future__ import annotations

import logging
import math
from datetime import date
from typing import Any, List, Optional

import anyio
from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse
from pydantic import ValidationError as PydanticValidationError

from mealcart.api.schemas import (
    CartSessionRequest,
    CartSessionResponse,
    ErrorResponse,
    GroceryListResponse,
    PlanBalanceResponse,
)
from mealcart.domain.entities import CartSessionItem
from mealcart.domain.errors import CartSessionError, RateLimitedError, StoreNotFoundError

log = logging.getLogger("api.routes")
router = APIRouter()


# -------------------------
# Dependencies via app.state
# -------------------------
def _state(request: Request, name: str) -> Any:
    value = getattr(request.app.state, name, None)
    if value is None:
        raise RuntimeError(f"{name} not initialized. Check app startup wiring.")
    return value


def get_rate_limiter(request: Request):
    return _state(request, "rate_limiter")


def get_create_cart_session(request: Request):
    return _state(request, "create_cart_session")


def get_build_grocery_list(request: Request):
    return _state(request, "build_grocery_list")


def get_export_grocery_list(request: Request):
    return _state(request, "export_grocery_list")


def get_summarize_plan(request: Request):
    return _state(request, "summarize_plan")


# -------------------------
# Error helpers
# -------------------------
def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = (request.headers.get("x-real-ip") or "").strip()
    if real_ip:
        return real_ip
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def _validation_message(errors: List[dict]) -> str:
    if not errors:
        return "Invalid request payload."
    first = errors[0]
    loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    msg = first.get("msg", "invalid value")
    return f"{loc}: {msg}" if loc else msg


def error_response(err: CartSessionError) -> JSONResponse:
    if isinstance(err, StoreNotFoundError):
        return JSONResponse(status_code=err.status, content={"error": err.message})
    body = {"error": err.message, "code": err.code}
    headers = None
    if isinstance(err, RateLimitedError):
        body["retryAfterMs"] = err.retry_after_ms
        headers = {"Retry-After": str(math.ceil(err.retry_after_ms / 1000))}
    return JSONResponse(status_code=err.status, content=body, headers=headers)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def _bad_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": _validation_message(list(exc.errors()))})


# -------------------------
# /shopping/cart-session
# -------------------------
@router.post(
    "/shopping/cart-session",
    response_model=CartSessionResponse,
    responses={s: {"model": ErrorResponse} for s in (400, 403, 404, 429, 502, 503)},
)
async def create_cart_session(
    request: Request,
    limiter=Depends(get_rate_limiter),
    create_session=Depends(get_create_cart_session),
) -> Any:
    decision = limiter.check(f"shopping-cart:{client_ip(request)}")
    if not decision.allowed:
        log.info("Rate limited cart session request from %s", client_ip(request))
        return error_response(RateLimitedError(decision.retry_after_ms))

    try:
        raw = await request.json()
    except ValueError:
        return JSONResponse(status_code=400, content={"error": "Request body must be valid JSON."})
    try:
        payload = CartSessionRequest.model_validate(raw)
    except PydanticValidationError as e:
        return JSONResponse(status_code=400, content={"error": _validation_message(e.errors())})

    items = [CartSessionItem(name=i.name, qty=i.qty, unit=i.unit) for i in payload.items]
    try:
        # blocking provider call runs in a worker thread
        result = await anyio.to_thread.run_sync(create_session, payload.storeId, items)
    except CartSessionError as e:
        return error_response(e)
    except Exception:
        log.exception("Processing /shopping/cart-session error")
        return JSONResponse(status_code=500, content={"error": "Unexpected error while building cart session."})
    return result.to_dict()


# -------------------------
# /grocery-list
# -------------------------
@router.get("/grocery-list", response_model=GroceryListResponse)
def grocery_list(
    start: date = Query(...),
    end: date = Query(...),
    build=Depends(get_build_grocery_list),
) -> Any:
    grocery = build(start.isoformat(), end.isoformat())
    return {"start": start.isoformat(), "end": end.isoformat(), **grocery.to_dict()}


@router.get("/grocery-list/export")
def grocery_list_export(
    start: date = Query(...),
    end: date = Query(...),
    format: str = Query("text", pattern="^(text|html)$"),
    stores: Optional[List[str]] = Query(None),
    export=Depends(get_export_grocery_list),
) -> Any:
    if format == "html":
        return HTMLResponse(export.html(start.isoformat(), end.isoformat(), stores))
    return PlainTextResponse(export.text(start.isoformat(), end.isoformat(), stores))


@router.get("/plan/balance", response_model=PlanBalanceResponse)
def plan_balance(
    start: date = Query(...),
    end: date = Query(...),
    summarize=Depends(get_summarize_plan),
) -> Any:
    return {"start": start.isoformat(), "end": end.isoformat(), "balance": summarize(start.isoformat(), end.isoformat())}
