# mealcart/application/provider_response.py
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, List, Optional, Union

from pydantic import AnyHttpUrl, BaseModel, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

_URL = TypeAdapter(AnyHttpUrl)


class ProviderUnmatchedItem(BaseModel):
    name: str = Field(min_length=1)
    qty: Optional[float] = Field(default=None, gt=0, allow_inf_nan=False, strict=True)
    unit: Optional[str] = Field(default=None, max_length=64)
    reason: Optional[str] = Field(default=None, max_length=200)

    @field_validator("name", "unit", "reason", mode="before")
    @classmethod
    def _strip(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v


class ProviderSessionPayload(BaseModel):
    sessionId: str = Field(min_length=1)
    checkoutUrl: str
    unmatchedItems: Optional[List[ProviderUnmatchedItem]] = None

    @field_validator("sessionId", mode="before")
    @classmethod
    def _strip_session(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("checkoutUrl", mode="before")
    @classmethod
    def _well_formed_url(cls, v: Any) -> Any:
        if not isinstance(v, str):
            return v
        v = v.strip()
        try:
            _URL.validate_python(v)
        except PydanticValidationError:
            raise ValueError("checkoutUrl is not a well-formed http(s) URL")
        return v


# ----------------------------
# Tagged parse result
# ----------------------------
@dataclass(frozen=True)
class ParsedSession:
    payload: ProviderSessionPayload
    ok: bool = True


@dataclass(frozen=True)
class ParseFailure:
    reason: str
    ok: bool = False


ParseResult = Union[ParsedSession, ParseFailure]


def parse_json_body(raw: str) -> Any:
    """Best-effort JSON decode; None for empty or undecodable bodies."""
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return None


def parse_provider_response(raw: str) -> ParseResult:
    data = parse_json_body(raw)
    if not isinstance(data, dict):
        return ParseFailure("body is not a JSON object")
    try:
        return ParsedSession(ProviderSessionPayload.model_validate(data))
    except PydanticValidationError as e:
        return ParseFailure(f"{e.error_count()} schema violation(s): {e.errors()[0].get('msg', '')}")


def provider_error_message(raw: str) -> Optional[str]:
    data = parse_json_body(raw)
    if isinstance(data, dict) and isinstance(data.get("error"), str) and data["error"].strip():
        return data["error"].strip()
    return None
