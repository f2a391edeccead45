# mealcart/domain/errors.py
from __future__ import annotations


class CartSessionError(Exception):
    """Checkout-path failure with an HTTP status and a stable machine code."""

    status: int = 500
    code: str = "INTERNAL_ERROR"
    default_message: str = "Unable to build cart session."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class ValidationError(CartSessionError):
    status, code = 400, "INVALID_REQUEST"
    default_message = "Invalid request payload."


class StoreNotFoundError(CartSessionError):
    status, code = 404, "STORE_NOT_FOUND"
    default_message = "Store not found."


class UnsupportedStoreError(CartSessionError):
    status, code = 403, "UNSUPPORTED_STORE"
    default_message = "Online ordering is disabled for this store."


class MissingProviderError(CartSessionError):
    status, code = 400, "MISSING_PROVIDER"
    default_message = "Store online ordering is not configured with a provider."


class MissingProviderConfigError(CartSessionError):
    status, code = 400, "MISSING_PROVIDER_CONFIG"
    default_message = "Store is missing Target online ordering configuration."


class UnsupportedProviderError(CartSessionError):
    status, code = 400, "UNSUPPORTED_PROVIDER"
    default_message = "Store provider is not supported for online ordering."


class EmptyItemsError(CartSessionError):
    status, code = 400, "EMPTY_ITEMS"
    default_message = "No valid ingredients were provided to build a cart."


class ProviderNotConfiguredError(CartSessionError):
    status, code = 503, "PROVIDER_NOT_CONFIGURED"
    default_message = "Target cart endpoint is not configured on this server."


class ProviderUnavailableError(CartSessionError):
    status, code = 503, "PROVIDER_UNAVAILABLE"
    default_message = "Unable to reach Target cart provider."


class ProviderError(CartSessionError):
    status, code = 502, "PROVIDER_ERROR"
    default_message = "Provider rejected cart session request."


class InvalidProviderResponseError(CartSessionError):
    status, code = 502, "INVALID_PROVIDER_RESPONSE"
    default_message = "Target provider returned an invalid cart session payload."


class RateLimitedError(CartSessionError):
    status, code = 429, "RATE_LIMITED"
    default_message = "Too many cart build requests. Please try again shortly."

    def __init__(self, retry_after_ms: int, message: str | None = None) -> None:
        super().__init__(message)
        self.retry_after_ms = max(0, int(retry_after_ms))
