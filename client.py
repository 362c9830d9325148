"""Thin JSON client for the finance tracker API.

Every failure is raised as ``APIClientError`` carrying a ``user_message``
suitable for display, derived from the HTTP status code.
"""
import logging
import time
from typing import Any, Dict, List, Mapping, Optional

import httpx
from fastapi.encoders import jsonable_encoder

from validation import validate_transaction_payload

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_TIMEOUT = 10.0

NETWORK_ERROR_MESSAGE = "Network error. Please check your connection and try again."
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred."

_STATUS_MESSAGES = {
    401: "Authentication required. Please log in.",
    403: "Access denied. You don't have permission for this action.",
    404: "The requested resource was not found.",
    422: "Validation failed. Please check your input.",
    500: "Server error. Please try again later.",
}


class APIClientError(Exception):
    def __init__(self, user_message: str, status_code: Optional[int] = None, payload: Any = None):
        super().__init__(user_message)
        self.user_message = user_message
        self.status_code = status_code
        self.payload = payload

    @property
    def is_network_error(self) -> bool:
        return self.status_code is None

    def field_errors(self) -> Dict[str, str]:
        """Map field name to message for a validation error response."""
        if not isinstance(self.payload, dict):
            return {}
        return {
            error.get("field", ""): error.get("message", "")
            for error in self.payload.get("errors") or []
            if isinstance(error, dict)
        }


def user_message_for(status_code: int, payload: Any) -> str:
    server_message = payload.get("message") if isinstance(payload, dict) else None
    if status_code == 400:
        return server_message or "Invalid request. Please check your input."
    if status_code in _STATUS_MESSAGES:
        return _STATUS_MESSAGES[status_code]
    return server_message or UNEXPECTED_ERROR_MESSAGE


def clean_params(params: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Drop None and empty-string values so they do not reach the query string."""
    if not params:
        return {}
    return {key: value for key, value in params.items() if value is not None and value != ""}


class TransactionAPIClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        api_prefix: str = "/api",
        http_client: Optional[httpx.Client] = None,
    ):
        self.api_prefix = api_prefix.rstrip("/")
        self._client = http_client or httpx.Client(
            base_url=base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.api_prefix}{path}"
        started = time.perf_counter()
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.TransportError as exc:
            logger.warning("api_request_failed method=%s url=%s error=%s", method, url, exc)
            raise APIClientError(NETWORK_ERROR_MESSAGE) from exc

        duration_ms = (time.perf_counter() - started) * 1000
        logger.debug(
            "api_response method=%s url=%s status_code=%s duration_ms=%.1f",
            method, url, response.status_code, duration_ms,
        )

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.is_error:
            raise APIClientError(user_message_for(response.status_code, payload), response.status_code, payload)
        return payload

    def list(self, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return self._request("GET", "/transactions", params=clean_params(params))

    def get(self, transaction_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/transactions/{transaction_id}")

    def _body(self, data: Mapping[str, Any], validate: bool) -> Dict[str, Any]:
        if validate:
            return validate_transaction_payload(data).model_dump(mode="json")
        return jsonable_encoder(dict(data))

    def create(self, data: Mapping[str, Any], validate: bool = True) -> Dict[str, Any]:
        return self._request("POST", "/transactions", json=self._body(data, validate))

    def update(self, transaction_id: str, data: Mapping[str, Any], validate: bool = True) -> Dict[str, Any]:
        return self._request("PUT", f"/transactions/{transaction_id}", json=self._body(data, validate))

    def delete(self, transaction_id: str) -> Dict[str, Any]:
        return self._request("DELETE", f"/transactions/{transaction_id}")

    def categories(self) -> List[str]:
        return self._request("GET", "/categories")

    def health(self) -> Dict[str, Any]:
        return self._request("GET", "/health")
