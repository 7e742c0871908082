"""HTTP client for the BrewOps REST backend."""

import json
import logging
from typing import Any

import httpx
from pydantic import ValidationError

from brewops_forms.api.credentials import CredentialProvider, StaticCredentials
from brewops_forms.api.envelope import ApiEnvelope
from brewops_forms.api.errors import ResponseParseError, ServerError, TransportError

logger = logging.getLogger(__name__)


class BrewOpsClient:
    """Thin JSON client over httpx with bearer-token auth.

    Every call returns an ApiEnvelope or raises one of the ApiError
    subclasses; callers never see raw httpx exceptions.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:5000",
        credentials: CredentialProvider | None = None,
        timeout: float | None = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Backend root URL.
            credentials: Token source. Defaults to an empty in-memory provider.
            timeout: Per-request timeout in seconds, None for no timeout.
            transport: Optional httpx transport (tests pass a MockTransport).
        """
        self.base_url = base_url.rstrip("/")
        self.credentials = credentials if credentials is not None else StaticCredentials()
        self._http = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    def __enter__(self) -> "BrewOpsClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = self.credentials.get_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def request(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> ApiEnvelope:
        """Send a request and unwrap the response envelope.

        Args:
            method: HTTP method.
            path: Path relative to the base URL.
            payload: JSON body.
            params: Query parameters.

        Returns:
            The decoded envelope.

        Raises:
            TransportError: If no response was received.
            ServerError: On a non-2xx status or an envelope with success=false.
            ResponseParseError: If a 2xx body is not valid JSON.
        """
        logger.debug("%s %s", method, path)
        try:
            response = self._http.request(
                method,
                path,
                json=payload,
                params=params,
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {path} failed: {e}") from e

        text = response.text
        body: Any = None
        decoded = False
        if text.strip():
            try:
                body = response.json()
                decoded = True
            except (json.JSONDecodeError, ValueError):
                decoded = False
        else:
            decoded = True

        if not response.is_success:
            raise ServerError(response.status_code, _error_message(body, text, decoded))

        if not decoded:
            raise ResponseParseError(
                f"{method} {path} returned a non-JSON body (status {response.status_code})"
            )

        try:
            envelope = ApiEnvelope.from_payload(body)
        except ValidationError as e:
            raise ResponseParseError(
                f"{method} {path} returned a malformed envelope: {e.error_count()} error(s)"
            ) from e
        if not envelope.success:
            raise ServerError(response.status_code, envelope.message)
        return envelope

    # Inventory

    def list_inventory(self) -> list[dict[str, Any]]:
        return self.request("GET", "/api/manager/inventory").items()

    def get_inventory(self, inventory_id: str | int) -> dict[str, Any]:
        return self.request("GET", f"/api/manager/inventory/{inventory_id}").data or {}

    def update_inventory(self, inventory_id: str | int, payload: dict[str, Any]) -> ApiEnvelope:
        return self.request("PUT", f"/api/manager/inventory/{inventory_id}", payload)

    # Production

    def list_production(self) -> list[dict[str, Any]]:
        return self.request("GET", "/api/manager/production").items()

    def create_production(self, payload: dict[str, Any]) -> ApiEnvelope:
        return self.request("POST", "/api/manager/production", payload)

    # Suppliers

    def list_suppliers(self) -> list[dict[str, Any]]:
        return self.request("GET", "/api/staff/suppliers").items("suppliers")

    def get_supplier(self, supplier_id: str | int) -> dict[str, Any]:
        return self.request("GET", f"/api/staff/suppliers/{supplier_id}").data or {}

    def create_supplier(self, payload: dict[str, Any]) -> ApiEnvelope:
        return self.request("POST", "/api/staff/suppliers", payload)

    def update_supplier(self, supplier_id: str | int, payload: dict[str, Any]) -> ApiEnvelope:
        return self.request("PUT", f"/api/staff/suppliers/{supplier_id}", payload)

    # Orders

    def list_orders(self, **filters: Any) -> ApiEnvelope:
        return self.request("GET", "/api/staff/orders", params=filters or None)

    def update_order_status(
        self, order_id: str | int, status: str, notes: str = ""
    ) -> ApiEnvelope:
        return self.request(
            "PUT", f"/api/staff/orders/{order_id}/status", {"status": status, "notes": notes}
        )

    def mark_order_paid(self, order_id: str | int) -> ApiEnvelope:
        return self.request(
            "PUT", f"/api/staff/orders/{order_id}/payment", {"payment_status": "paid"}
        )

    # Auth

    def send_otp(self, email: str) -> ApiEnvelope:
        return self.request("POST", "/api/users/send-otp", {"email": email})

    def reset_password(self, email: str, otp: str, new_password: str) -> ApiEnvelope:
        return self.request(
            "POST",
            "/api/users/reset-password",
            {"email": email, "otp": otp, "newPassword": new_password},
        )

    def get_profile(self) -> dict[str, Any]:
        return self.request("GET", "/api/auth/profile").data or {}

    def update_profile(self, payload: dict[str, Any]) -> ApiEnvelope:
        return self.request("PUT", "/api/auth/profile", payload)

    # Payments

    def payment_status(self, session_id: str) -> ApiEnvelope:
        return self.request("GET", f"/api/payment/status/{session_id}")


def _error_message(body: Any, text: str, decoded: bool) -> str | None:
    """Pick the most useful error message out of a failed response."""
    if decoded and isinstance(body, dict):
        for key in ("message", "error"):
            if body.get(key):
                return str(body[key])
        return None
    if not decoded and text.strip():
        return text.strip()
    return None
