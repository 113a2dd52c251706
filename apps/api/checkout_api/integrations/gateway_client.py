from typing import Protocol

import httpx
from pydantic import ValidationError

from checkout_api.config import GatewayCredentials, settings
from checkout_api.errors import (
    GatewayBadResponseError,
    GatewayRejectedError,
    GatewayTimeoutError,
    GatewayUnavailableError,
)
from checkout_api.observability import metrics_store, observe_timing
from checkout_api.schemas.gateway import GatewayOrder


class PaymentGatewayProtocol(Protocol):
    def create_order(
        self,
        amount_subunits: int,
        currency: str,
        receipt: str,
        notes: dict[str, str],
    ) -> GatewayOrder: ...


class RazorpayGatewayClient:
    """Allocate payment orders on the Razorpay orders API.

    One attempt per call. Callers decide whether a retryable failure is
    worth another checkout attempt.
    """

    def __init__(
        self,
        base_url: str,
        credentials: GatewayCredentials,
        timeout_s: float,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.credentials = credentials
        self.timeout_s = timeout_s

    def create_order(
        self,
        amount_subunits: int,
        currency: str,
        receipt: str,
        notes: dict[str, str],
    ) -> GatewayOrder:
        if not self.base_url:
            raise GatewayUnavailableError("Payment gateway base URL is not configured")

        payload = {
            "amount": amount_subunits,
            "currency": currency,
            "receipt": receipt,
            "notes": notes,
        }
        try:
            with observe_timing("gateway_create_order_seconds"):
                with httpx.Client(timeout=self.timeout_s) as client:
                    response = client.post(
                        f"{self.base_url}/v1/orders",
                        json=payload,
                        auth=(self.credentials.key_id, self.credentials.key_secret),
                    )
        except httpx.TimeoutException as err:
            metrics_store.increment("gateway_errors_total")
            raise GatewayTimeoutError() from err
        except httpx.TransportError as err:
            metrics_store.increment("gateway_errors_total")
            raise GatewayUnavailableError(str(err) or "Payment gateway unavailable") from err

        if response.status_code >= 500:
            metrics_store.increment("gateway_errors_total")
            raise GatewayUnavailableError(f"Payment gateway returned {response.status_code}")
        if response.status_code >= 400:
            metrics_store.increment("gateway_errors_total")
            raise GatewayRejectedError(f"Payment gateway returned {response.status_code}")

        try:
            return GatewayOrder.model_validate(response.json())
        except (ValueError, ValidationError) as err:
            metrics_store.increment("gateway_errors_total")
            raise GatewayBadResponseError() from err


def get_gateway_client(credentials: GatewayCredentials) -> PaymentGatewayProtocol:
    return RazorpayGatewayClient(
        base_url=settings.gateway_base_url,
        credentials=credentials,
        timeout_s=settings.gateway_timeout_s,
    )
