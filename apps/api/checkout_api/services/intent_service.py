import logging
import secrets
import time
import uuid
from dataclasses import dataclass

from checkout_api.config import GatewayCredentials
from checkout_api.errors import GatewayError, PersistenceError
from checkout_api.integrations.gateway_client import PaymentGatewayProtocol
from checkout_api.observability import log_event, metrics_store
from checkout_api.schemas.checkout import OrderData
from checkout_api.services.ledger import OrderLedger, PendingOrderDraft


@dataclass(frozen=True)
class IntentResult:
    gateway_order_id: str
    ledger_order_id: uuid.UUID
    api_key_id: str
    amount_subunits: int
    currency: str


def generate_receipt() -> str:
    return f"receipt_{int(time.time() * 1000)}_{secrets.token_hex(5)[:9]}"


class OrderIntentService:
    def __init__(
        self,
        ledger: OrderLedger,
        gateway: PaymentGatewayProtocol,
        credentials: GatewayCredentials,
    ) -> None:
        self.ledger = ledger
        self.gateway = gateway
        self.credentials = credentials

    def create_intent(
        self,
        amount_subunits: int,
        currency: str,
        order_data: OrderData,
        user_id: str | None = None,
    ) -> IntentResult:
        if amount_subunits <= 0:
            raise ValueError("amount_subunits must be a positive integer")

        receipt = generate_receipt()
        notes = {"user_email": order_data.user_email, "user_id": user_id or ""}
        try:
            gateway_order = self.gateway.create_order(amount_subunits, currency, receipt, notes)
        except GatewayError as err:
            metrics_store.increment("intent_gateway_failed_total")
            log_event("intent_gateway_failed", level=logging.WARNING, reason=str(err))
            raise

        draft = PendingOrderDraft(
            gateway_order_id=gateway_order.id,
            user_id=user_id,
            user_email=order_data.user_email,
            shipping_address=order_data.shipping_address.model_dump(mode="json"),
            items=[item.model_dump(mode="json") for item in order_data.items],
            total_price=order_data.total_price,
            currency=currency,
            amount_subunits=amount_subunits,
        )
        try:
            record = self.ledger.create_pending(draft)
        except PersistenceError:
            # The gateway order exists without a ledger row; left for manual reconciliation.
            metrics_store.increment("reconciliation_required_total")
            log_event(
                "reconciliation_required",
                level=logging.ERROR,
                gateway_order_id=gateway_order.id,
                reason=f"receipt={receipt}",
            )
            raise

        metrics_store.increment("intents_created_total")
        log_event(
            "intent_created",
            order_id=str(record.id),
            gateway_order_id=record.gateway_order_id,
        )
        return IntentResult(
            gateway_order_id=record.gateway_order_id,
            ledger_order_id=record.id,
            api_key_id=self.credentials.key_id,
            amount_subunits=amount_subunits,
            currency=currency,
        )
