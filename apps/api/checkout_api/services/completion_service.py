import logging
import uuid
from collections.abc import Callable
from typing import NoReturn

from checkout_api.config import GatewayCredentials
from checkout_api.errors import VerificationError
from checkout_api.models.order import OrderRecord
from checkout_api.observability import log_event, metrics_store
from checkout_api.schemas.checkout import OrderView
from checkout_api.services.ledger import OrderLedger
from checkout_api.services.notification_service import NotificationContext, NotificationDispatcher
from checkout_api.services.signature import verify_signature

Scheduler = Callable[..., None]


def run_inline(func: Callable[..., None], *args, **kwargs) -> None:
    func(*args, **kwargs)


class PaymentCompletionService:
    """The only path that moves an order into ``paid``."""

    def __init__(
        self,
        ledger: OrderLedger,
        credentials: GatewayCredentials,
        dispatcher: NotificationDispatcher,
        schedule: Scheduler | None = None,
    ) -> None:
        self.ledger = ledger
        self.credentials = credentials
        self.dispatcher = dispatcher
        self.schedule = schedule or run_inline

    def complete_payment(
        self,
        gateway_order_id: str,
        gateway_payment_id: str,
        signature: str,
        ledger_order_id: uuid.UUID,
    ) -> OrderRecord:
        order_id = str(ledger_order_id)
        if not verify_signature(
            gateway_order_id, gateway_payment_id, signature, self.credentials.key_secret
        ):
            self._reject(order_id, gateway_order_id, "signature_mismatch")

        record, matched = self.ledger.try_mark_paid(
            ledger_order_id, gateway_order_id, gateway_payment_id
        )
        if not matched or record is None:
            self._reject(order_id, gateway_order_id, "ledger_guard_mismatch")

        metrics_store.increment("payments_completed_total")
        log_event("payment_completed", order_id=order_id, gateway_order_id=gateway_order_id)

        snapshot = OrderView.model_validate(record)
        self.schedule(self.dispatcher.notify_order_event, snapshot, NotificationContext())
        return record

    def _reject(self, order_id: str, gateway_order_id: str, reason: str) -> NoReturn:
        # The reason is internal only; callers always see the same error.
        metrics_store.increment("payment_verification_failed_total")
        log_event(
            "payment_verification_failed",
            level=logging.WARNING,
            order_id=order_id,
            gateway_order_id=gateway_order_id,
            reason=reason,
        )
        raise VerificationError()
