import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from checkout_api.errors import InvalidTransitionError, PersistenceError
from checkout_api.models.order import OrderRecord, OrderStatus, now_utc
from checkout_api.observability import log_event, metrics_store
from checkout_api.services.state_machine import ensure_valid_transition


@dataclass(frozen=True)
class PendingOrderDraft:
    gateway_order_id: str
    user_email: str
    shipping_address: dict
    items: list[dict]
    total_price: Decimal
    currency: str
    amount_subunits: int
    user_id: str | None = None


class OrderLedger:
    """Authoritative order records and their guarded status transitions."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def create_pending(self, draft: PendingOrderDraft) -> OrderRecord:
        if not draft.gateway_order_id:
            raise ValueError("gateway_order_id is required for a pending order")

        now = now_utc()
        record = OrderRecord(
            user_id=draft.user_id,
            user_email=draft.user_email,
            shipping_address=draft.shipping_address,
            items=draft.items,
            total_price=draft.total_price,
            currency=draft.currency,
            amount_subunits=draft.amount_subunits,
            gateway_order_id=draft.gateway_order_id,
            status=OrderStatus.PENDING,
            created_at=now,
            updated_at=now,
        )
        try:
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
        except SQLAlchemyError as err:
            self._rollback("ledger_create_failed", err, gateway_order_id=draft.gateway_order_id)
            raise PersistenceError("Could not persist pending order") from err

        metrics_store.increment("orders_created_total")
        return record

    def try_mark_paid(
        self,
        order_id: uuid.UUID,
        expected_gateway_order_id: str,
        gateway_payment_id: str | None = None,
    ) -> tuple[OrderRecord | None, bool]:
        # Single conditional UPDATE: concurrent duplicates see zero rows.
        values: dict = {"status": OrderStatus.PAID, "updated_at": now_utc()}
        if gateway_payment_id is not None:
            values["gateway_payment_id"] = gateway_payment_id

        stmt = (
            update(OrderRecord)
            .where(
                OrderRecord.id == order_id,
                OrderRecord.gateway_order_id == expected_gateway_order_id,
                OrderRecord.status == OrderStatus.PENDING,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.db.execute(stmt)
            self.db.commit()
        except SQLAlchemyError as err:
            self._rollback("ledger_mark_paid_failed", err, order_id=str(order_id))
            raise PersistenceError("Could not update order status") from err

        if (result.rowcount or 0) != 1:
            return None, False
        return self.get_order(order_id), True

    def transition_status(
        self,
        order_id: uuid.UUID,
        from_status: OrderStatus,
        to_status: OrderStatus,
    ) -> tuple[OrderRecord | None, bool]:
        if to_status == OrderStatus.PAID:
            raise InvalidTransitionError(from_status.value, to_status.value)
        ensure_valid_transition(from_status, to_status)

        stmt = (
            update(OrderRecord)
            .where(OrderRecord.id == order_id, OrderRecord.status == from_status)
            .values(status=to_status, updated_at=now_utc())
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.db.execute(stmt)
            self.db.commit()
        except SQLAlchemyError as err:
            self._rollback("ledger_transition_failed", err, order_id=str(order_id))
            raise PersistenceError("Could not update order status") from err

        if (result.rowcount or 0) != 1:
            return None, False
        return self.get_order(order_id), True

    def get_order(self, order_id: uuid.UUID) -> OrderRecord | None:
        try:
            return self.db.get(OrderRecord, order_id, populate_existing=True)
        except SQLAlchemyError as err:
            self._rollback("ledger_read_failed", err, order_id=str(order_id))
            raise PersistenceError() from err

    def list_orders_for_user(self, user_id: str) -> list[OrderRecord]:
        stmt = (
            select(OrderRecord)
            .where(OrderRecord.user_id == user_id)
            .order_by(OrderRecord.created_at.desc(), OrderRecord.id.desc())
        )
        try:
            return list(self.db.scalars(stmt).all())
        except SQLAlchemyError as err:
            self._rollback("ledger_read_failed", err)
            raise PersistenceError() from err

    def _rollback(self, message: str, err: Exception, **fields: str | None) -> None:
        self.db.rollback()
        metrics_store.increment("ledger_errors_total")
        log_event(message, level=logging.ERROR, reason=type(err).__name__, **fields)
