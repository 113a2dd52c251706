import uuid
from decimal import Decimal

import pytest

from checkout_api.config import NotificationSettings
from checkout_api.errors import VerificationError
from checkout_api.models.order import OrderStatus
from checkout_api.services.completion_service import PaymentCompletionService
from checkout_api.services.ledger import OrderLedger, PendingOrderDraft
from checkout_api.services.notification_service import NotificationDispatcher
from checkout_api.services.signature import compute_signature

NOTIFY = NotificationSettings(api_key="re_test", sender="orders@resend.dev", recipient="ops@x.test")


@pytest.fixture
def ledger(db_session) -> OrderLedger:
    return OrderLedger(db_session)


@pytest.fixture
def pending_order(ledger):
    return ledger.create_pending(
        PendingOrderDraft(
            gateway_order_id="order_A1",
            user_id="user-1",
            user_email="asha@example.com",
            shipping_address={"full_name": "Asha Rao", "city": "Bengaluru"},
            items=[
                {"product_id": "cap-001", "title": "Cap", "unit_price": "999.00", "quantity": 1}
            ],
            total_price=Decimal("999.00"),
            currency="INR",
            amount_subunits=99900,
        )
    )


def _service(ledger, credentials, email_client, schedule=None) -> PaymentCompletionService:
    return PaymentCompletionService(
        ledger, credentials, NotificationDispatcher(email_client, NOTIFY), schedule=schedule
    )


def test_complete_payment_marks_order_paid_and_notifies(
    ledger, credentials, fake_email, pending_order
):
    signature = compute_signature("order_A1", "pay_1", credentials.key_secret)

    record = _service(ledger, credentials, fake_email).complete_payment(
        "order_A1", "pay_1", signature, pending_order.id
    )

    assert record.status == OrderStatus.PAID
    assert record.gateway_payment_id == "pay_1"
    assert len(fake_email.sent) == 1
    assert fake_email.sent[0]["to"] == "ops@x.test"


def test_second_identical_completion_fails_without_changing_status(
    ledger, credentials, fake_email, pending_order
):
    service = _service(ledger, credentials, fake_email)
    signature = compute_signature("order_A1", "pay_1", credentials.key_secret)
    service.complete_payment("order_A1", "pay_1", signature, pending_order.id)

    with pytest.raises(VerificationError):
        service.complete_payment("order_A1", "pay_1", signature, pending_order.id)

    assert ledger.get_order(pending_order.id).status == OrderStatus.PAID
    assert len(fake_email.sent) == 1


def test_wrong_signature_leaves_order_pending(ledger, credentials, fake_email, pending_order):
    bad_signature = compute_signature("order_A1", "pay_1", "not-the-secret")

    with pytest.raises(VerificationError):
        _service(ledger, credentials, fake_email).complete_payment(
            "order_A1", "pay_1", bad_signature, pending_order.id
        )

    assert ledger.get_order(pending_order.id).status == OrderStatus.PENDING
    assert fake_email.sent == []


def test_valid_signature_for_other_gateway_order_is_rejected(
    ledger, credentials, fake_email, pending_order
):
    signature = compute_signature("order_ZZ", "pay_1", credentials.key_secret)

    with pytest.raises(VerificationError):
        _service(ledger, credentials, fake_email).complete_payment(
            "order_ZZ", "pay_1", signature, pending_order.id
        )

    assert ledger.get_order(pending_order.id).status == OrderStatus.PENDING


def test_failure_reasons_are_indistinguishable(ledger, credentials, fake_email, pending_order):
    service = _service(ledger, credentials, fake_email)
    good = compute_signature("order_A1", "pay_1", credentials.key_secret)

    with pytest.raises(VerificationError) as bad_signature:
        service.complete_payment("order_A1", "pay_1", "0" * 64, pending_order.id)
    with pytest.raises(VerificationError) as unknown_order:
        service.complete_payment("order_A1", "pay_1", good, uuid.uuid4())

    assert str(bad_signature.value) == str(unknown_order.value)
    assert bad_signature.value.message == "Payment verification failed"


def test_notification_failure_does_not_fail_completion(
    ledger, credentials, make_fake_email, pending_order
):
    email = make_fake_email(error=RuntimeError("smtp exploded"))
    signature = compute_signature("order_A1", "pay_1", credentials.key_secret)

    record = _service(ledger, credentials, email).complete_payment(
        "order_A1", "pay_1", signature, pending_order.id
    )

    assert record.status == OrderStatus.PAID


def test_notification_is_handed_to_scheduler(ledger, credentials, fake_email, pending_order):
    scheduled = []
    service = _service(
        ledger,
        credentials,
        fake_email,
        schedule=lambda func, *args: scheduled.append((func, args)),
    )
    signature = compute_signature("order_A1", "pay_1", credentials.key_secret)

    service.complete_payment("order_A1", "pay_1", signature, pending_order.id)

    assert fake_email.sent == []
    func, args = scheduled[0]
    assert args[0].id == pending_order.id
    assert args[0].status == OrderStatus.PAID
    func(*args)
    assert len(fake_email.sent) == 1
