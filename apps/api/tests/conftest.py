import threading

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

import checkout_api.models  # noqa: F401
from checkout_api.config import GatewayCredentials, NotificationSettings, settings
from checkout_api.db.base import Base
from checkout_api.db.session import engine as app_engine
from checkout_api.db.session import get_db
from checkout_api.dependencies import (
    get_gateway_credentials,
    get_notification_dispatcher,
    get_payment_gateway,
)
from checkout_api.main import app
from checkout_api.observability import metrics_store
from checkout_api.schemas.gateway import GatewayOrder
from checkout_api.services.notification_service import NotificationDispatcher

TEST_KEY_ID = "rzp_test_key"
TEST_KEY_SECRET = "rzp_test_secret_value"
TEST_ADMIN_EMAIL = "admin@capstore.test"


class FakeGateway:
    def __init__(self, order_ids: list[str] | None = None, error: Exception | None = None):
        self.order_ids = list(order_ids or ["order_A1"])
        self.error = error
        self.calls: list[dict] = []

    def create_order(self, amount_subunits, currency, receipt, notes) -> GatewayOrder:
        self.calls.append(
            {
                "amount": amount_subunits,
                "currency": currency,
                "receipt": receipt,
                "notes": notes,
            }
        )
        if self.error is not None:
            raise self.error
        order_id = self.order_ids.pop(0) if self.order_ids else f"order_{len(self.calls)}"
        return GatewayOrder(id=order_id, amount=amount_subunits, currency=currency, receipt=receipt)


class FakeEmailClient:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.sent: list[dict] = []

    def send(self, *, sender: str, to: str, subject: str, html: str) -> str:
        if self.error is not None:
            raise self.error
        self.sent.append({"sender": sender, "to": to, "subject": subject, "html": html})
        return f"email_{len(self.sent)}"


def _order_data_payload(total: str = "999.00") -> dict:
    return {
        "userEmail": "asha@example.com",
        "items": [
            {
                "productId": "cap-001",
                "title": "Classic Snapback",
                "unitPrice": "499.50",
                "quantity": 2,
                "imageUrl": "https://cdn.capstore.test/cap-001.png",
                "customization": "ASHA",
            }
        ],
        "shippingAddress": {
            "fullName": "Asha Rao",
            "email": "asha@example.com",
            "phone": "+919800000001",
            "address": "12 MG Road",
            "city": "Bengaluru",
            "state": "KA",
            "postalCode": "560001",
            "country": "India",
        },
        "totalPrice": total,
    }


@pytest.fixture(scope="session", autouse=True)
def setup_test_schema():
    Base.metadata.drop_all(bind=app_engine)
    Base.metadata.create_all(bind=app_engine)
    yield
    Base.metadata.drop_all(bind=app_engine)


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=app_engine)
    Base.metadata.create_all(bind=app_engine)
    yield


@pytest.fixture(autouse=True)
def reset_metrics_store():
    metrics_store.reset()
    yield


@pytest.fixture(scope="session", autouse=True)
def enable_testing_mode():
    original_testing = settings.testing
    original_key_id = settings.gateway_key_id
    original_key_secret = settings.gateway_key_secret
    settings.testing = True
    settings.gateway_key_id = TEST_KEY_ID
    settings.gateway_key_secret = TEST_KEY_SECRET
    yield
    settings.testing = original_testing
    settings.gateway_key_id = original_key_id
    settings.gateway_key_secret = original_key_secret


@pytest.fixture
def credentials() -> GatewayCredentials:
    return GatewayCredentials(key_id=TEST_KEY_ID, key_secret=TEST_KEY_SECRET)


@pytest.fixture
def db_session():
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=app_engine)
    db = testing_session_local()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def fake_email() -> FakeEmailClient:
    return FakeEmailClient()


@pytest.fixture
def client(db_session, credentials, fake_gateway, fake_email):
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=app_engine)
    db_session_lock = threading.Lock()

    def override_get_db():
        if db_session_lock.acquire(blocking=False):
            try:
                yield db_session
            finally:
                db_session_lock.release()
            return

        db = testing_session_local()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_gateway_credentials] = lambda: credentials
    app.dependency_overrides[get_payment_gateway] = lambda: fake_gateway
    app.dependency_overrides[get_notification_dispatcher] = lambda: NotificationDispatcher(
        fake_email,
        NotificationSettings(
            api_key="re_test",
            sender="CAPSTORE Orders <orders@resend.dev>",
            recipient=TEST_ADMIN_EMAIL,
        ),
    )
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def order_data_payload():
    return _order_data_payload


@pytest.fixture
def make_fake_gateway():
    return FakeGateway


@pytest.fixture
def make_fake_email():
    return FakeEmailClient
