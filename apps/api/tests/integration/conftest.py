import pytest

from checkout_api.auth.tokens import issue_access_token
from checkout_api.config import settings


@pytest.fixture
def auth_headers():
    def _headers(role: str, sub: str) -> dict[str, str]:
        token = issue_access_token(sub, role, settings.auth_token_secret)
        return {"Authorization": f"Bearer {token}"}

    return {
        "customer_a": _headers("CUSTOMER", "user-a"),
        "customer_b": _headers("CUSTOMER", "user-b"),
        "ops": _headers("OPS", "ops-1"),
    }


@pytest.fixture
def create_intent(client, order_data_payload, auth_headers):
    def _create(
        amount: str = "999.00",
        headers: dict[str, str] | None = None,
        currency: str | None = None,
    ) -> dict:
        body = {"amountMajorUnits": amount, "orderData": order_data_payload(amount)}
        if currency is not None:
            body["currency"] = currency
        response = client.post(
            "/api/v1/checkout/intents",
            json=body,
            headers=auth_headers["customer_a"] if headers is None else headers,
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _create
