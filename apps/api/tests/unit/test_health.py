from sqlalchemy.exc import SQLAlchemyError


def test_health_check(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_readiness_check(client):
    response = client.get("/ready")

    assert response.status_code == 200
    assert response.json() == {
        "status": "ok",
        "dependencies": [
            {"name": "database", "status": "ok"},
            {"name": "payment_gateway", "status": "ok"},
        ],
    }


def test_readiness_check_degraded_without_gateway_credentials(client, monkeypatch):
    from checkout_api.routers import health

    monkeypatch.setattr(health.settings, "gateway_key_secret", "")

    response = client.get("/ready")

    assert response.status_code == 503
    assert response.json()["dependencies"][1] == {"name": "payment_gateway", "status": "error"}


def test_readiness_check_degraded_when_dependency_check_raises(client, monkeypatch):
    from checkout_api.routers import health

    def _broken_db(*args, **kwargs):
        raise RuntimeError("unexpected")

    monkeypatch.setattr(health, "_database_dependency_status", _broken_db)

    response = client.get("/ready")

    assert response.status_code == 503
    assert response.json()["status"] == "degraded"
    assert response.json()["dependencies"][0] == {"name": "database", "status": "error"}


def test_database_dependency_status_handles_sqlalchemy_error():
    from checkout_api.routers.health import _database_dependency_status

    class BrokenSession:
        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc_val, exc_tb):
            return False

        def execute(self, *args, **kwargs):
            raise SQLAlchemyError("db down")

    assert _database_dependency_status(BrokenSession) == "error"


def test_health_endpoints_expose_explicit_response_schema(client):
    payload = client.get("/openapi.json").json()

    ready_get = payload["paths"]["/ready"]["get"]
    assert ready_get["responses"]["503"]["content"]["application/json"]["schema"]["$ref"] == (
        "#/components/schemas/ReadinessResponse"
    )
    assert payload["components"]["securitySchemes"]["BearerAuth"]["scheme"] == "bearer"
