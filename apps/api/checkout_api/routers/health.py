from collections.abc import Callable
from typing import Literal

from fastapi import APIRouter, Response, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from checkout_api.config import settings
from checkout_api.db.session import SessionLocal
from checkout_api.observability import log_event
from checkout_api.schemas.health import HealthResponse, ReadinessDependency, ReadinessResponse

ReadinessStatus = Literal["ok", "error"]

router = APIRouter(tags=["health"])


@router.get("/health", summary="Health check", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok")


@router.get(
    "/ready",
    summary="Readiness check",
    response_model=ReadinessResponse,
    responses={status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ReadinessResponse}},
)
def readiness(response: Response) -> ReadinessResponse:
    dependencies = [
        ReadinessDependency(
            name="database",
            status=_safe_dependency_status(
                "database", lambda: _database_dependency_status(SessionLocal)
            ),
        ),
        ReadinessDependency(name="payment_gateway", status=_gateway_config_status()),
    ]

    readiness_status = "ok" if all(dep.status == "ok" for dep in dependencies) else "degraded"
    if readiness_status != "ok":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return ReadinessResponse(status=readiness_status, dependencies=dependencies)


def _safe_dependency_status(
    dependency_name: str,
    checker: Callable[[], ReadinessStatus],
) -> ReadinessStatus:
    try:
        return checker()
    except Exception as exc:  # readiness reports degraded instead of raising
        log_event(
            "readiness_dependency_check_failed",
            reason=f"{dependency_name}:{type(exc).__name__}",
        )
        return "error"


def _database_dependency_status(
    session_factory: Callable[[], Session],
) -> ReadinessStatus:
    try:
        with session_factory() as db:
            db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        return "error"
    return "ok"


def _gateway_config_status() -> ReadinessStatus:
    if settings.gateway_key_id.strip() and settings.gateway_key_secret.strip():
        return "ok"
    return "error"
