import logging
import time
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from checkout_api.config import allowed_origins, ensure_secure_runtime_settings, settings
from checkout_api.db.base import Base
from checkout_api.db.session import engine
from checkout_api.errors import (
    CheckoutError,
    ConfigurationError,
    GatewayError,
    PersistenceError,
    VerificationError,
)
from checkout_api.observability import configure_logging, log_event, metrics_store, set_request_id
from checkout_api.routers.checkout import router as checkout_router
from checkout_api.routers.health import router as health_router
from checkout_api.routers.metrics import router as metrics_router
from checkout_api.routers.orders import router as orders_router


@asynccontextmanager
async def lifespan(_app: FastAPI):
    import checkout_api.models  # noqa: F401 (register all SQLAlchemy models)

    if not settings.testing:
        configure_logging()
    ensure_secure_runtime_settings()
    Base.metadata.create_all(bind=engine)
    yield


app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    description="Capstore checkout: payment intents, verified completion and order lookup",
    lifespan=lifespan,
)


def custom_openapi():
    """Advertise bearer auth so Swagger UI offers an 'Authorize' button."""
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
    )
    components = openapi_schema.setdefault("components", {})
    components.setdefault("securitySchemes", {})["BearerAuth"] = {
        "type": "http",
        "scheme": "bearer",
        "bearerFormat": "JWT",
    }
    openapi_schema["security"] = [{"BearerAuth": []}]

    app.openapi_schema = openapi_schema
    return app.openapi_schema


app.openapi = custom_openapi

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
        headers=headers,
    )


def status_for_error(err: CheckoutError) -> int:
    if isinstance(err, VerificationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(err, GatewayError):
        return status.HTTP_503_SERVICE_UNAVAILABLE if err.retryable else status.HTTP_502_BAD_GATEWAY
    if isinstance(err, PersistenceError):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    if isinstance(err, ConfigurationError):
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    return status.HTTP_409_CONFLICT if not err.retryable else status.HTTP_503_SERVICE_UNAVAILABLE


@app.exception_handler(CheckoutError)
async def checkout_error_handler(_request: Request, err: CheckoutError) -> JSONResponse:
    status_code = status_for_error(err)
    metrics_store.increment(f"checkout_errors_total:{err.code}")
    if isinstance(err, ConfigurationError):
        log_event("configuration_error", level=logging.ERROR, reason=err.message)
        return _error_response(status_code, "Service is not configured")
    return _error_response(status_code, err.message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(_request: Request, err: StarletteHTTPException) -> JSONResponse:
    return _error_response(err.status_code, str(err.detail), getattr(err, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(_request: Request, err: RequestValidationError) -> JSONResponse:
    problems = [
        f"{'.'.join(str(part) for part in error['loc'] if part != 'body')}: {error['msg']}"
        for error in err.errors()
    ]
    return _error_response(422, "Invalid request: " + "; ".join(problems))


@app.middleware("http")
async def request_context_middleware(request: Request, call_next) -> Response:
    request_id = request.headers.get("X-Request-ID") or str(uuid4())
    set_request_id(request_id)

    start = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - start

    response.headers["X-Request-ID"] = request_id
    metrics_store.increment("http_requests_total")
    metrics_store.observe("http_request_duration_seconds", elapsed)
    log_event(f"http_request {request.method} {request.url.path} {response.status_code}")
    return response


app.include_router(health_router)
app.include_router(checkout_router)
app.include_router(orders_router)
app.include_router(metrics_router)
