from fastapi import APIRouter, Depends

from checkout_api.auth.dependencies import AuthContext, require_backoffice
from checkout_api.observability import metrics_store
from checkout_api.schemas.metrics import MetricsResponse

router = APIRouter(prefix="/metrics", tags=["metrics"])


@router.get("", summary="Checkout metrics", response_model=MetricsResponse)
def metrics_endpoint(
    _auth: AuthContext = Depends(require_backoffice),
) -> MetricsResponse:
    """Counters and timings for OPS/ADMIN consumers."""
    snapshot = metrics_store.snapshot()
    return MetricsResponse(counters=snapshot.counters, timings=snapshot.timings)
