import uuid

from fastapi import APIRouter, Depends, HTTPException, status

from checkout_api.auth.dependencies import AuthContext, get_auth_context
from checkout_api.dependencies import get_ledger
from checkout_api.schemas.checkout import OrderDetailResponse, OrdersListResponse, OrderView
from checkout_api.services.ledger import OrderLedger

router = APIRouter(prefix="/api/v1/orders", tags=["orders"])


@router.get("", response_model=OrdersListResponse, summary="List my orders")
def list_orders_endpoint(
    ledger: OrderLedger = Depends(get_ledger),
    auth: AuthContext = Depends(get_auth_context),
) -> OrdersListResponse:
    records = ledger.list_orders_for_user(auth.user_id)
    return OrdersListResponse(orders=[OrderView.model_validate(record) for record in records])


@router.get("/{order_id}", response_model=OrderDetailResponse, summary="Get order")
def get_order_endpoint(
    order_id: uuid.UUID,
    ledger: OrderLedger = Depends(get_ledger),
    auth: AuthContext = Depends(get_auth_context),
) -> OrderDetailResponse:
    record = ledger.get_order(order_id)
    # Other customers' orders look the same as missing ones.
    if record is None or (record.user_id != auth.user_id and not auth.is_backoffice):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    return OrderDetailResponse(order=OrderView.model_validate(record))
