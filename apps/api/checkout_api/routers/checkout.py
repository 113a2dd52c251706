from fastapi import APIRouter, Depends, HTTPException, status

from checkout_api.auth.dependencies import AuthContext, get_optional_auth_context
from checkout_api.config import settings
from checkout_api.dependencies import get_completion_service, get_intent_service
from checkout_api.schemas.checkout import (
    CompletePaymentRequest,
    CompletePaymentResponse,
    CreateIntentRequest,
    CreateIntentResponse,
    ErrorResponse,
    OrderView,
)
from checkout_api.services.completion_service import PaymentCompletionService
from checkout_api.services.intent_service import OrderIntentService
from checkout_api.services.money import to_subunits

router = APIRouter(prefix="/api/v1/checkout", tags=["checkout"])

_ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_502_BAD_GATEWAY: {"model": ErrorResponse},
    status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse},
}


@router.post(
    "/intents",
    response_model=CreateIntentResponse,
    summary="Create payment intent",
    status_code=status.HTTP_201_CREATED,
    responses=_ERROR_RESPONSES,
)
def create_intent_endpoint(
    payload: CreateIntentRequest,
    service: OrderIntentService = Depends(get_intent_service),
    auth: AuthContext | None = Depends(get_optional_auth_context),
) -> CreateIntentResponse:
    currency = payload.currency or settings.default_currency
    amount_subunits = to_subunits(payload.amount_major_units, currency)
    if amount_subunits <= 0:
        raise HTTPException(
            status_code=422,
            detail="amountMajorUnits is below the smallest currency unit",
        )

    result = service.create_intent(
        amount_subunits=amount_subunits,
        currency=currency,
        order_data=payload.order_data,
        user_id=auth.user_id if auth else None,
    )
    return CreateIntentResponse(
        gateway_order_id=result.gateway_order_id,
        ledger_order_id=result.ledger_order_id,
        api_key_id=result.api_key_id,
        amount=result.amount_subunits,
        currency=result.currency,
    )


@router.post(
    "/complete",
    response_model=CompletePaymentResponse,
    summary="Verify and complete a payment",
    responses=_ERROR_RESPONSES,
)
def complete_payment_endpoint(
    payload: CompletePaymentRequest,
    service: PaymentCompletionService = Depends(get_completion_service),
) -> CompletePaymentResponse:
    record = service.complete_payment(
        gateway_order_id=payload.gateway_order_id,
        gateway_payment_id=payload.gateway_payment_id,
        signature=payload.signature,
        ledger_order_id=payload.ledger_order_id,
    )
    return CompletePaymentResponse(order=OrderView.model_validate(record))
