from fastapi import BackgroundTasks, Depends
from sqlalchemy.orm import Session

from checkout_api.config import (
    GatewayCredentials,
    gateway_credentials,
    notification_settings,
)
from checkout_api.db.session import get_db
from checkout_api.integrations.email_client import get_email_client
from checkout_api.integrations.gateway_client import PaymentGatewayProtocol, get_gateway_client
from checkout_api.services.completion_service import PaymentCompletionService
from checkout_api.services.intent_service import OrderIntentService
from checkout_api.services.ledger import OrderLedger
from checkout_api.services.notification_service import NotificationDispatcher


def get_ledger(db: Session = Depends(get_db)) -> OrderLedger:
    return OrderLedger(db)


def get_gateway_credentials() -> GatewayCredentials:
    return gateway_credentials()


def get_payment_gateway(
    credentials: GatewayCredentials = Depends(get_gateway_credentials),
) -> PaymentGatewayProtocol:
    return get_gateway_client(credentials)


def get_notification_dispatcher() -> NotificationDispatcher:
    return NotificationDispatcher(get_email_client(), notification_settings())


def get_intent_service(
    ledger: OrderLedger = Depends(get_ledger),
    gateway: PaymentGatewayProtocol = Depends(get_payment_gateway),
    credentials: GatewayCredentials = Depends(get_gateway_credentials),
) -> OrderIntentService:
    return OrderIntentService(ledger, gateway, credentials)


def get_completion_service(
    background_tasks: BackgroundTasks,
    ledger: OrderLedger = Depends(get_ledger),
    credentials: GatewayCredentials = Depends(get_gateway_credentials),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> PaymentCompletionService:
    return PaymentCompletionService(
        ledger,
        credentials,
        dispatcher,
        schedule=background_tasks.add_task,
    )
