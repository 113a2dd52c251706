from checkout_api.integrations.email_client import EmailSenderProtocol, ResendEmailClient
from checkout_api.integrations.gateway_client import PaymentGatewayProtocol, RazorpayGatewayClient

__all__ = [
    "EmailSenderProtocol",
    "PaymentGatewayProtocol",
    "RazorpayGatewayClient",
    "ResendEmailClient",
]
