from dataclasses import dataclass

VERIFICATION_FAILED_MESSAGE = "Payment verification failed"


@dataclass
class CheckoutError(Exception):
    code: str
    message: str
    retryable: bool = False

    def __str__(self) -> str:
        return f"{self.code}:{self.message}"


class ConfigurationError(CheckoutError):
    def __init__(self, message: str) -> None:
        super().__init__(code="CONFIGURATION", message=message, retryable=False)


class GatewayError(CheckoutError):
    """Raised when the payment gateway cannot allocate an order."""


class GatewayTimeoutError(GatewayError):
    def __init__(self, message: str = "Payment gateway timeout") -> None:
        super().__init__(code="GATEWAY_TIMEOUT", message=message, retryable=True)


class GatewayUnavailableError(GatewayError):
    def __init__(self, message: str = "Payment gateway unavailable") -> None:
        super().__init__(code="GATEWAY_UNAVAILABLE", message=message, retryable=True)


class GatewayRejectedError(GatewayError):
    def __init__(self, message: str = "Payment gateway rejected the request") -> None:
        super().__init__(code="GATEWAY_REJECTED", message=message, retryable=False)


class GatewayBadResponseError(GatewayError):
    def __init__(self, message: str = "Unexpected payment gateway response") -> None:
        super().__init__(code="GATEWAY_BAD_RESPONSE", message=message, retryable=False)


class PersistenceError(CheckoutError):
    def __init__(self, message: str = "Order store unavailable") -> None:
        super().__init__(code="PERSISTENCE", message=message, retryable=True)


class VerificationError(CheckoutError):
    def __init__(self) -> None:
        super().__init__(
            code="VERIFICATION_FAILED",
            message=VERIFICATION_FAILED_MESSAGE,
            retryable=False,
        )


class NotificationError(CheckoutError):
    def __init__(self, message: str = "Notification delivery failed") -> None:
        super().__init__(code="NOTIFICATION", message=message, retryable=False)


class InvalidTransitionError(CheckoutError):
    def __init__(self, current: str, next_status: str) -> None:
        super().__init__(
            code="INVALID_TRANSITION",
            message=f"Invalid state transition: {current} -> {next_status}",
            retryable=False,
        )
