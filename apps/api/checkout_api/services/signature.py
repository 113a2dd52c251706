import hashlib
import hmac

from checkout_api.errors import ConfigurationError


def _signature_message(gateway_order_id: str, gateway_payment_id: str) -> bytes:
    return f"{gateway_order_id}|{gateway_payment_id}".encode("utf-8")


def compute_signature(gateway_order_id: str, gateway_payment_id: str, secret: str) -> str:
    if not secret:
        raise ConfigurationError("Payment gateway secret is not configured")
    return hmac.new(
        secret.encode("utf-8"),
        _signature_message(gateway_order_id, gateway_payment_id),
        hashlib.sha256,
    ).hexdigest()


def verify_signature(
    gateway_order_id: str,
    gateway_payment_id: str,
    claimed_signature: str,
    secret: str,
) -> bool:
    """Check a gateway completion signature.

    A mismatch is a normal ``False`` result. Only a missing secret raises.
    """
    expected = compute_signature(gateway_order_id, gateway_payment_id, secret)
    return hmac.compare_digest(expected.encode("ascii"), claimed_signature.encode("utf-8"))
