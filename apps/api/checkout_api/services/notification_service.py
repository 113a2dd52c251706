import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from html import escape

from checkout_api.config import NotificationSettings
from checkout_api.integrations.email_client import EmailSenderProtocol
from checkout_api.observability import log_event, metrics_store
from checkout_api.schemas.checkout import OrderView


@dataclass(frozen=True)
class NotificationContext:
    event: str = "order_paid"
    payment_method: str = "Razorpay"


class NotificationDispatcher:
    """Best-effort operator notification for new and verified orders."""

    def __init__(self, email_client: EmailSenderProtocol, config: NotificationSettings) -> None:
        self.email_client = email_client
        self.config = config

    def notify_order_event(self, order: OrderView, context: NotificationContext) -> None:
        order_id = str(order.id)
        if not self.config.recipient:
            metrics_store.increment("notification_skipped_total")
            log_event("notification_skipped", order_id=order_id, reason="recipient_not_configured")
            return

        try:
            message_id = self.email_client.send(
                sender=self.config.sender,
                to=self.config.recipient,
                subject=render_subject(order),
                html=render_order_summary(order, context),
            )
        except Exception as err:  # never surfaces to the payment flow
            metrics_store.increment("notification_failed_total")
            log_event(
                "notification_failed",
                level=logging.WARNING,
                order_id=order_id,
                reason=f"{type(err).__name__}: {err}",
            )
            return

        metrics_store.increment("notification_sent_total")
        log_event("notification_sent", order_id=order_id, reason=f"message_id={message_id}")


def render_subject(order: OrderView) -> str:
    return f"New Order #{str(order.id)[:8]} - {order.currency} {order.total_price}"


def _line_total(item: dict) -> str:
    try:
        return str(Decimal(str(item.get("unit_price", "0"))) * int(item.get("quantity", 0)))
    except (InvalidOperation, TypeError, ValueError):
        return "-"


def _render_item(item: dict) -> str:
    title = escape(str(item.get("title", "")))
    quantity = escape(str(item.get("quantity", "")))
    unit_price = escape(str(item.get("unit_price", "")))
    image = ""
    if item.get("image_url"):
        image = (
            f'<img src="{escape(str(item["image_url"]))}" alt="{title}" '
            'width="60" height="60" style="object-fit:cover;border-radius:4px" />'
        )
    customization = ""
    if item.get("customization"):
        customization = f"<br/><small>Customization: {escape(str(item['customization']))}</small>"
    return (
        "<tr>"
        f"<td>{image}</td>"
        f"<td>{title}{customization}</td>"
        f"<td>{quantity}</td>"
        f"<td>{unit_price}</td>"
        f"<td>{escape(_line_total(item))}</td>"
        "</tr>"
    )


def render_order_summary(order: OrderView, context: NotificationContext) -> str:
    address = order.shipping_address

    def field(name: str) -> str:
        return escape(str(address.get(name, "")))

    rows = "".join(_render_item(item) for item in order.items)
    payment_id = escape(order.gateway_payment_id or "-")
    return (
        "<html><body style=\"font-family:Arial,sans-serif\">"
        "<h2>New Order Received</h2>"
        f"<p><strong>Order ID:</strong> {escape(str(order.id))}<br/>"
        f"<strong>Date:</strong> {escape(order.created_at.isoformat())}</p>"
        "<h3>Customer</h3>"
        f"<p>{field('full_name')}<br/>{field('phone')}<br/>{escape(order.user_email)}</p>"
        "<h3>Shipping Address</h3>"
        f"<p>{field('address')}<br/>{field('city')}, {field('state')} {field('postal_code')}"
        f"<br/>{field('country')}</p>"
        "<h3>Items</h3>"
        "<table cellpadding=\"6\" style=\"border-collapse:collapse\">"
        "<tr><th></th><th>Item</th><th>Qty</th><th>Price</th><th>Total</th></tr>"
        f"{rows}</table>"
        f"<p><strong>Grand Total:</strong> {escape(order.currency)} "
        f"{escape(str(order.total_price))}</p>"
        f"<p><strong>Payment Method:</strong> {escape(context.payment_method)}<br/>"
        f"<strong>Payment Status:</strong> {escape(order.status.value)}<br/>"
        f"<strong>Payment ID:</strong> {payment_id}</p>"
        "</body></html>"
    )
