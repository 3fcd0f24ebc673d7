from django.dispatch import Signal, receiver
import logging

logger = logging.getLogger(__name__)

# Custom signals that other apps (kitchen alert, auto-print) can listen to.
# Both are sent from transaction.on_commit, so receivers only ever see
# committed state.

# kwargs: order
order_placed = Signal()

# kwargs: order, previous_status, previous_payment_status
order_status_changed = Signal()


@receiver(order_placed)
def log_order_placed(sender, order=None, **kwargs):
    """Kitchen-facing log line for every new order."""
    if order is not None:
        logger.info(
            f"New {order.order_type} order #{order.pk} for {order.fulfillment_target}: "
            f"{len(order.lines)} line(s), total {order.total}"
        )
