"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Identifier, String

from checkout.domain import checkout


@checkout.event(part_of="Order")
class OrderPlaced:
    """A pending order was recorded before redirecting to the processor."""

    __version__ = 1

    order_id = Identifier(required=True)
    external_reference = String(required=True)
    email = String(required=True)
    total = String(required=True)
    placed_at = DateTime(required=True)


@checkout.event(part_of="Order")
class OrderCompleted:
    """A verified notification confirmed the payment."""

    __version__ = 1

    order_id = Identifier(required=True)
    external_reference = String(required=True)
    total = String(required=True)
    processor_payment_id = String()
    completed_at = DateTime(required=True)


@checkout.event(part_of="Order")
class OrderFailed:
    """A verified notification reported a failed or cancelled payment."""

    __version__ = 1

    order_id = Identifier(required=True)
    external_reference = String(required=True)
    processor_status = String(required=True)
    failed_at = DateTime(required=True)
