"""Order confirmation email, composed from a completed order."""

from checkout.notifications.port import ConfirmationMessage
from checkout.order.order import Order


def _line(line: dict) -> str:
    variant = f" ({line['variant']})" if line.get("variant") else ""
    return f"  {line['quantity']} x {line['name']}{variant}  R{line['line_total']}"


def compose(order: Order) -> ConfirmationMessage:
    items = "\n".join(_line(line) for line in order.lines)
    body = (
        "Thank you for your order!\n\n"
        f"Order reference: {order.external_reference}\n"
        f"Items:\n{items}\n\n"
        f"Total paid: R{order.total}\n"
    )
    return ConfirmationMessage(
        to=order.email,
        subject=f"Your CryoChill order {order.external_reference} is confirmed",
        body=body,
        reference=order.external_reference,
    )
