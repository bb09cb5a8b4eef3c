"""Order aggregate — the record of one settlement attempt.

An Order is written in PENDING state before the shopper is sent to the
payment processor, so abandoned payments are still auditable. Only a
verified processor notification moves it on, and only once.

State Machine:
    PENDING → COMPLETED
    PENDING → FAILED
"""

import json
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from uuid import uuid4

from protean.exceptions import ValidationError
from protean.fields import DateTime, String, Text

from checkout.domain import checkout
from checkout.order.events import OrderCompleted, OrderFailed, OrderPlaced
from checkout.shared.money import format_amount, to_money


class OrderStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.COMPLETED, OrderStatus.FAILED},
    OrderStatus.COMPLETED: set(),  # Terminal
    OrderStatus.FAILED: set(),  # Terminal
}

TERMINAL_STATES = frozenset({OrderStatus.COMPLETED, OrderStatus.FAILED})


def new_external_reference() -> str:
    """Merchant payment id sent to the processor; unique per attempt."""
    now_ms = int(datetime.now(UTC).timestamp() * 1000)
    return f"order_{now_ms}_{uuid4().hex[:12]}"


@checkout.aggregate
class Order:
    external_reference = String(required=True, max_length=100)
    email = String(required=True, max_length=255)
    total = String(required=True, max_length=20)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    items = Text(required=True)  # JSON: frozen line snapshot
    shipping_address = Text()  # JSON: customer info captured at checkout
    session_id = String(max_length=255)
    processor_payment_id = String(max_length=100)
    processor_status = String(max_length=50)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def place(cls, email, total: Decimal, lines: list[dict], customer_info=None, session_id=None, reference=None):
        now = datetime.now(UTC)
        order = cls(
            external_reference=reference or new_external_reference(),
            email=email,
            total=format_amount(total),
            status=OrderStatus.PENDING.value,
            items=json.dumps(lines),
            shipping_address=json.dumps(customer_info or {}),
            session_id=session_id,
            processor_status="pending",
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                external_reference=order.external_reference,
                email=email,
                total=order.total,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def total_amount(self) -> Decimal:
        return to_money(self.total, field="total")

    @property
    def lines(self) -> list[dict]:
        return json.loads(self.items) if self.items else []

    @property
    def is_terminal(self) -> bool:
        return OrderStatus(self.status) in TERMINAL_STATES

    # -------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status: OrderStatus) -> None:
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def complete(self, processor_payment_id=None, processor_status="COMPLETE") -> None:
        self._assert_can_transition(OrderStatus.COMPLETED)
        now = datetime.now(UTC)
        self.status = OrderStatus.COMPLETED.value
        self.processor_payment_id = processor_payment_id
        self.processor_status = processor_status
        self.updated_at = now
        self.raise_(
            OrderCompleted(
                order_id=str(self.id),
                external_reference=self.external_reference,
                total=self.total,
                processor_payment_id=processor_payment_id,
                completed_at=now,
            )
        )

    def fail(self, processor_status, processor_payment_id=None) -> None:
        self._assert_can_transition(OrderStatus.FAILED)
        now = datetime.now(UTC)
        self.status = OrderStatus.FAILED.value
        self.processor_payment_id = processor_payment_id
        self.processor_status = processor_status
        self.updated_at = now
        self.raise_(
            OrderFailed(
                order_id=str(self.id),
                external_reference=self.external_reference,
                processor_status=processor_status,
                failed_at=now,
            )
        )
