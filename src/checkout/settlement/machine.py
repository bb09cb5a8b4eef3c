"""Order settlement state machine.

Drives one payment attempt from cart snapshot to a settled order:

    initiate()             NotStarted → Pending, returns a signed redirect
    handle_notification()  Pending → Completed | Failed, stock adjusted once

Notifications are delivered at least once and possibly concurrently. Every
transition for an order runs under a lock keyed by its external reference,
and an order that is already terminal turns a redelivery into a no-op. The
processor round trip happens before that lock is taken.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError

from checkout.cart.cart import CartSnapshot
from checkout.config import PayFastSettings
from checkout.ledger.locks import KeyedLocks
from checkout.ledger.port import LedgerStore
from checkout.notifications import order_confirmation
from checkout.notifications.port import ConfirmationMailer
from checkout.order.order import Order, OrderStatus
from checkout.payfast.notification import PaymentNotification, ProcessorStatus
from checkout.payfast.signature import SIGNATURE_FIELD, sign, verify
from checkout.payfast.verification.port import VerificationGateway
from checkout.settlement.errors import (
    AmountMismatch,
    InvalidSignature,
    OrderNotFound,
    UnverifiedNotification,
)
from checkout.shared.money import format_amount, parse_amount, within_tolerance

logger = structlog.get_logger(__name__)

ITEM_NAME = "CryoChill Product Order"

_STATUS_TRANSITIONS = {
    ProcessorStatus.COMPLETE.value: OrderStatus.COMPLETED,
    ProcessorStatus.FAILED.value: OrderStatus.FAILED,
    ProcessorStatus.CANCELLED.value: OrderStatus.FAILED,
}


@dataclass(frozen=True)
class PaymentRedirect:
    """Signed field set the browser must post to ``url``."""

    url: str
    fields: dict[str, str]
    order_id: str
    reference: str


@dataclass(frozen=True)
class SettlementOutcome:
    order_id: str
    reference: str
    status: str
    applied: bool


def split_name(full_name: str) -> tuple[str, str]:
    parts = (full_name or "").split()
    if not parts:
        return "Customer", ""
    return parts[0], " ".join(parts[1:])


class SettlementMachine:
    def __init__(
        self,
        store: LedgerStore,
        settings: PayFastSettings,
        verifier: VerificationGateway,
        mailer: ConfirmationMailer | None = None,
    ) -> None:
        self.store = store
        self.settings = settings
        self.verifier = verifier
        self.mailer = mailer
        self._order_locks = KeyedLocks()

    # -------------------------------------------------------------------
    # Initiation
    # -------------------------------------------------------------------
    def initiate(
        self,
        snapshot: CartSnapshot,
        email: str,
        customer_info: Mapping | None,
        expected_total=None,
        session_id: str | None = None,
    ) -> PaymentRedirect:
        """Create a pending order for ``snapshot`` and return the signed redirect.

        The total is computed here from catalogue prices; ``expected_total``
        is the client's figure and is only checked against it. Nothing is
        persisted unless every check passes.
        """
        customer_info = dict(customer_info or {})
        self._validate_checkout(snapshot, email, customer_info)

        lines, total = self._price(snapshot)
        if expected_total is not None:
            claimed = parse_amount(expected_total, field="amount")
            if not within_tolerance(claimed, total):
                logger.warning(
                    "Checkout total disagrees with cart",
                    expected=format_amount(total),
                    received=str(claimed),
                )
                raise AmountMismatch(expected=total, received=claimed)

        order = Order.place(
            email=email.strip(),
            total=total,
            lines=lines,
            customer_info=customer_info,
            session_id=session_id,
        )
        self.store.add_order(order)

        fields = self._payment_fields(order, customer_info, item_count=len(lines))
        fields[SIGNATURE_FIELD] = sign(fields, self.settings.passphrase)

        logger.info(
            "Payment initiated",
            order_id=str(order.id),
            reference=order.external_reference,
            total=order.total,
            line_count=len(lines),
        )
        return PaymentRedirect(
            url=self.settings.process_url,
            fields=fields,
            order_id=str(order.id),
            reference=order.external_reference,
        )

    def _validate_checkout(self, snapshot, email, customer_info) -> None:
        errors: dict[str, list[str]] = {}
        if not snapshot:
            errors["cart"] = ["Cart is empty"]
        if not email or "@" not in email:
            errors["email"] = ["A valid email address is required"]
        for key in ("full_name", "address"):
            if not str(customer_info.get(key) or "").strip():
                errors[key] = ["This field is required"]
        for line in snapshot or ():
            if line.quantity < 1:
                errors.setdefault("quantity", []).append(f"Invalid quantity for product {line.product_id}")
        if errors:
            raise ValidationError(errors)

    def _price(self, snapshot: CartSnapshot) -> tuple[list[dict], Decimal]:
        lines = []
        total = Decimal("0.00")
        for line in snapshot:
            product = self.store.get_product(line.product_id)
            if product is None:
                raise ValidationError({"product_id": [f"Product {line.product_id} not found"]})
            line_total = product.unit_price * line.quantity
            total += line_total
            lines.append(
                {
                    "product_id": line.product_id,
                    "name": product.name,
                    "variant": line.variant,
                    "quantity": line.quantity,
                    "unit_price": format_amount(product.unit_price),
                    "line_total": format_amount(line_total),
                }
            )
        return lines, total

    def _payment_fields(self, order: Order, customer_info: dict, item_count: int) -> dict[str, str]:
        reference = order.external_reference
        name_first, name_last = split_name(customer_info.get("full_name", ""))
        return {
            "merchant_id": self.settings.merchant_id,
            "merchant_key": self.settings.merchant_key,
            "return_url": self.settings.callback_url(f"/payment/success?order_id={reference}"),
            "cancel_url": self.settings.callback_url(f"/payment/cancel?order_id={reference}"),
            "notify_url": self.settings.callback_url("/api/payfast-webhook"),
            "name_first": name_first,
            "name_last": name_last,
            "email_address": order.email,
            "m_payment_id": reference,
            "amount": order.total,
            "item_name": ITEM_NAME,
            "item_description": f"Order containing {item_count} items",
            "email_confirmation": "1",
            "confirmation_address": order.email,
        }

    # -------------------------------------------------------------------
    # Notification handling
    # -------------------------------------------------------------------
    def handle_notification(self, raw_fields: Mapping[str, str]) -> SettlementOutcome:
        """Verify an ITN and apply its effect to the order, at most once.

        Raises InvalidSignature, UnverifiedNotification, OrderNotFound or
        AmountMismatch without touching the order. A redelivery for a
        settled order and an unrecognised processor status both succeed
        without a state change.
        """
        received = {str(k): "" if v is None else str(v) for k, v in raw_fields.items()}
        claimed_reference = received.get("m_payment_id")

        if not verify(received, received.get(SIGNATURE_FIELD), self.settings.passphrase):
            logger.warning("PayFast notification signature mismatch", reference=claimed_reference, security=True)
            raise InvalidSignature(claimed_reference)

        if not self.verifier.confirm(received):
            logger.warning("PayFast notification not confirmed by processor", reference=claimed_reference, security=True)
            raise UnverifiedNotification(claimed_reference)

        notification = PaymentNotification.from_fields(
            {k: v for k, v in received.items() if k != SIGNATURE_FIELD}
        )

        with self._order_locks.hold(notification.reference):
            order = self.store.find_order_by_reference(notification.reference)
            if order is None:
                logger.warning("Notification for unknown order", reference=notification.reference)
                raise OrderNotFound(notification.reference)

            if order.is_terminal:
                logger.info(
                    "Notification replay for settled order ignored",
                    order_id=str(order.id),
                    reference=notification.reference,
                    status=order.status,
                )
                return self._outcome(order, applied=False)

            expected = order.total_amount
            if notification.gross_amount is None or not within_tolerance(notification.gross_amount, expected):
                logger.warning(
                    "Notification amount mismatch",
                    order_id=str(order.id),
                    reference=notification.reference,
                    expected=order.total,
                    received=str(notification.gross_amount),
                )
                raise AmountMismatch(expected=expected, received=notification.gross_amount, reference=order.external_reference)

            target = _STATUS_TRANSITIONS.get(notification.status)
            if target is None:
                logger.info(
                    "Intermediate payment status, order stays pending",
                    order_id=str(order.id),
                    reference=notification.reference,
                    payment_status=notification.status,
                )
                return self._outcome(order, applied=False)

            if target == OrderStatus.COMPLETED:
                order.complete(
                    processor_payment_id=notification.processor_payment_id,
                    processor_status=notification.status,
                )
            else:
                order.fail(
                    processor_status=notification.status,
                    processor_payment_id=notification.processor_payment_id,
                )
            self.store.save_order(order)

            if target == OrderStatus.COMPLETED:
                self._release_stock(order)

        logger.info(
            "Order settled",
            order_id=str(order.id),
            reference=order.external_reference,
            status=order.status,
        )
        if target == OrderStatus.COMPLETED:
            self._after_completion(order)
        return self._outcome(order, applied=True)

    def _release_stock(self, order: Order) -> None:
        for line in order.lines:
            try:
                self.store.adjust_stock(line["product_id"], -int(line["quantity"]))
            except ObjectNotFoundError:
                logger.error(
                    "Product in settled order no longer exists",
                    order_id=str(order.id),
                    product_id=line["product_id"],
                )

    def _after_completion(self, order: Order) -> None:
        """Clear the originating cart and send the confirmation email, best effort."""
        if order.session_id:
            try:
                self.store.clear_cart(order.session_id)
            except Exception:
                logger.exception("Failed to clear cart after settlement", order_id=str(order.id))

        if self.mailer is None:
            return
        try:
            receipt = self.mailer.deliver(order_confirmation.compose(order))
        except Exception:
            logger.exception("Failed to send order confirmation", order_id=str(order.id))
            return
        if not receipt.delivered:
            logger.warning(
                "Order confirmation email not delivered",
                order_id=str(order.id),
                error=receipt.error,
            )

    @staticmethod
    def _outcome(order: Order, applied: bool) -> SettlementOutcome:
        return SettlementOutcome(
            order_id=str(order.id),
            reference=order.external_reference,
            status=order.status,
            applied=applied,
        )

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def order_status(self, reference: str) -> Order:
        """Persisted state of an order, for return/cancel callbacks."""
        order = self.store.find_order_by_reference(reference)
        if order is None:
            raise OrderNotFound(reference)
        return order
