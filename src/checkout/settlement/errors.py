"""Settlement error taxonomy.

Malformed initiation input is reported with Protean's ``ValidationError``;
everything below is specific to settling a payment. None of these errors
leaves a state change behind.
"""

from decimal import Decimal


class SettlementError(Exception):
    """Base class for settlement failures."""


class AmountMismatch(SettlementError):
    """A claimed total disagrees with the authoritative total by more than one cent."""

    def __init__(self, expected: Decimal, received: Decimal | None, reference: str | None = None) -> None:
        self.expected = expected
        self.received = received
        self.reference = reference
        super().__init__(f"Amount mismatch: expected {expected}, received {received}")


class InvalidSignature(SettlementError):
    """The notification's signature does not match its fields."""

    def __init__(self, reference: str | None = None) -> None:
        self.reference = reference
        super().__init__("Invalid signature")


class UnverifiedNotification(SettlementError):
    """The payment processor did not corroborate the notification."""

    def __init__(self, reference: str | None = None) -> None:
        self.reference = reference
        super().__init__("Notification could not be verified with the payment processor")


class OrderNotFound(SettlementError):
    def __init__(self, reference: str) -> None:
        self.reference = reference
        super().__init__(f"Order not found for payment reference `{reference}`")
