"""In-memory mailer that keeps every delivered message, for development and tests."""

from uuid import uuid4

from checkout.notifications.port import ConfirmationMailer, ConfirmationMessage, DeliveryReceipt


class RecordingMailer(ConfirmationMailer):
    def __init__(self) -> None:
        self.outbox: list[ConfirmationMessage] = []
        self._failure: str | None = None

    def fail_with(self, reason: str = "Mail provider unavailable") -> None:
        self._failure = reason

    def succeed(self) -> None:
        self._failure = None

    def deliver(self, message: ConfirmationMessage) -> DeliveryReceipt:
        if self._failure is not None:
            return DeliveryReceipt(delivered=False, error=self._failure)
        self.outbox.append(message)
        return DeliveryReceipt(delivered=True, message_id=f"msg-{uuid4().hex[:12]}")
