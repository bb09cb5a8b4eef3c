"""Confirmation mailer port (abstract interface)."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ConfirmationMessage:
    to: str
    subject: str
    body: str
    reference: str


@dataclass(frozen=True)
class DeliveryReceipt:
    delivered: bool
    message_id: str | None = None
    error: str | None = None


class ConfirmationMailer(ABC):
    @abstractmethod
    def deliver(self, message: ConfirmationMessage) -> DeliveryReceipt:
        """Hand the message to the mail provider.

        Provider failures are reported on the receipt; adapters only raise
        for programming errors.
        """
        ...
