"""Confirmation mailer registry.

The recording mailer is installed by default; a provider-backed adapter can
be swapped in with set_mailer() at application start.
"""

from checkout.notifications.port import ConfirmationMailer, ConfirmationMessage, DeliveryReceipt

_mailer: ConfirmationMailer | None = None


def get_mailer() -> ConfirmationMailer:
    global _mailer
    if _mailer is None:
        from checkout.notifications.recording import RecordingMailer

        _mailer = RecordingMailer()
    return _mailer


def set_mailer(mailer: ConfirmationMailer) -> None:
    global _mailer
    _mailer = mailer


def reset_mailer() -> None:
    global _mailer
    _mailer = None


__all__ = ["ConfirmationMailer", "ConfirmationMessage", "DeliveryReceipt", "get_mailer", "reset_mailer", "set_mailer"]
