"""Settlement machine registry.

The machine owns the per-order locks, so every request in the process must
share one instance.
"""

from checkout.settlement.errors import (
    AmountMismatch,
    InvalidSignature,
    OrderNotFound,
    SettlementError,
    UnverifiedNotification,
)
from checkout.settlement.machine import PaymentRedirect, SettlementMachine, SettlementOutcome

_machine: SettlementMachine | None = None


def get_machine() -> SettlementMachine:
    global _machine
    if _machine is None:
        from checkout.config import load_settings
        from checkout.ledger import DomainLedgerStore
        from checkout.notifications import get_mailer
        from checkout.payfast.verification import get_verifier

        _machine = SettlementMachine(
            store=DomainLedgerStore(),
            settings=load_settings(),
            verifier=get_verifier(),
            mailer=get_mailer(),
        )
    return _machine


def set_machine(machine: SettlementMachine) -> None:
    global _machine
    _machine = machine


def reset_machine() -> None:
    global _machine
    _machine = None


__all__ = [
    "AmountMismatch",
    "InvalidSignature",
    "OrderNotFound",
    "PaymentRedirect",
    "SettlementError",
    "SettlementMachine",
    "SettlementOutcome",
    "UnverifiedNotification",
    "get_machine",
    "reset_machine",
    "set_machine",
]
