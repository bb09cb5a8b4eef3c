"""Typed view of a PayFast ITN (instant transaction notification).

The raw posted mapping is untrusted. It is only narrowed into a
``PaymentNotification`` after its signature has been checked.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from protean.exceptions import ValidationError

from checkout.payfast.signature import SIGNATURE_FIELD
from checkout.shared.money import parse_amount


class ProcessorStatus(Enum):
    COMPLETE = "COMPLETE"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


@dataclass(frozen=True)
class PaymentNotification:
    reference: str
    status: str
    gross_amount: Decimal | None
    processor_payment_id: str | None = None
    extra: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_fields(cls, fields: Mapping[str, str]) -> "PaymentNotification":
        reference = (fields.get("m_payment_id") or "").strip()
        if not reference:
            raise ValidationError({"m_payment_id": ["Notification does not carry a merchant payment id"]})

        raw_amount = fields.get("amount_gross") or fields.get("amount")
        try:
            gross_amount = parse_amount(raw_amount, field="amount_gross") if raw_amount else None
        except ValidationError:
            gross_amount = None

        known = {"m_payment_id", "payment_status", "amount_gross", "pf_payment_id", SIGNATURE_FIELD}
        return cls(
            reference=reference,
            status=(fields.get("payment_status") or "").strip().upper(),
            gross_amount=gross_amount,
            processor_payment_id=fields.get("pf_payment_id") or None,
            extra={k: v for k, v in fields.items() if k not in known},
        )
