"""Per-patient billing ledgers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional, Union

from .models import Payment
from .patient_index import RecordStoreError

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")

Amount = Union[int, float, str, Decimal]


class InvalidAmountError(RecordStoreError, ValueError):
    """Raised when a currency amount cannot be interpreted."""


def normalize_amount(value: Amount) -> Decimal:
    """Convert ``value`` to a :class:`Decimal` rounded to cents."""

    try:
        normalized = Decimal(str(value)).quantize(CENTS)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise InvalidAmountError(f"Invalid currency amount: {value!r}") from exc
    if not normalized.is_finite():
        raise InvalidAmountError(f"Invalid currency amount: {value!r}")
    return normalized


@dataclass
class BillingLedger:
    """Running balance and payment history for one patient.

    The balance never drops below zero. Overpayments are recorded in the
    payment history but the excess is not kept as credit.
    """

    patient_id: int
    balance: Decimal = ZERO
    payments: List[Payment] = field(default_factory=list)

    def charge(self, amount: Amount) -> bool:
        value = normalize_amount(amount)
        if value <= ZERO:
            logger.warning(
                "Rejected non-positive charge %s for patient %s", value, self.patient_id
            )
            return False
        self.balance += value
        return True

    def pay(self, amount: Amount, date: str) -> bool:
        value = normalize_amount(amount)
        if value <= ZERO:
            logger.warning(
                "Rejected non-positive payment %s for patient %s", value, self.patient_id
            )
            return False
        self.payments.append(Payment(amount=value, date=date))
        self.balance -= value
        if self.balance < ZERO:
            self.balance = ZERO
        return True

    def status(self) -> str:
        if self.balance == ZERO:
            return "Paid"
        return f"Pending: ${self.balance:.2f}"

    def total_paid(self) -> Decimal:
        return sum((payment.amount for payment in self.payments), ZERO)

    def describe(self) -> str:
        return (
            f"Billing{{PatientID={self.patient_id}, Amount=${self.balance:.2f}, "
            f"Status={self.status()}}}"
        )


class LedgerBook:
    """Holds exactly one ledger per patient, in patient creation order."""

    def __init__(self) -> None:
        self._ledgers: Dict[int, BillingLedger] = {}

    def __len__(self) -> int:
        return len(self._ledgers)

    def __contains__(self, patient_id: object) -> bool:
        return patient_id in self._ledgers

    def open(self, patient_id: int) -> BillingLedger:
        if patient_id in self._ledgers:
            raise RecordStoreError(f"Ledger for patient {patient_id} already exists")
        ledger = BillingLedger(patient_id=patient_id)
        self._ledgers[patient_id] = ledger
        return ledger

    def get(self, patient_id: int) -> Optional[BillingLedger]:
        return self._ledgers.get(patient_id)

    def all_ledgers(self) -> List[BillingLedger]:
        return list(self._ledgers.values())


__all__ = [
    "BillingLedger",
    "InvalidAmountError",
    "LedgerBook",
    "normalize_amount",
]
