"""In-memory record storage structures for the clinic records engine."""

from .appointments import AppointmentQueue
from .billing import BillingLedger, InvalidAmountError, LedgerBook, normalize_amount
from .models import (
    APPOINTMENT_CANCELLED,
    APPOINTMENT_COMPLETED,
    APPOINTMENT_SCHEDULED,
    PLAN_CANCELLED,
    PLAN_COMPLETED,
    PLAN_PLANNED,
    Appointment,
    Patient,
    Payment,
    VisitPlan,
)
from .patient_index import DuplicatePatientError, PatientIndex, RecordStoreError
from .visit_plans import VisitPlanStore
from .waiting_list import WaitingEntry, WaitingList

__all__ = [
    "APPOINTMENT_CANCELLED",
    "APPOINTMENT_COMPLETED",
    "APPOINTMENT_SCHEDULED",
    "PLAN_CANCELLED",
    "PLAN_COMPLETED",
    "PLAN_PLANNED",
    "Appointment",
    "AppointmentQueue",
    "BillingLedger",
    "DuplicatePatientError",
    "InvalidAmountError",
    "LedgerBook",
    "Patient",
    "PatientIndex",
    "Payment",
    "RecordStoreError",
    "VisitPlan",
    "VisitPlanStore",
    "WaitingEntry",
    "WaitingList",
    "normalize_amount",
]
