"""Entity definitions shared by the record storage structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List

APPOINTMENT_SCHEDULED = "Scheduled"
APPOINTMENT_COMPLETED = "Completed"
APPOINTMENT_CANCELLED = "Cancelled"
APPOINTMENT_STATUSES = (
    APPOINTMENT_SCHEDULED,
    APPOINTMENT_COMPLETED,
    APPOINTMENT_CANCELLED,
)

PLAN_PLANNED = "Planned"
PLAN_COMPLETED = "Completed"
PLAN_CANCELLED = "Cancelled"
PLAN_STATUSES = (PLAN_PLANNED, PLAN_COMPLETED, PLAN_CANCELLED)

NOT_AVAILABLE = "N/A"


def _bracketed(entries: List[str]) -> str:
    return f"[{', '.join(entries)}]"


@dataclass(eq=False)
class Patient:
    """A patient record owned by the patient index."""

    patient_id: int
    name: str
    age: int
    contact: str
    medical_history: List[str] = field(default_factory=list)
    visit_records: List[str] = field(default_factory=list)

    def add_medical_history(self, entry: str) -> None:
        self.medical_history.append(entry)

    def add_visit_record(self, record: str) -> None:
        self.visit_records.append(record)

    def update_contact(self, contact: str) -> None:
        self.contact = contact

    def info(self) -> str:
        """Render the patient block used at the top of the patient report."""

        return (
            f"Patient ID: {self.patient_id}\n"
            f"Name: {self.name}\n"
            f"Age: {self.age}\n"
            f"Contact Info: {self.contact}\n"
            f"Medical History: {_bracketed(self.medical_history)}\n"
            f"Visit Records: {_bracketed(self.visit_records)}\n"
        )


@dataclass(eq=False)
class Appointment:
    """A scheduled encounter referencing a patient held by the index."""

    appointment_id: int
    patient: Patient
    date: str
    time: str
    status: str = APPOINTMENT_SCHEDULED

    def cancel(self) -> None:
        self.status = APPOINTMENT_CANCELLED

    def complete(self) -> None:
        self.status = APPOINTMENT_COMPLETED

    def reschedule(self, date: str, time: str) -> None:
        self.date = date
        self.time = time
        self.status = APPOINTMENT_SCHEDULED

    def describe(self) -> str:
        return (
            f"Appointment{{ID={self.appointment_id}, Patient={self.patient.name}, "
            f"Date={self.date}, Time={self.time}, Status={self.status}}}"
        )


@dataclass(frozen=True)
class Payment:
    """A single payment applied to a billing ledger."""

    amount: Decimal
    date: str

    def describe(self) -> str:
        return f"Payment{{Amount=${self.amount:.2f}, Date={self.date}}}"


@dataclass(eq=False)
class VisitPlan:
    """A planned clinical encounter and the report written for it."""

    plan_id: int
    patient: Patient
    date: str
    purpose: str = ""
    doctor: str = ""
    status: str = PLAN_PLANNED
    diagnosis: str = ""
    treatment_plan: str = ""
    doctor_note: str = ""

    def has_clinical_findings(self) -> bool:
        return bool(self.diagnosis.strip() or self.treatment_plan.strip())

    def formatted_report(self) -> str:
        """Render the fixed-layout visit report.

        Empty diagnosis, treatment plan and notes are shown as ``N/A``.
        """

        return (
            "=== VISIT REPORT ===\n"
            f"Plan ID: {self.plan_id}\n"
            f"Patient: {self.patient.name}\n"
            f"Date: {self.date}\n"
            f"Purpose: {self.purpose or NOT_AVAILABLE}\n"
            f"Doctor: {self.doctor}\n"
            f"Status: {self.status}\n\n"
            f"Diagnosis: {self.diagnosis or NOT_AVAILABLE}\n\n"
            f"Treatment Plan:\n{self.treatment_plan or NOT_AVAILABLE}\n\n"
            f"Doctor Notes:\n{self.doctor_note or NOT_AVAILABLE}\n"
        )


__all__ = [
    "APPOINTMENT_CANCELLED",
    "APPOINTMENT_COMPLETED",
    "APPOINTMENT_SCHEDULED",
    "APPOINTMENT_STATUSES",
    "NOT_AVAILABLE",
    "PLAN_CANCELLED",
    "PLAN_COMPLETED",
    "PLAN_PLANNED",
    "PLAN_STATUSES",
    "Appointment",
    "Patient",
    "Payment",
    "VisitPlan",
]
