"""Coordinating facade over the clinic record structures.

:class:`RecordsFacade` is the only entry point collaborators (the CSV
importer, the command line, the dashboard) use. It validates preconditions
against the relevant structure, mutates state and returns a result or a
failure sentinel. Unknown identifiers and duplicates are reported as
``None``/``False``; nothing in here raises for them.

A single re-entrant lock serializes every operation, readers included, so
no caller ever observes a structure halfway through a mutation.
"""

from __future__ import annotations

import logging
import threading
from typing import List, Optional

from agents.reports import PATIENT_NOT_FOUND, ReportGenerator
from records import (
    Appointment,
    AppointmentQueue,
    BillingLedger,
    InvalidAmountError,
    LedgerBook,
    Patient,
    PatientIndex,
    VisitPlan,
    VisitPlanStore,
    WaitingList,
)
from records.billing import Amount

logger = logging.getLogger(__name__)

VISIT_PLAN_NOT_FOUND = "Visit plan not found."
INVALID_REPORT_TYPE = "Invalid report type."


class RecordsFacade:
    """Owns the patient index and every structure that refers to it."""

    def __init__(self, report_generator: Optional[ReportGenerator] = None) -> None:
        self._patients = PatientIndex()
        self._appointments = AppointmentQueue()
        self._waiting_list = WaitingList()
        self._ledgers = LedgerBook()
        self._visit_plans = VisitPlanStore()
        self._reports = report_generator or ReportGenerator()
        self._lock = threading.RLock()

    # Patients

    def add_patient(self, patient_id: int, name: str, age: int, contact: str) -> bool:
        """Register a patient and open their billing ledger.

        Returns ``False`` and changes nothing if ``patient_id`` is taken.
        """

        with self._lock:
            if self._patients.search(patient_id) is not None:
                logger.info("Rejected duplicate patient id %s", patient_id)
                return False
            patient = Patient(patient_id=patient_id, name=name, age=age, contact=contact)
            self._patients.insert(patient)
            self._ledgers.open(patient_id)
            logger.info("Added patient %s (%s)", patient_id, name)
            return True

    def find_patient(self, patient_id: int) -> Optional[Patient]:
        with self._lock:
            return self._patients.search(patient_id)

    def all_patients(self) -> List[Patient]:
        with self._lock:
            return self._patients.all_patients()

    def add_medical_history(self, patient_id: int, entry: str) -> bool:
        with self._lock:
            patient = self._patients.search(patient_id)
            if patient is None:
                return False
            patient.add_medical_history(entry)
            return True

    def add_visit_record(self, patient_id: int, record: str) -> bool:
        with self._lock:
            patient = self._patients.search(patient_id)
            if patient is None:
                return False
            patient.add_visit_record(record)
            return True

    def update_contact_info(self, patient_id: int, contact: str) -> bool:
        with self._lock:
            patient = self._patients.search(patient_id)
            if patient is None:
                return False
            patient.update_contact(contact)
            return True

    # Appointments

    def schedule_appointment(self, patient_id: int, date: str, time: str) -> Optional[Appointment]:
        with self._lock:
            patient = self._patients.search(patient_id)
            if patient is None:
                logger.debug("Cannot schedule appointment for unknown patient %s", patient_id)
                return None
            return self._appointments.schedule(patient, date, time)

    def cancel_appointment(self, appointment_id: int) -> bool:
        with self._lock:
            return self._appointments.cancel(appointment_id)

    def complete_appointment(self, appointment_id: int) -> bool:
        with self._lock:
            return self._appointments.complete(appointment_id)

    def reschedule_appointment(self, appointment_id: int, date: str, time: str) -> bool:
        with self._lock:
            return self._appointments.reschedule(appointment_id, date, time)

    def all_appointments(self) -> List[Appointment]:
        with self._lock:
            return self._appointments.all_appointments()

    def appointments_for_patient(self, patient_id: int) -> List[Appointment]:
        with self._lock:
            return self._appointments.for_patient(patient_id)

    # Waiting list

    def add_to_waiting_list(self, patient_id: int, priority: Optional[int] = None) -> bool:
        with self._lock:
            patient = self._patients.search(patient_id)
            if patient is None:
                logger.debug("Cannot queue unknown patient %s", patient_id)
                return False
            self._waiting_list.enqueue(patient, priority)
            return True

    def remove_from_waiting_list(self) -> Optional[Patient]:
        with self._lock:
            return self._waiting_list.dequeue()

    def peek_waiting_list(self) -> Optional[Patient]:
        with self._lock:
            return self._waiting_list.peek()

    def waiting_list_size(self) -> int:
        with self._lock:
            return self._waiting_list.size()

    def waiting_patients(self) -> List[Patient]:
        with self._lock:
            return self._waiting_list.all_waiting()

    # Billing

    def generate_bill(self, patient_id: int, amount: Amount) -> bool:
        with self._lock:
            ledger = self._ledgers.get(patient_id)
            if ledger is None:
                logger.debug("No ledger for patient %s", patient_id)
                return False
            try:
                return ledger.charge(amount)
            except InvalidAmountError as exc:
                logger.warning("Bill for patient %s rejected: %s", patient_id, exc)
                return False

    def add_payment(self, patient_id: int, amount: Amount, date: str) -> bool:
        with self._lock:
            ledger = self._ledgers.get(patient_id)
            if ledger is None:
                logger.debug("No ledger for patient %s", patient_id)
                return False
            try:
                return ledger.pay(amount, date)
            except InvalidAmountError as exc:
                logger.warning("Payment for patient %s rejected: %s", patient_id, exc)
                return False

    def billing_for(self, patient_id: int) -> Optional[BillingLedger]:
        with self._lock:
            return self._ledgers.get(patient_id)

    def all_billing(self) -> List[BillingLedger]:
        with self._lock:
            return self._ledgers.all_ledgers()

    # Visit plans

    def create_visit_plan(
        self, patient_id: int, date: str, purpose: str, doctor: str
    ) -> Optional[VisitPlan]:
        with self._lock:
            patient = self._patients.search(patient_id)
            if patient is None:
                logger.debug("Cannot plan a visit for unknown patient %s", patient_id)
                return None
            return self._visit_plans.create(patient, date, purpose, doctor)

    def set_visit_plan_status(self, plan_id: int, status: str) -> bool:
        with self._lock:
            return self._visit_plans.set_status(plan_id, status)

    def update_visit_plan_report(
        self,
        plan_id: int,
        diagnosis: Optional[str] = None,
        treatment_plan: Optional[str] = None,
        doctor_note: Optional[str] = None,
    ) -> bool:
        with self._lock:
            return self._visit_plans.update_report(
                plan_id,
                diagnosis=diagnosis,
                treatment_plan=treatment_plan,
                doctor_note=doctor_note,
            )

    def visit_plan_formatted_report(self, plan_id: int) -> str:
        with self._lock:
            report = self._visit_plans.formatted_report(plan_id)
            return report if report is not None else VISIT_PLAN_NOT_FOUND

    def find_visit_plan(self, plan_id: int) -> Optional[VisitPlan]:
        with self._lock:
            return self._visit_plans.find(plan_id)

    def visit_plans_for_patient(self, patient_id: int) -> List[VisitPlan]:
        with self._lock:
            return self._visit_plans.plans_for_patient(patient_id)

    def all_visit_plans(self) -> List[VisitPlan]:
        with self._lock:
            return self._visit_plans.all_plans()

    # Reports

    def generate_patient_report(self, patient_id: int) -> str:
        with self._lock:
            patient = self._patients.search(patient_id)
            if patient is None:
                return PATIENT_NOT_FOUND
            plans = self._visit_plans.plans_for_patient(patient_id)
            return self._reports.patient_report(patient, plans)

    def generate_appointment_report(self) -> str:
        with self._lock:
            return self._reports.appointment_report(self._appointments.all_appointments())

    def generate_revenue_report(self) -> str:
        with self._lock:
            return self._reports.revenue_report(self._ledgers.all_ledgers())

    def generate_report(self, report_type: str, patient_id: Optional[int] = None) -> str:
        kind = (report_type or "").strip().lower()
        if kind == "patient":
            if patient_id is None:
                return PATIENT_NOT_FOUND
            return self.generate_patient_report(patient_id)
        if kind == "appointment":
            return self.generate_appointment_report()
        if kind == "revenue":
            return self.generate_revenue_report()
        return INVALID_REPORT_TYPE


__all__ = ["INVALID_REPORT_TYPE", "VISIT_PLAN_NOT_FOUND", "RecordsFacade"]
