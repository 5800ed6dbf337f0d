"""Visit plans and the clinical report fields attached to them."""

from __future__ import annotations

import logging
from typing import List, Optional

from .models import PLAN_COMPLETED, PLAN_STATUSES, Patient, VisitPlan

logger = logging.getLogger(__name__)


class VisitPlanStore:
    """Visit plans in creation order with sequential identifiers."""

    def __init__(self) -> None:
        self._plans: List[VisitPlan] = []
        self._sequence: int = 1

    def __len__(self) -> int:
        return len(self._plans)

    def create(self, patient: Patient, date: str, purpose: str, doctor: str) -> VisitPlan:
        plan = VisitPlan(
            plan_id=self._sequence,
            patient=patient,
            date=date or "",
            purpose=purpose or "",
            doctor=doctor or "",
        )
        self._sequence += 1
        self._plans.append(plan)
        logger.info("Created visit plan %s for patient %s", plan.plan_id, patient.patient_id)
        return plan

    def find(self, plan_id: int) -> Optional[VisitPlan]:
        for plan in self._plans:
            if plan.plan_id == plan_id:
                return plan
        logger.debug("Visit plan %s not found", plan_id)
        return None

    def set_status(self, plan_id: int, status: str) -> bool:
        """Move a plan to ``status``.

        Completing a plan records its date on the patient's visit history.
        Unknown plans and statuses outside Planned/Completed/Cancelled are
        rejected.
        """

        plan = self.find(plan_id)
        if plan is None:
            return False
        if status not in PLAN_STATUSES:
            logger.warning("Rejected unknown visit plan status %r for plan %s", status, plan_id)
            return False

        plan.status = status
        if status == PLAN_COMPLETED and plan.date:
            plan.patient.add_visit_record(plan.date)
        return True

    def update_report(
        self,
        plan_id: int,
        diagnosis: Optional[str] = None,
        treatment_plan: Optional[str] = None,
        doctor_note: Optional[str] = None,
    ) -> bool:
        plan = self.find(plan_id)
        if plan is None:
            return False
        if diagnosis:
            plan.diagnosis = diagnosis
        if treatment_plan:
            plan.treatment_plan = treatment_plan
        if doctor_note:
            plan.doctor_note = doctor_note
        return True

    def formatted_report(self, plan_id: int) -> Optional[str]:
        plan = self.find(plan_id)
        return plan.formatted_report() if plan is not None else None

    def plans_for_patient(self, patient_id: int) -> List[VisitPlan]:
        return [plan for plan in self._plans if plan.patient.patient_id == patient_id]

    def all_plans(self) -> List[VisitPlan]:
        return list(self._plans)


__all__ = ["VisitPlanStore"]
