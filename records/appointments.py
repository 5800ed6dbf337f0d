"""Arrival-ordered appointment queue."""

from __future__ import annotations

import logging
from collections import deque
from typing import Deque, List, Optional

from .models import Appointment, Patient

logger = logging.getLogger(__name__)


class AppointmentQueue:
    """Appointments kept in the order they were scheduled.

    Identifiers are handed out sequentially starting at 1. Lookups by
    identifier scan in arrival order and report a miss as ``None``/``False``.
    """

    def __init__(self) -> None:
        self._queue: Deque[Appointment] = deque()
        self._sequence: int = 1

    def __len__(self) -> int:
        return len(self._queue)

    def schedule(self, patient: Patient, date: str, time: str) -> Appointment:
        appointment = Appointment(
            appointment_id=self._sequence,
            patient=patient,
            date=date,
            time=time,
        )
        self._sequence += 1
        self._queue.append(appointment)
        logger.info(
            "Scheduled appointment %s for patient %s on %s at %s",
            appointment.appointment_id,
            patient.patient_id,
            date,
            time,
        )
        return appointment

    def find(self, appointment_id: int) -> Optional[Appointment]:
        for appointment in self._queue:
            if appointment.appointment_id == appointment_id:
                return appointment
        logger.debug("Appointment %s not found", appointment_id)
        return None

    def cancel(self, appointment_id: int) -> bool:
        appointment = self.find(appointment_id)
        if appointment is None:
            return False
        appointment.cancel()
        return True

    def complete(self, appointment_id: int) -> bool:
        appointment = self.find(appointment_id)
        if appointment is None:
            return False
        appointment.complete()
        return True

    def reschedule(self, appointment_id: int, date: str, time: str) -> bool:
        appointment = self.find(appointment_id)
        if appointment is None:
            return False
        appointment.reschedule(date, time)
        return True

    def all_appointments(self) -> List[Appointment]:
        """Snapshot of every appointment in arrival order."""

        return list(self._queue)

    def for_patient(self, patient_id: int) -> List[Appointment]:
        return [
            appointment
            for appointment in self._queue
            if appointment.patient.patient_id == patient_id
        ]


__all__ = ["AppointmentQueue"]
