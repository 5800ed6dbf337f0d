import unittest

from orchestrator.facade import RecordsFacade
from records import APPOINTMENT_CANCELLED, APPOINTMENT_COMPLETED, APPOINTMENT_SCHEDULED


class AppointmentSchedulingTests(unittest.TestCase):
    def setUp(self) -> None:
        self.records = RecordsFacade()
        self.records.add_patient(1, "Ada Lovelace", 36, "ada@example.com")
        self.records.add_patient(2, "Alan Turing", 41, "alan@example.com")

    def test_schedule_appointment_success(self) -> None:
        appointment = self.records.schedule_appointment(1, "2024-05-01", "09:30")

        self.assertIsNotNone(appointment)
        self.assertEqual(appointment.appointment_id, 1)
        self.assertEqual(appointment.patient.patient_id, 1)
        self.assertEqual(appointment.date, "2024-05-01")
        self.assertEqual(appointment.time, "09:30")
        self.assertEqual(appointment.status, APPOINTMENT_SCHEDULED)

    def test_schedule_requires_registered_patient(self) -> None:
        self.assertIsNone(self.records.schedule_appointment(999, "2024-05-01", "09:30"))
        self.assertEqual(self.records.all_appointments(), [])

    def test_failed_schedule_does_not_consume_an_identifier(self) -> None:
        first = self.records.schedule_appointment(1, "2024-05-01", "09:30")
        missing = self.records.schedule_appointment(999, "2024-05-02", "10:00")
        second = self.records.schedule_appointment(2, "2024-05-03", "11:00")

        self.assertIsNone(missing)
        self.assertEqual(first.appointment_id, 1)
        self.assertEqual(second.appointment_id, 2)

    def test_cancel_appointment(self) -> None:
        appointment = self.records.schedule_appointment(1, "2024-05-01", "09:30")

        self.assertTrue(self.records.cancel_appointment(appointment.appointment_id))
        self.assertEqual(appointment.status, APPOINTMENT_CANCELLED)

    def test_cancel_nonexistent_appointment_returns_false(self) -> None:
        self.assertFalse(self.records.cancel_appointment(999))

    def test_reschedule_resets_status(self) -> None:
        appointment = self.records.schedule_appointment(1, "2024-05-01", "09:30")
        self.records.cancel_appointment(appointment.appointment_id)

        self.assertTrue(
            self.records.reschedule_appointment(appointment.appointment_id, "2024-06-01", "14:00")
        )
        self.assertEqual(appointment.date, "2024-06-01")
        self.assertEqual(appointment.time, "14:00")
        self.assertEqual(appointment.status, APPOINTMENT_SCHEDULED)

    def test_reschedule_nonexistent_appointment_returns_false(self) -> None:
        self.assertFalse(self.records.reschedule_appointment(5, "2024-06-01", "14:00"))

    def test_complete_appointment(self) -> None:
        appointment = self.records.schedule_appointment(2, "2024-05-01", "09:30")

        self.assertTrue(self.records.complete_appointment(appointment.appointment_id))
        self.assertEqual(appointment.status, APPOINTMENT_COMPLETED)
        self.assertFalse(self.records.complete_appointment(42))

    def test_all_appointments_preserves_arrival_order(self) -> None:
        self.records.schedule_appointment(1, "2024-03-01", "09:00")
        self.records.schedule_appointment(2, "2024-01-15", "10:00")
        self.records.schedule_appointment(1, "2024-02-10", "11:00")

        appointments = self.records.all_appointments()
        self.assertEqual([item.appointment_id for item in appointments], [1, 2, 3])
        self.assertEqual(
            [item.date for item in appointments], ["2024-03-01", "2024-01-15", "2024-02-10"]
        )

    def test_appointments_for_patient_in_arrival_order(self) -> None:
        self.records.schedule_appointment(2, "2024-03-01", "09:00")
        self.records.schedule_appointment(1, "2024-01-15", "10:00")
        self.records.schedule_appointment(2, "2024-02-10", "11:00")

        appointments = self.records.appointments_for_patient(2)

        self.assertEqual([item.appointment_id for item in appointments], [1, 3])
        self.assertEqual(self.records.appointments_for_patient(999), [])

    def test_all_appointments_returns_a_snapshot(self) -> None:
        self.records.schedule_appointment(1, "2024-03-01", "09:00")

        snapshot = self.records.all_appointments()
        snapshot.clear()

        self.assertEqual(len(self.records.all_appointments()), 1)


if __name__ == "__main__":
    unittest.main()
