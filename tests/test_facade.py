import threading
import unittest
from decimal import Decimal

from agents.reports import PATIENT_NOT_FOUND
from orchestrator.facade import INVALID_REPORT_TYPE, VISIT_PLAN_NOT_FOUND, RecordsFacade


class PatientOperationsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.records = RecordsFacade()

    def test_add_patient_opens_a_ledger(self) -> None:
        self.assertTrue(self.records.add_patient(7, "Ada Lovelace", 36, "ada@example.com"))

        ledger = self.records.billing_for(7)
        self.assertIsNotNone(ledger)
        self.assertEqual(ledger.balance, Decimal("0.00"))
        self.assertEqual(ledger.status(), "Paid")

    def test_duplicate_identifier_leaves_first_record_untouched(self) -> None:
        self.records.add_patient(7, "Ada Lovelace", 36, "ada@example.com")

        self.assertFalse(self.records.add_patient(7, "Someone Else", 90, "other@example.com"))

        patient = self.records.find_patient(7)
        self.assertEqual((patient.name, patient.age, patient.contact), ("Ada Lovelace", 36, "ada@example.com"))
        self.assertEqual(len(self.records.all_billing()), 1)

    def test_all_patients_sorted_by_identifier(self) -> None:
        for patient_id in (50, 10, 70, 5):
            self.records.add_patient(patient_id, f"Patient {patient_id}", 30, "")

        self.assertEqual([patient.patient_id for patient in self.records.all_patients()], [5, 10, 50, 70])

    def test_patient_mutations(self) -> None:
        self.records.add_patient(1, "Ada Lovelace", 36, "old@example.com")

        self.assertTrue(self.records.add_medical_history(1, "Asthma"))
        self.assertTrue(self.records.add_visit_record(1, "2024-01-01"))
        self.assertTrue(self.records.update_contact_info(1, "new@example.com"))

        patient = self.records.find_patient(1)
        self.assertEqual(patient.medical_history, ["Asthma"])
        self.assertEqual(patient.visit_records, ["2024-01-01"])
        self.assertEqual(patient.contact, "new@example.com")

    def test_mutations_on_unknown_patient_fail(self) -> None:
        self.assertIsNone(self.records.find_patient(1))
        self.assertFalse(self.records.add_medical_history(1, "Asthma"))
        self.assertFalse(self.records.add_visit_record(1, "2024-01-01"))
        self.assertFalse(self.records.update_contact_info(1, "x"))
        self.assertFalse(self.records.add_to_waiting_list(1))
        self.assertFalse(self.records.generate_bill(1, 10))
        self.assertFalse(self.records.add_payment(1, 10, "2024-01-01"))
        self.assertIsNone(self.records.create_visit_plan(1, "2024-01-01", "Checkup", ""))


class WaitingListOperationsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.records = RecordsFacade()
        for patient_id, age in ((1, 30), (2, 70), (3, 45)):
            self.records.add_patient(patient_id, f"Patient {patient_id}", age, "")

    def test_oldest_patient_is_served_first(self) -> None:
        for patient_id in (1, 2, 3):
            self.assertTrue(self.records.add_to_waiting_list(patient_id))

        self.assertEqual(self.records.waiting_list_size(), 3)
        self.assertEqual(self.records.peek_waiting_list().patient_id, 2)
        served = [self.records.remove_from_waiting_list().patient_id for _ in range(3)]

        self.assertEqual(served, [2, 3, 1])
        self.assertIsNone(self.records.remove_from_waiting_list())
        self.assertEqual(self.records.waiting_patients(), [])


class BillingOperationsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.records = RecordsFacade()
        self.records.add_patient(1, "Ada Lovelace", 36, "")

    def test_bill_and_payments(self) -> None:
        self.assertTrue(self.records.generate_bill(1, "200"))
        self.assertTrue(self.records.add_payment(1, "50.25", "2024-02-01"))

        ledger = self.records.billing_for(1)
        self.assertEqual(ledger.balance, Decimal("149.75"))
        self.assertEqual(ledger.status(), "Pending: $149.75")

    def test_invalid_amounts_are_reported_as_failure(self) -> None:
        with self.assertLogs("orchestrator.facade", level="WARNING"):
            self.assertFalse(self.records.generate_bill(1, "abc"))
        with self.assertLogs("orchestrator.facade", level="WARNING"):
            self.assertFalse(self.records.add_payment(1, "abc", "2024-02-01"))

        self.assertEqual(self.records.billing_for(1).balance, Decimal("0.00"))


class VisitPlanOperationsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.records = RecordsFacade()
        self.records.add_patient(1, "Ada Lovelace", 36, "")

    def test_completed_plan_feeds_patient_report(self) -> None:
        plan = self.records.create_visit_plan(1, "2024-03-01", "Checkup", "Dr. Who")
        self.records.update_visit_plan_report(plan.plan_id, diagnosis="Flu", treatment_plan="Rest")

        self.assertTrue(self.records.set_visit_plan_status(plan.plan_id, "Completed"))

        report = self.records.generate_patient_report(1)
        self.assertIn("- 2024-03-01\n", report)
        self.assertIn("Diagnosis: Flu\nTreatment Plan:\nRest\n", report)
        self.assertIs(self.records.find_visit_plan(plan.plan_id), plan)
        self.assertEqual(self.records.visit_plans_for_patient(1), [plan])
        self.assertEqual(self.records.all_visit_plans(), [plan])

    def test_missing_plan_sentinels(self) -> None:
        self.assertEqual(self.records.visit_plan_formatted_report(3), VISIT_PLAN_NOT_FOUND)
        self.assertFalse(self.records.set_visit_plan_status(3, "Completed"))
        self.assertFalse(self.records.update_visit_plan_report(3, diagnosis="Flu"))
        self.assertIsNone(self.records.find_visit_plan(3))


class ReportDispatchTests(unittest.TestCase):
    def setUp(self) -> None:
        self.records = RecordsFacade()
        self.records.add_patient(1, "Ada Lovelace", 36, "")

    def test_dispatch_by_report_type(self) -> None:
        self.assertTrue(self.records.generate_report("patient", 1).startswith("PATIENT REPORT"))
        self.assertTrue(self.records.generate_report("Appointment").startswith("=== APPOINTMENT REPORT ==="))
        self.assertTrue(self.records.generate_report(" revenue ").startswith("=== REVENUE REPORT ==="))

    def test_dispatch_failures(self) -> None:
        self.assertEqual(self.records.generate_report("patient", 2), PATIENT_NOT_FOUND)
        self.assertEqual(self.records.generate_report("patient"), PATIENT_NOT_FOUND)
        self.assertEqual(self.records.generate_report("summary"), INVALID_REPORT_TYPE)
        self.assertEqual(self.records.generate_patient_report(99), PATIENT_NOT_FOUND)


class ConcurrencyTests(unittest.TestCase):
    def test_parallel_registrations_and_bills(self) -> None:
        records = RecordsFacade()

        def register(offset: int) -> None:
            for patient_id in range(offset, offset + 50):
                records.add_patient(patient_id, f"Patient {patient_id}", 40, "")
                records.generate_bill(patient_id, 10)

        threads = [threading.Thread(target=register, args=(offset,)) for offset in (0, 50, 100, 150)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual([patient.patient_id for patient in records.all_patients()], list(range(200)))
        self.assertIn("Total Outstanding Revenue: $2000.00", records.generate_revenue_report())


if __name__ == "__main__":
    unittest.main()
