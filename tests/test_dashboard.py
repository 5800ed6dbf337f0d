import unittest
from unittest.mock import patch

from orchestrator.facade import RecordsFacade
from ui import dashboard


class DashboardApiTests(unittest.TestCase):
    def setUp(self) -> None:
        self.records = RecordsFacade()
        self.records.add_patient(1, "Ada Lovelace", 36, "ada@example.com")
        self.records.add_patient(2, "Alan Turing", 71, "alan@example.com")
        patcher = patch("ui.dashboard.records", self.records)
        patcher.start()
        self.addCleanup(patcher.stop)
        dashboard.app.config["TESTING"] = True
        self.client = dashboard.app.test_client()

    def test_list_and_get_patients(self) -> None:
        response = self.client.get("/patients")

        self.assertEqual(response.status_code, 200)
        self.assertEqual([item["patient_id"] for item in response.get_json()], [1, 2])

        response = self.client.get("/patients/2")
        self.assertEqual(response.get_json()["name"], "Alan Turing")
        self.assertEqual(self.client.get("/patients/9").status_code, 404)

    def test_create_patient(self) -> None:
        response = self.client.post(
            "/patients", json={"patient_id": 3, "name": "Grace Hopper", "age": 79, "contact": "g@example.com"}
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.get_json()["medical_history"], [])
        self.assertIsNotNone(self.records.billing_for(3))

    def test_create_patient_rejects_duplicates_and_bad_payloads(self) -> None:
        duplicate = self.client.post("/patients", json={"patient_id": 1, "name": "Other", "age": 20})
        bad_age = self.client.post("/patients", json={"patient_id": 4, "name": "Other", "age": "20"})
        no_body = self.client.post("/patients", data="not json", content_type="text/plain")

        self.assertEqual(duplicate.status_code, 409)
        self.assertEqual(bad_age.status_code, 400)
        self.assertIn("age", bad_age.get_json()["error"])
        self.assertEqual(no_body.status_code, 400)
        self.assertEqual(self.records.find_patient(1).name, "Ada Lovelace")

    def test_appointment_lifecycle(self) -> None:
        created = self.client.post("/appointments", json={"patient_id": 1, "date": "2024-05-01", "time": "09:30"})
        self.assertEqual(created.status_code, 201)
        appointment_id = created.get_json()["appointment_id"]

        rescheduled = self.client.post(
            f"/appointments/{appointment_id}/reschedule", json={"date": "2024-05-02", "time": "10:00"}
        )
        completed = self.client.post(f"/appointments/{appointment_id}/complete")

        self.assertEqual(rescheduled.status_code, 200)
        self.assertEqual(completed.get_json()["status"], "Completed")
        listing = self.client.get("/appointments").get_json()
        self.assertEqual(listing[0]["date"], "2024-05-02")
        self.assertEqual(listing[0]["status"], "Completed")
        self.assertEqual(len(self.client.get("/patients/1/appointments").get_json()), 1)
        self.assertEqual(self.client.get("/patients/2/appointments").get_json(), [])
        self.assertEqual(self.client.get("/patients/9/appointments").status_code, 404)
        self.assertEqual(self.client.post("/appointments/99/cancel").status_code, 404)
        self.assertEqual(
            self.client.post("/appointments", json={"patient_id": 9, "date": "2024-05-01", "time": "09:30"}).status_code,
            404,
        )

    def test_waiting_list(self) -> None:
        self.client.post("/waiting-list", json={"patient_id": 1})
        self.client.post("/waiting-list", json={"patient_id": 2})

        self.assertEqual(len(self.client.get("/waiting-list").get_json()), 2)
        self.assertEqual(self.client.post("/waiting-list/next").get_json()["patient_id"], 2)
        self.assertEqual(self.client.post("/waiting-list/next").get_json()["patient_id"], 1)
        self.assertEqual(self.client.post("/waiting-list/next").status_code, 404)
        self.assertEqual(self.client.post("/waiting-list", json={"patient_id": 9}).status_code, 404)

    def test_billing(self) -> None:
        charged = self.client.post("/billing/1/charges", json={"amount": "120.50"})
        paid = self.client.post("/billing/1/payments", json={"amount": 20, "date": "2024-02-01"})

        self.assertEqual(charged.get_json()["balance"], "120.50")
        self.assertEqual(paid.get_json()["balance"], "100.50")
        self.assertEqual(paid.get_json()["payments"], [{"amount": "20.00", "date": "2024-02-01"}])
        self.assertEqual(self.client.post("/billing/1/charges", json={"amount": -5}).status_code, 400)
        self.assertEqual(self.client.post("/billing/9/charges", json={"amount": 5}).status_code, 404)
        self.assertEqual(self.client.get("/billing/9").status_code, 404)
        self.assertEqual(len(self.client.get("/billing").get_json()), 2)

    def test_visit_plan_flow(self) -> None:
        created = self.client.post(
            "/visit-plans", json={"patient_id": 1, "date": "2024-03-01", "purpose": "Checkup", "doctor": "Dr. Who"}
        )
        plan_id = created.get_json()["plan_id"]

        report = self.client.post(f"/visit-plans/{plan_id}/report", json={"diagnosis": "Flu"})
        status = self.client.post(f"/visit-plans/{plan_id}/status", json={"status": "Completed"})
        bad_status = self.client.post(f"/visit-plans/{plan_id}/status", json={"status": "Postponed"})

        self.assertEqual(created.status_code, 201)
        self.assertIn("Diagnosis: Flu", report.get_data(as_text=True))
        self.assertEqual(status.status_code, 200)
        self.assertEqual(bad_status.status_code, 400)
        self.assertEqual(self.records.find_patient(1).visit_records, ["2024-03-01"])
        self.assertEqual(len(self.client.get("/patients/1/visit-plans").get_json()), 1)
        self.assertEqual(self.client.get("/visit-plans/42/report").status_code, 404)
        self.assertEqual(self.client.post("/visit-plans/42/status", json={"status": "Completed"}).status_code, 404)

    def test_text_reports(self) -> None:
        self.records.generate_bill(2, 75)

        patient_report = self.client.get("/patients/1/report")
        revenue = self.client.get("/reports/revenue")
        appointments = self.client.get("/reports/appointments")

        self.assertTrue(patient_report.get_data(as_text=True).startswith("PATIENT REPORT"))
        self.assertIn("Total Outstanding Revenue: $75.00", revenue.get_data(as_text=True))
        self.assertIn("Total Appointments: 0", appointments.get_data(as_text=True))
        self.assertEqual(self.client.get("/patients/9/report").status_code, 404)

    def test_dashboard_page(self) -> None:
        self.records.add_to_waiting_list(2)

        response = self.client.get("/dashboard")

        self.assertEqual(response.status_code, 200)
        body = response.get_data(as_text=True)
        self.assertIn("Ada Lovelace", body)
        self.assertIn("Next: <strong>Alan Turing</strong>", body)
        self.assertIn("=== REVENUE REPORT ===", body)


if __name__ == "__main__":
    unittest.main()
