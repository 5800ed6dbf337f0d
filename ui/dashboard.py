"""Dashboard web application for the clinic records engine.

This module exposes a small Flask application over a module-level
:class:`~orchestrator.facade.RecordsFacade`. JSON endpoints drive every
facade operation, report endpoints return the plain-text reports, and
``/dashboard`` renders an overview page. Patients can be preloaded from the
CSV file named by ``RECORDS_CSV_PATH``.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, MutableMapping, Optional, Tuple

from flask import Flask, Response, jsonify, render_template_string, request

from agents.importer import import_healthcare_csv
from orchestrator.facade import VISIT_PLAN_NOT_FOUND, RecordsFacade
from records import Appointment, BillingLedger, Patient, VisitPlan

logger = logging.getLogger(__name__)


class PayloadError(ValueError):
    """Raised when a request body is missing fields or has the wrong types."""


def _load_records(csv_path: Optional[str] = None) -> RecordsFacade:
    facade = RecordsFacade()
    csv_path = csv_path or os.getenv("RECORDS_CSV_PATH")
    if csv_path and Path(csv_path).exists():
        imported = import_healthcare_csv(facade, csv_path)
        logger.info("Preloaded %d patients from %s", imported, csv_path)
    elif csv_path:
        logger.warning("RECORDS_CSV_PATH %s does not exist; starting empty", csv_path)
    return facade


def patient_payload(patient: Patient) -> Dict[str, Any]:
    return {
        "patient_id": patient.patient_id,
        "name": patient.name,
        "age": patient.age,
        "contact": patient.contact,
        "medical_history": list(patient.medical_history),
        "visit_records": list(patient.visit_records),
    }


def appointment_payload(appointment: Appointment) -> Dict[str, Any]:
    return {
        "appointment_id": appointment.appointment_id,
        "patient_id": appointment.patient.patient_id,
        "patient_name": appointment.patient.name,
        "date": appointment.date,
        "time": appointment.time,
        "status": appointment.status,
    }


def ledger_payload(ledger: BillingLedger) -> Dict[str, Any]:
    return {
        "patient_id": ledger.patient_id,
        "balance": f"{ledger.balance:.2f}",
        "status": ledger.status(),
        "payments": [
            {"amount": f"{payment.amount:.2f}", "date": payment.date}
            for payment in ledger.payments
        ],
    }


def visit_plan_payload(plan: VisitPlan) -> Dict[str, Any]:
    return {
        "plan_id": plan.plan_id,
        "patient_id": plan.patient.patient_id,
        "date": plan.date,
        "purpose": plan.purpose,
        "doctor": plan.doctor,
        "status": plan.status,
        "diagnosis": plan.diagnosis,
        "treatment_plan": plan.treatment_plan,
        "doctor_note": plan.doctor_note,
    }


def _payload() -> MutableMapping[str, Any]:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise PayloadError("Request body must be a JSON object")
    return payload


def _require_int(payload: MutableMapping[str, Any], field: str) -> int:
    value = payload.get(field)
    if isinstance(value, bool) or not isinstance(value, int):
        raise PayloadError(f"'{field}' must be an integer")
    return value


def _require_str(payload: MutableMapping[str, Any], field: str) -> str:
    value = payload.get(field)
    if not isinstance(value, str) or not value.strip():
        raise PayloadError(f"'{field}' must be a non-empty string")
    return value.strip()


def _optional_str(payload: MutableMapping[str, Any], field: str) -> Optional[str]:
    value = payload.get(field)
    if value is None:
        return None
    if not isinstance(value, str):
        raise PayloadError(f"'{field}' must be a string")
    return value


def _require_amount(payload: MutableMapping[str, Any], field: str) -> Any:
    value = payload.get(field)
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise PayloadError(f"'{field}' must be a number")
    return value


def _text(body: str, status: int = 200) -> Response:
    return Response(body, status=status, mimetype="text/plain")


def _not_found(message: str) -> Tuple[Response, int]:
    return jsonify({"error": message}), 404


app = Flask(__name__)
records = _load_records()


@app.errorhandler(PayloadError)
def handle_payload_error(exc: PayloadError) -> Tuple[Response, int]:
    return jsonify({"error": str(exc)}), 400


@app.route("/patients", methods=["GET"])
def list_patients() -> Response:
    return jsonify([patient_payload(patient) for patient in records.all_patients()])


@app.route("/patients", methods=["POST"])
def create_patient() -> Tuple[Response, int]:
    payload = _payload()
    patient_id = _require_int(payload, "patient_id")
    age = _require_int(payload, "age")
    name = _require_str(payload, "name")
    contact = _optional_str(payload, "contact") or ""
    if not records.add_patient(patient_id, name, age, contact):
        return jsonify({"error": f"Patient {patient_id} already exists"}), 409
    return jsonify(patient_payload(records.find_patient(patient_id))), 201


@app.route("/patients/<int:patient_id>", methods=["GET"])
def get_patient(patient_id: int):
    patient = records.find_patient(patient_id)
    if patient is None:
        return _not_found(f"Patient {patient_id} not found")
    return jsonify(patient_payload(patient))


@app.route("/patients/<int:patient_id>/report", methods=["GET"])
def patient_report(patient_id: int) -> Response:
    if records.find_patient(patient_id) is None:
        return _text(records.generate_patient_report(patient_id), status=404)
    return _text(records.generate_patient_report(patient_id))


@app.route("/appointments", methods=["GET"])
def list_appointments() -> Response:
    return jsonify([appointment_payload(item) for item in records.all_appointments()])


@app.route("/appointments", methods=["POST"])
def create_appointment():
    payload = _payload()
    patient_id = _require_int(payload, "patient_id")
    appointment = records.schedule_appointment(
        patient_id, _require_str(payload, "date"), _require_str(payload, "time")
    )
    if appointment is None:
        return _not_found(f"Patient {patient_id} not found")
    return jsonify(appointment_payload(appointment)), 201


@app.route("/patients/<int:patient_id>/appointments", methods=["GET"])
def patient_appointments(patient_id: int):
    if records.find_patient(patient_id) is None:
        return _not_found(f"Patient {patient_id} not found")
    return jsonify([appointment_payload(item) for item in records.appointments_for_patient(patient_id)])


@app.route("/appointments/<int:appointment_id>/cancel", methods=["POST"])
def cancel_appointment(appointment_id: int):
    if not records.cancel_appointment(appointment_id):
        return _not_found(f"Appointment {appointment_id} not found")
    return jsonify({"appointment_id": appointment_id, "status": "Cancelled"})


@app.route("/appointments/<int:appointment_id>/complete", methods=["POST"])
def complete_appointment(appointment_id: int):
    if not records.complete_appointment(appointment_id):
        return _not_found(f"Appointment {appointment_id} not found")
    return jsonify({"appointment_id": appointment_id, "status": "Completed"})


@app.route("/appointments/<int:appointment_id>/reschedule", methods=["POST"])
def reschedule_appointment(appointment_id: int):
    payload = _payload()
    date = _require_str(payload, "date")
    time = _require_str(payload, "time")
    if not records.reschedule_appointment(appointment_id, date, time):
        return _not_found(f"Appointment {appointment_id} not found")
    return jsonify({"appointment_id": appointment_id, "date": date, "time": time, "status": "Scheduled"})


@app.route("/waiting-list", methods=["GET"])
def waiting_list() -> Response:
    return jsonify([patient_payload(patient) for patient in records.waiting_patients()])


@app.route("/waiting-list", methods=["POST"])
def join_waiting_list():
    payload = _payload()
    patient_id = _require_int(payload, "patient_id")
    priority = payload.get("priority")
    if priority is not None:
        priority = _require_int(payload, "priority")
    if not records.add_to_waiting_list(patient_id, priority):
        return _not_found(f"Patient {patient_id} not found")
    return jsonify({"patient_id": patient_id, "waiting": records.waiting_list_size()}), 201


@app.route("/waiting-list/next", methods=["POST"])
def serve_next_patient():
    patient = records.remove_from_waiting_list()
    if patient is None:
        return _not_found("Waiting list is empty")
    return jsonify(patient_payload(patient))


@app.route("/billing", methods=["GET"])
def list_billing() -> Response:
    return jsonify([ledger_payload(ledger) for ledger in records.all_billing()])


@app.route("/billing/<int:patient_id>", methods=["GET"])
def get_billing(patient_id: int):
    ledger = records.billing_for(patient_id)
    if ledger is None:
        return _not_found(f"No billing ledger for patient {patient_id}")
    return jsonify(ledger_payload(ledger))


@app.route("/billing/<int:patient_id>/charges", methods=["POST"])
def add_charge(patient_id: int):
    amount = _require_amount(_payload(), "amount")
    if records.billing_for(patient_id) is None:
        return _not_found(f"No billing ledger for patient {patient_id}")
    if not records.generate_bill(patient_id, amount):
        raise PayloadError("'amount' must be a positive number")
    return jsonify(ledger_payload(records.billing_for(patient_id)))


@app.route("/billing/<int:patient_id>/payments", methods=["POST"])
def add_payment(patient_id: int):
    payload = _payload()
    amount = _require_amount(payload, "amount")
    date = _require_str(payload, "date")
    if records.billing_for(patient_id) is None:
        return _not_found(f"No billing ledger for patient {patient_id}")
    if not records.add_payment(patient_id, amount, date):
        raise PayloadError("'amount' must be a positive number")
    return jsonify(ledger_payload(records.billing_for(patient_id)))


@app.route("/visit-plans", methods=["POST"])
def create_visit_plan():
    payload = _payload()
    patient_id = _require_int(payload, "patient_id")
    plan = records.create_visit_plan(
        patient_id,
        _require_str(payload, "date"),
        _optional_str(payload, "purpose") or "",
        _optional_str(payload, "doctor") or "",
    )
    if plan is None:
        return _not_found(f"Patient {patient_id} not found")
    return jsonify(visit_plan_payload(plan)), 201


@app.route("/patients/<int:patient_id>/visit-plans", methods=["GET"])
def patient_visit_plans(patient_id: int) -> Response:
    return jsonify([visit_plan_payload(plan) for plan in records.visit_plans_for_patient(patient_id)])


@app.route("/visit-plans/<int:plan_id>/status", methods=["POST"])
def set_visit_plan_status(plan_id: int):
    status = _require_str(_payload(), "status")
    if not records.set_visit_plan_status(plan_id, status):
        if records.find_visit_plan(plan_id) is None:
            return _not_found(VISIT_PLAN_NOT_FOUND)
        raise PayloadError(f"Unsupported visit plan status '{status}'")
    return jsonify({"plan_id": plan_id, "status": status})


@app.route("/visit-plans/<int:plan_id>/report", methods=["POST"])
def update_visit_plan_report(plan_id: int):
    payload = _payload()
    updated = records.update_visit_plan_report(
        plan_id,
        diagnosis=_optional_str(payload, "diagnosis"),
        treatment_plan=_optional_str(payload, "treatment_plan"),
        doctor_note=_optional_str(payload, "doctor_note"),
    )
    if not updated:
        return _not_found(VISIT_PLAN_NOT_FOUND)
    return _text(records.visit_plan_formatted_report(plan_id))


@app.route("/visit-plans/<int:plan_id>/report", methods=["GET"])
def visit_plan_report(plan_id: int) -> Response:
    report = records.visit_plan_formatted_report(plan_id)
    return _text(report, status=404 if report == VISIT_PLAN_NOT_FOUND else 200)


@app.route("/reports/appointments", methods=["GET"])
def appointment_report() -> Response:
    return _text(records.generate_appointment_report())


@app.route("/reports/revenue", methods=["GET"])
def revenue_report() -> Response:
    return _text(records.generate_revenue_report())


def build_dashboard_context(facade: RecordsFacade) -> MutableMapping[str, object]:
    patients: List[Dict[str, Any]] = []
    for patient in facade.all_patients():
        ledger = facade.billing_for(patient.patient_id)
        entry = patient_payload(patient)
        entry["billing"] = ledger.status() if ledger is not None else "N/A"
        patients.append(entry)

    next_patient = facade.peek_waiting_list()
    return {
        "patients": patients,
        "appointments": [appointment_payload(item) for item in facade.all_appointments()],
        "waiting": [patient_payload(patient) for patient in facade.waiting_patients()],
        "next_patient": patient_payload(next_patient) if next_patient else None,
        "revenue_report": facade.generate_revenue_report(),
    }


dashboard_template = """
<!doctype html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\">
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\">
    <meta http-equiv=\"refresh\" content=\"60\">
    <title>Clinic Records Dashboard</title>
    <link
      href=\"https://cdn.jsdelivr.net/npm/bootstrap@5.3.3/dist/css/bootstrap.min.css\"
      rel=\"stylesheet\"
      integrity=\"sha384-QWTKZyjpPEjISv5WaRU9OFeRpok6YctnYmDr5pNlyT2bRjXh0JMhjY6hW+ALEwIH\"
      crossorigin=\"anonymous\"
    >
  </head>
  <body class=\"bg-light\">
    <nav class=\"navbar navbar-expand-lg navbar-dark bg-primary\">
      <div class=\"container-fluid\">
        <a class=\"navbar-brand\" href=\"#\">Clinic Records Dashboard</a>
      </div>
    </nav>
    <main class=\"container my-4\">
      <section class=\"row g-4\">
        <div class=\"col-lg-6\">
          <div class=\"card shadow-sm h-100\">
            <div class=\"card-header bg-success text-white\">Patients</div>
            <div class=\"card-body\">
              {% if patients %}
                <div class=\"table-responsive\">
                  <table class=\"table table-sm table-striped\">
                    <thead>
                      <tr>
                        <th scope=\"col\">ID</th>
                        <th scope=\"col\">Name</th>
                        <th scope=\"col\">Age</th>
                        <th scope=\"col\">Billing</th>
                      </tr>
                    </thead>
                    <tbody>
                      {% for patient in patients %}
                        <tr>
                          <td>{{ patient.patient_id }}</td>
                          <td>{{ patient.name }}</td>
                          <td>{{ patient.age }}</td>
                          <td>{{ patient.billing }}</td>
                        </tr>
                      {% endfor %}
                    </tbody>
                  </table>
                </div>
              {% else %}
                <p class=\"text-muted mb-0\">No patients registered.</p>
              {% endif %}
            </div>
          </div>
        </div>
        <div class=\"col-lg-6\">
          <div class=\"card shadow-sm h-100\">
            <div class=\"card-header bg-info text-white\">Appointments</div>
            <div class=\"card-body\">
              {% if appointments %}
                <div class=\"table-responsive\">
                  <table class=\"table table-sm table-striped\">
                    <thead>
                      <tr>
                        <th scope=\"col\">#</th>
                        <th scope=\"col\">Patient</th>
                        <th scope=\"col\">Date</th>
                        <th scope=\"col\">Time</th>
                        <th scope=\"col\">Status</th>
                      </tr>
                    </thead>
                    <tbody>
                      {% for appointment in appointments %}
                        <tr>
                          <td>{{ appointment.appointment_id }}</td>
                          <td>{{ appointment.patient_name }}</td>
                          <td>{{ appointment.date }}</td>
                          <td>{{ appointment.time }}</td>
                          <td>{{ appointment.status }}</td>
                        </tr>
                      {% endfor %}
                    </tbody>
                  </table>
                </div>
              {% else %}
                <p class=\"text-muted mb-0\">No appointments scheduled.</p>
              {% endif %}
            </div>
          </div>
        </div>
      </section>
      <section class=\"row g-4 mt-1\">
        <div class=\"col-lg-6\">
          <div class=\"card shadow-sm h-100\">
            <div class=\"card-header bg-warning text-dark\">Waiting List ({{ waiting|length }})</div>
            <div class=\"card-body\">
              {% if next_patient %}
                <p>Next: <strong>{{ next_patient.name }}</strong> (age {{ next_patient.age }})</p>
              {% endif %}
              {% if waiting %}
                <ul class=\"mb-0\">
                  {% for patient in waiting %}
                    <li>{{ patient.name }} (age {{ patient.age }})</li>
                  {% endfor %}
                </ul>
              {% else %}
                <p class=\"text-muted mb-0\">Nobody is waiting.</p>
              {% endif %}
            </div>
          </div>
        </div>
        <div class=\"col-lg-6\">
          <div class=\"card shadow-sm h-100\">
            <div class=\"card-header bg-secondary text-white\">Revenue</div>
            <div class=\"card-body\">
              <pre class=\"mb-0\">{{ revenue_report }}</pre>
            </div>
          </div>
        </div>
      </section>
    </main>
  </body>
</html>
"""


@app.route("/dashboard", methods=["GET"])
def dashboard() -> str:
    context = build_dashboard_context(records)
    return render_template_string(dashboard_template, **context)


if __name__ == "__main__":
    app.run(
        host="0.0.0.0",
        port=int(os.environ.get("PORT", "5000")),
        debug=False,
    )
