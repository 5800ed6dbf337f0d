"""Command line entry point for the clinic records engine."""
from __future__ import annotations

import argparse
import json
import logging
import os
import sys
import threading
from datetime import UTC, datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional

if __package__ is None or __package__ == "":  # pragma: no cover - runtime safety for script execution
    sys.path.append(str(Path(__file__).resolve().parent.parent))

from agents.importer import import_healthcare_csv
from agents.reports import PATIENT_NOT_FOUND, write_report_pdf
from orchestrator.facade import RecordsFacade

LOG_PATH = Path(
    os.getenv("RECORDS_TASK_LOG", str(Path(__file__).resolve().parent / "task_log.json"))
)
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

REPORT_TITLES = {
    "patients": "Patient Directory",
    "patient": "Patient Report",
    "appointments": "Appointment Report",
    "revenue": "Revenue Report",
}

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _format_timestamp(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC).isoformat().replace("+00:00", "Z")


class TaskLogger:
    """Persists command runs into a JSON log."""

    def __init__(self, log_path: Path) -> None:
        self._log_path = log_path
        self._lock = threading.Lock()
        self._log_path.parent.mkdir(parents=True, exist_ok=True)

    def log(
        self,
        task_name: str,
        status: str,
        *,
        start_time: Optional[datetime] = None,
        message: Optional[str] = None,
        details: Optional[Dict[str, object]] = None,
    ) -> None:
        completed_at = _utc_now()
        started_at = start_time or completed_at
        entry: Dict[str, object] = {
            "task": task_name,
            "status": status,
            "started_at": _format_timestamp(started_at),
            "completed_at": _format_timestamp(completed_at),
        }
        if message:
            entry["message"] = message
        if details is not None:
            entry["details"] = details

        with self._lock:
            history = self.read_history()
            history.append(entry)
            serialized = json.dumps(history, indent=2)
            self._log_path.write_text(f"{serialized}\n", encoding="utf-8")

    def read_history(self) -> List[Dict[str, object]]:
        if not self._log_path.exists():
            return []
        raw_content = self._log_path.read_text(encoding="utf-8").strip()
        if not raw_content:
            return []
        try:
            data = json.loads(raw_content)
        except json.JSONDecodeError as exc:
            raise ValueError(
                f"Task log is corrupted and cannot be parsed: {exc.msg}"
            ) from exc
        if not isinstance(data, list):
            raise ValueError("Task log must contain a JSON list of entries.")
        return data


def execute_with_logging(
    task_name: str, action: Callable[[], Optional[Dict[str, object]]], task_logger: TaskLogger
) -> Optional[Dict[str, object]]:
    """Run ``action`` while emitting structured log entries."""

    start_time = _utc_now()
    details: Optional[Dict[str, object]] = None
    status = "success"
    message: Optional[str] = None

    try:
        result = action()
        if isinstance(result, dict):
            details = result
        return result
    except Exception as exc:
        status = "failed"
        message = str(exc)
        raise
    finally:
        task_logger.log(
            task_name,
            status,
            start_time=start_time,
            message=message,
            details=details,
        )


def render_patient_directory(records: RecordsFacade) -> str:
    patients = records.all_patients()
    lines = ["=== PATIENT DIRECTORY ===", f"Total Patients: {len(patients)}", ""]
    for patient in patients:
        ledger = records.billing_for(patient.patient_id)
        billing = ledger.status() if ledger is not None else "No ledger"
        lines.append(
            f"{patient.patient_id}: {patient.name} (age {patient.age}) - {patient.contact} - {billing}"
        )
    return "\n".join(lines) + "\n"


def build_report(records: RecordsFacade, command: str, patient_id: Optional[int]) -> str:
    if command == "patients":
        return render_patient_directory(records)
    if command == "patient":
        return records.generate_report("patient", patient_id)
    if command == "appointments":
        return records.generate_report("appointment")
    return records.generate_report("revenue")


def run_command(args: argparse.Namespace, records: RecordsFacade) -> Dict[str, object]:
    """Execute one CLI command against ``records`` and return a summary."""

    summary: Dict[str, object] = {"command": args.command}
    if args.csv:
        summary["imported"] = import_healthcare_csv(records, args.csv)

    if args.command == "import":
        print(f"Imported {summary.get('imported', 0)} patients.")
        return summary

    report = build_report(records, args.command, args.patient_id)
    print(report, end="")
    summary["found"] = report != PATIENT_NOT_FOUND

    if args.pdf:
        pdf_path = write_report_pdf(report, args.pdf, title=REPORT_TITLES[args.command])
        summary["pdf"] = str(pdf_path)
    return summary


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Clinic records engine")
    parser.add_argument(
        "command",
        choices=("import", "patients", "patient", "appointments", "revenue"),
        help="Report to print, or 'import' to only load the CSV file",
    )
    parser.add_argument(
        "patient_id",
        nargs="?",
        type=int,
        help="Patient identifier for the 'patient' report",
    )
    parser.add_argument("--csv", type=Path, help="Healthcare CSV export to load first")
    parser.add_argument("--pdf", type=Path, help="Also write the report to this PDF file")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)
    if args.command == "patient" and args.patient_id is None:
        parser.error("the 'patient' report requires a patient_id")
    if args.command == "import" and args.csv is None:
        parser.error("'import' requires --csv")
    return args


def main(argv: Optional[List[str]] = None, records: Optional[RecordsFacade] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format=LOG_FORMAT)
    task_logger = TaskLogger(LOG_PATH)
    records = records or RecordsFacade()

    summary = execute_with_logging(
        f"records_{args.command}", lambda: run_command(args, records), task_logger
    )
    if summary and summary.get("found") is False:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
