"""Report generation for the clinic records engine.

Reports are rendered from snapshots: every generator copies its input into a
scratch list, sorts the copy, and renders text. The sorts are implemented
here rather than delegated to :func:`sorted` because the tie behaviour is
part of the report format:

* visit records are ordered with an in-place quicksort (Lomuto partition,
  last element as pivot);
* appointments and ledgers are ordered with a top-down merge sort that takes
  from the left run whenever keys compare equal, so equal dates or balances
  keep their arrival order.

Any text report can also be exported as a PDF document.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Iterable, List, MutableSequence, Optional, Sequence

try:
    from reportlab.lib.pagesizes import letter
    from reportlab.lib.units import inch
    from reportlab.pdfgen import canvas
except ImportError as exc:  # pragma: no cover
    raise ImportError(
        "ReportLab is required to export reports. Install it with 'pip install reportlab'."
    ) from exc

from records.billing import ZERO, BillingLedger
from records.models import (
    APPOINTMENT_CANCELLED,
    APPOINTMENT_COMPLETED,
    APPOINTMENT_SCHEDULED,
    NOT_AVAILABLE,
    Appointment,
    Patient,
    VisitPlan,
)

LOGGER = logging.getLogger(__name__)

PATIENT_NOT_FOUND = "Patient not found."


def quick_sort(items: MutableSequence[str]) -> None:
    """Sort ``items`` ascending in place."""

    low, high = 0, len(items) - 1
    stack = [(low, high)]
    while stack:
        low, high = stack.pop()
        if low >= high:
            continue
        pivot = _partition(items, low, high)
        stack.append((low, pivot - 1))
        stack.append((pivot + 1, high))


def _partition(items: MutableSequence[str], low: int, high: int) -> int:
    pivot = items[high]
    boundary = low - 1
    for index in range(low, high):
        if items[index] <= pivot:
            boundary += 1
            items[boundary], items[index] = items[index], items[boundary]
    items[boundary + 1], items[high] = items[high], items[boundary + 1]
    return boundary + 1


def merge_sort(
    items: MutableSequence[Any],
    key: Callable[[Any], Any],
    *,
    descending: bool = False,
) -> None:
    """Top-down merge sort of ``items`` in place.

    On equal keys the element from the left run is emitted first.
    """

    if descending:
        take_left = lambda left, right: key(left) >= key(right)  # noqa: E731
    else:
        take_left = lambda left, right: key(left) <= key(right)  # noqa: E731
    _merge_sort_range(items, 0, len(items) - 1, take_left)


def _merge_sort_range(
    items: MutableSequence[Any],
    left: int,
    right: int,
    take_left: Callable[[Any, Any], bool],
) -> None:
    if left >= right:
        return
    mid = left + (right - left) // 2
    _merge_sort_range(items, left, mid, take_left)
    _merge_sort_range(items, mid + 1, right, take_left)

    left_run = list(items[left : mid + 1])
    right_run = list(items[mid + 1 : right + 1])
    i = j = 0
    k = left
    while i < len(left_run) and j < len(right_run):
        if take_left(left_run[i], right_run[j]):
            items[k] = left_run[i]
            i += 1
        else:
            items[k] = right_run[j]
            j += 1
        k += 1
    for remaining in left_run[i:] + right_run[j:]:
        items[k] = remaining
        k += 1


def latest_clinical_plan(plans: Optional[Iterable[VisitPlan]]) -> Optional[VisitPlan]:
    """Pick the most recent plan carrying a diagnosis or treatment plan.

    Dates are ``YYYY-MM-DD`` strings, so the lexicographically greatest date
    is the most recent. Later plans win ties.
    """

    selected: Optional[VisitPlan] = None
    latest_date = ""
    for plan in plans or ():
        if not plan.has_clinical_findings():
            continue
        when = plan.date or ""
        if not latest_date or when >= latest_date:
            latest_date = when
            selected = plan
    return selected


class ReportGenerator:
    """Renders patient, appointment and revenue reports as plain text."""

    def patient_report(
        self, patient: Optional[Patient], plans: Optional[Sequence[VisitPlan]] = None
    ) -> str:
        if patient is None:
            return PATIENT_NOT_FOUND

        lines: List[str] = ["PATIENT REPORT", "==============", ""]
        lines.append(patient.info())
        lines.append("Visit Records (Sorted by Date):")

        visits = list(patient.visit_records)
        quick_sort(visits)
        lines.extend(f"- {visit}" for visit in visits)

        plan = latest_clinical_plan(plans)
        diagnosis = plan.diagnosis.strip() if plan else ""
        treatment = plan.treatment_plan.strip() if plan else ""
        lines.extend(
            [
                "",
                "Clinical Summary",
                "----------------",
                f"Diagnosis: {diagnosis or NOT_AVAILABLE}",
                "Treatment Plan:",
                treatment or NOT_AVAILABLE,
            ]
        )
        return "\n".join(lines) + "\n"

    def appointment_report(self, appointments: Sequence[Appointment]) -> str:
        ordered = list(appointments)
        merge_sort(ordered, key=lambda appointment: appointment.date)

        lines: List[str] = [
            "=== APPOINTMENT REPORT ===",
            f"Total Appointments: {len(ordered)}",
            "",
            "Appointments (Sorted by Date):",
        ]
        lines.extend(appointment.describe() for appointment in ordered)

        lines.extend(["", "Statistics:"])
        for status in (APPOINTMENT_SCHEDULED, APPOINTMENT_COMPLETED, APPOINTMENT_CANCELLED):
            count = sum(1 for appointment in ordered if appointment.status == status)
            lines.append(f"{status}: {count}")
        return "\n".join(lines) + "\n"

    def revenue_report(self, ledgers: Sequence[BillingLedger]) -> str:
        ordered = list(ledgers)
        merge_sort(ordered, key=lambda ledger: ledger.balance, descending=True)

        lines: List[str] = [
            "=== REVENUE REPORT ===",
            f"Total Patients with Billing: {len(ordered)}",
            "",
            "Billing Records (Sorted by Amount):",
        ]
        total: Decimal = ZERO
        for ledger in ordered:
            lines.append(ledger.describe())
            total += ledger.balance

        lines.extend(["", f"Total Outstanding Revenue: ${total:.2f}"])
        return "\n".join(lines) + "\n"


_PAGE_TOP = 10.5 * inch
_PAGE_BOTTOM = 1 * inch
_LINE_HEIGHT = 0.2 * inch


def _draw_header(pdf: canvas.Canvas, title: str, generated_at: datetime) -> float:
    pdf.setFont("Helvetica-Bold", 16)
    pdf.drawString(1 * inch, _PAGE_TOP, title)
    pdf.setFont("Helvetica", 9)
    pdf.drawString(
        1 * inch,
        _PAGE_TOP - 0.3 * inch,
        f"Generated on: {generated_at.strftime('%Y-%m-%d %H:%M:%S')}",
    )
    return _PAGE_TOP - 0.7 * inch


def write_report_pdf(
    report_text: str,
    output_path: Path | str,
    *,
    title: str = "Clinic Records Report",
) -> Path:
    """Write ``report_text`` to a PDF file, one text line per PDF line."""

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    generated_at = datetime.now()

    pdf = canvas.Canvas(str(output_path), pagesize=letter)
    cursor = _draw_header(pdf, title, generated_at)
    pdf.setFont("Courier", 9)
    for line in report_text.splitlines():
        if cursor < _PAGE_BOTTOM:
            pdf.showPage()
            cursor = _draw_header(pdf, title, generated_at)
            pdf.setFont("Courier", 9)
        pdf.drawString(1 * inch, cursor, line)
        cursor -= _LINE_HEIGHT
    pdf.showPage()
    pdf.save()
    LOGGER.info("Report PDF created at %s", output_path)
    return output_path


__all__ = [
    "PATIENT_NOT_FOUND",
    "ReportGenerator",
    "latest_clinical_plan",
    "merge_sort",
    "quick_sort",
    "write_report_pdf",
]
