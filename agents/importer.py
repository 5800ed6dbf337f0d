"""Bulk patient import from the healthcare CSV export.

The importer is a boundary collaborator: it parses and cleans raw text and
then goes through :class:`~orchestrator.facade.RecordsFacade` like any other
caller, so identifier uniqueness is always enforced by the facade.
"""

from __future__ import annotations

import csv
import logging
import os
from decimal import Decimal
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from orchestrator.facade import RecordsFacade
from records.billing import ZERO, InvalidAmountError, normalize_amount

LOGGER = logging.getLogger(__name__)

DEFAULT_IMPORT_ID_BASE = int(os.getenv("RECORDS_IMPORT_ID_BASE", "10000"))
DEFAULT_AGE = 30
MIN_AGE = 1
MAX_AGE = 120
NOT_AVAILABLE = "N/A"

# Column label -> history entry prefix, in the order they are recorded.
HISTORY_FIELDS = (
    ("gender", "Gender"),
    ("blood type", "Blood Type"),
    ("medical condition", "Diagnosis"),
    ("doctor", "Doctor"),
    ("hospital", "Hospital"),
    ("insurance provider", "Insurance"),
    ("room number", "Room Number"),
    ("admission type", "Admission Type"),
    ("discharge date", "Discharge Date"),
    ("medication", "Medication"),
    ("test results", "Test Results"),
)


def _normalize_row(row: Mapping[Optional[str], object]) -> Dict[str, str]:
    normalized: Dict[str, str] = {}
    for key, value in row.items():
        if key is None or not isinstance(value, str):
            continue
        normalized[key.strip().lower()] = value.strip()
    return normalized


def _default_na(value: Optional[str]) -> str:
    return value if value else NOT_AVAILABLE


def _parse_age(value: Optional[str]) -> int:
    try:
        age = int(value) if value else DEFAULT_AGE
    except ValueError:
        LOGGER.debug("Invalid age value %r; using default", value)
        age = DEFAULT_AGE
    return min(max(age, MIN_AGE), MAX_AGE)


def _parse_amount(value: Optional[str]) -> Decimal:
    if not value:
        return ZERO
    try:
        amount = normalize_amount(value)
    except InvalidAmountError:
        LOGGER.debug("Invalid billing amount %r; using 0", value)
        return ZERO
    return amount if amount > ZERO else ZERO


def normalize_name(name: str) -> str:
    """Title-case each whitespace separated word (``"jOHN  doe"`` -> ``"John Doe"``)."""

    return " ".join(part[:1].upper() + part[1:] for part in name.lower().split())


def _visit_record(discharge_date: str, admission_type: str) -> Optional[str]:
    if discharge_date == NOT_AVAILABLE:
        return None
    record = f"{discharge_date} - Discharge"
    if admission_type != NOT_AVAILABLE:
        record += f" ({admission_type})"
    return record


def _import_numbered_rows(
    records: RecordsFacade,
    numbered_rows: Iterable[Tuple[int, Mapping[Optional[str], object]]],
    id_base: int,
) -> int:
    created = 0
    for row_number, raw_row in numbered_rows:
        row = _normalize_row(raw_row)
        name = normalize_name(row.get("name") or NOT_AVAILABLE)
        age = _parse_age(row.get("age"))
        values = {column: _default_na(row.get(column)) for column, _ in HISTORY_FIELDS}
        amount = _parse_amount(row.get("billing amount"))

        patient_id = id_base + row_number
        while records.find_patient(patient_id) is not None:
            patient_id += 1

        insurance = values["insurance provider"]
        hospital = values["hospital"]
        contact = insurance if insurance != NOT_AVAILABLE else hospital

        if not records.add_patient(patient_id, name, age, contact):
            LOGGER.warning("Skipping CSV row %d: patient %s already exists", row_number, patient_id)
            continue
        created += 1

        for column, label in HISTORY_FIELDS:
            records.add_medical_history(patient_id, f"{label}: {values[column]}")

        visit = _visit_record(values["discharge date"], values["admission type"])
        if visit:
            records.add_visit_record(patient_id, visit)

        if amount > ZERO:
            records.generate_bill(patient_id, amount)

    LOGGER.info("Imported %d patients", created)
    return created


def import_rows(
    records: RecordsFacade,
    rows: List[Mapping[Optional[str], object]],
    *,
    id_base: int = DEFAULT_IMPORT_ID_BASE,
) -> int:
    """Create one patient per row and return how many were created.

    Row ``n`` (counting from 1) gets the identifier ``id_base + n``, or the
    next free one after it.
    """

    return _import_numbered_rows(records, enumerate(rows, start=1), id_base)


def _is_blank_line(cells: List[str]) -> bool:
    return len(cells) <= 1 and not "".join(cells).strip()


def import_healthcare_csv(
    records: RecordsFacade,
    csv_path: Path | str,
    *,
    id_base: int = DEFAULT_IMPORT_ID_BASE,
) -> int:
    """Import patients from ``csv_path`` into ``records``.

    Rows are numbered by their line in the file, so a blank line is skipped
    but still uses up an identifier. A row with only empty cells is imported
    as an ``N/a`` patient.
    """

    path = Path(csv_path)
    numbered_rows: List[Tuple[int, Dict[str, str]]] = []
    with path.open("r", encoding="utf-8-sig", newline="") as handle:
        reader = csv.reader(handle)
        header = next(reader, None)
        if header is None:
            LOGGER.info("No header found in %s", path)
            return 0
        columns = [column.strip().lower() for column in header]
        for cells in reader:
            if _is_blank_line(cells):
                continue
            numbered_rows.append((reader.line_num - 1, dict(zip(columns, cells))))
    LOGGER.info("Read %d rows from %s", len(numbered_rows), path)
    return _import_numbered_rows(records, numbered_rows, id_base)


__all__ = ["import_healthcare_csv", "import_rows", "normalize_name"]
