"""CSV reading and per-row validation for the shift import."""
from __future__ import annotations

import io
from typing import Any, Callable, Iterable, Optional

import pandas as pd

from ..common.datetime_utils import parse_hhmm, parse_iso_date
from ..common.validators import require_email
from ..core.enums import RoleCode
from ..core.exceptions import ValidationError
from ..shifts.service import parse_role_code
from .model import ImportRow

COLUMNS = (
    "client_name",
    "contact_name",
    "contact_phone",
    "job_name",
    "job_start_date",
    "shift_date",
    "shift_start_time",
    "shift_end_time",
    "employee_name",
    "employee_email",
    "employee_phone",
    "worker_type",
    "clock_in_1",
    "clock_out_1",
    "clock_in_2",
    "clock_out_2",
    "clock_in_3",
    "clock_out_3",
)

REQUIRED = {
    "client_name": "Client name",
    "job_name": "Job name",
    "shift_date": "Shift date",
    "shift_start_time": "Shift start time",
    "shift_end_time": "Shift end time",
    "employee_name": "Employee name",
}


def _header(name: Any) -> str:
    return str(name).strip().lower().replace(" ", "_")


def read_csv_records(text: str) -> list[dict]:
    """CSV text -> list of ``{column: str}`` records, headers normalised."""

    try:
        frame = pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False, skipinitialspace=True)
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as e:
        raise ValidationError(f"Could not read CSV: {e}")
    frame.columns = [_header(c) for c in frame.columns]
    missing = [c for c in REQUIRED if c not in frame.columns]
    if missing:
        raise ValidationError("CSV is missing columns: " + ", ".join(missing))
    if frame.empty:
        raise ValidationError("CSV has no data rows")
    return frame.to_dict(orient="records")


def validate_record(record: dict, row_number: int) -> ImportRow:
    errors: list[str] = []

    def text(key: str) -> str:
        value = record.get(key)
        return "" if value is None else str(value).strip()

    def parsed(key: str, parse: Callable[[str], Any], label: str) -> Optional[Any]:
        raw = text(key)
        if not raw:
            return None
        try:
            return parse(raw)
        except ValidationError:
            errors.append(f"Invalid {label}: {raw!r}")
            return None

    for key, label in REQUIRED.items():
        if not text(key):
            errors.append(f"{label} is required")

    email = text("employee_email")
    if email:
        try:
            email = require_email(email)
        except ValidationError:
            errors.append(f"Invalid employee email: {email!r}")

    worker_type = parsed("worker_type", parse_role_code, "worker type") or RoleCode.STAGEHAND

    clocks = {}
    for n in (1, 2, 3):
        clocks[f"clock_in_{n}"] = parsed(f"clock_in_{n}", parse_hhmm, f"clock_in_{n}")
        clocks[f"clock_out_{n}"] = parsed(f"clock_out_{n}", parse_hhmm, f"clock_out_{n}")
        if text(f"clock_out_{n}") and not text(f"clock_in_{n}"):
            errors.append(f"clock_out_{n} needs a matching clock_in_{n}")

    return ImportRow(
        row_number=row_number,
        client_name=text("client_name"),
        contact_name=text("contact_name"),
        contact_phone=text("contact_phone"),
        job_name=text("job_name"),
        job_start_date=parsed("job_start_date", parse_iso_date, "job start date"),
        shift_date=parsed("shift_date", parse_iso_date, "shift date"),
        shift_start_time=parsed("shift_start_time", parse_hhmm, "shift start time"),
        shift_end_time=parsed("shift_end_time", parse_hhmm, "shift end time"),
        employee_name=text("employee_name"),
        employee_email=email,
        employee_phone=text("employee_phone"),
        worker_type=worker_type,
        errors=tuple(errors),
        **clocks,
    )


def validate_records(records: Iterable[Any], *, first_row: int = 2) -> list[ImportRow]:
    """Validate records in order. CSV data starts on line 2, below the header;
    a record carrying its own ``row_number`` keeps it."""

    rows = []
    for offset, record in enumerate(records):
        if not isinstance(record, dict):
            raise ValidationError("Each import row must be an object")
        row_number = record.get("row_number")
        if not isinstance(row_number, int) or isinstance(row_number, bool):
            row_number = first_row + offset
        rows.append(validate_record(record, row_number))
    return rows
