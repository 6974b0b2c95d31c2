from __future__ import annotations

import csv
import io

import pandas as pd

from ..core.constants import MAX_TIME_ENTRIES

EXCEL_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _columns() -> list[str]:
    cols = ["Worker", "Role", "Status"]
    for n in range(1, MAX_TIME_ENTRIES + 1):
        cols += [f"In {n}", f"Out {n}"]
    return cols + ["Hours", "Rounded Hours"]


def review_rows(review: dict) -> list[dict]:
    """Flatten a timesheet review into one row per worker."""

    shift = review["shift"]
    rows = []
    for w in review["workers"]:
        row = {
            "Date": shift.date.isoformat(),
            "Job": review.get("job_name") or "",
            "Company": review.get("company_name") or "",
            "Worker": w["name"] or "",
            "Role": w["role_label"],
            "Status": w["status"],
        }
        for n in range(1, MAX_TIME_ENTRIES + 1):
            entry = next((e for e in w["entries"] if e["entry_number"] == n), None)
            row[f"In {n}"] = entry["clock_in_display"] if entry else ""
            row[f"Out {n}"] = entry["clock_out_display"] if entry and entry["clock_out"] else ""
        row["Hours"] = w["raw_hours"]
        row["Rounded Hours"] = w["rounded_hours"]
        rows.append(row)
    return rows


def fieldnames() -> list[str]:
    return ["Date", "Job", "Company"] + _columns()


def to_csv_bytes(rows: list[dict]) -> bytes:
    out = io.StringIO()
    writer = csv.DictWriter(out, fieldnames=fieldnames())
    writer.writeheader()
    for row in rows:
        writer.writerow(row)
    # BOM so Excel opens UTF-8 correctly
    return out.getvalue().encode("utf-8-sig")


def to_excel_bytes(rows: list[dict], *, sheet_name: str = "Timesheet") -> bytes:
    df = pd.DataFrame(rows, columns=fieldnames())
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name[:31])
    return output.getvalue()


def export_filename(review: dict, extension: str) -> str:
    shift = review["shift"]
    job = "".join(c if c.isalnum() else "_" for c in (review.get("job_name") or "timesheet")).strip("_")
    return f"timesheet_{job or 'job'}_{shift.date.strftime('%Y%m%d')}.{extension}"
