from __future__ import annotations

import logging
import secrets
from collections import Counter
from contextlib import nullcontext
from datetime import datetime, timedelta
from typing import Any, Callable, ContextManager

from werkzeug.security import generate_password_hash

from ..assignments.repository import AssignmentRepository
from ..assignments.service import check_role_eligibility
from ..companies.repository import CompanyRepository
from ..core.constants import ASSIGNABLE_ROLES
from ..core.enums import JobStatus, RoleCode, ShiftStatus, UserRole, WorkerStatus
from ..core.exceptions import AuthorizationError, DomainError, ValidationError
from ..jobs.repository import JobRepository
from ..shifts.model import Shift, WorkerRequirements
from ..shifts.repository import ShiftRepository
from ..timekeeping.repository import TimeEntryRepository
from ..users.model import SessionUser, User
from ..users.repository import UserRepository
from .model import ImportRow, ImportSummary
from .parser import read_csv_records, validate_records

logger = logging.getLogger(__name__)

GENERATED_EMAIL_DOMAIN = "import.local"
FORK_CODES = (RoleCode.FORK_OPERATOR, RoleCode.REACH_FORK_OPERATOR)


def generated_email(name: str) -> str:
    return ".".join(name.lower().split()) + "@" + GENERATED_EMAIL_DOMAIN


class ShiftImportService:
    """Bulk load of historical or planned shifts from a CSV export.

    Each row names a client, job, shift, worker and up to three clock pairs.
    Missing records are created, existing ones are reused, and every row runs
    in its own transaction so one bad line does not undo the others.
    """

    def __init__(
        self,
        users: UserRepository,
        companies: CompanyRepository,
        jobs: JobRepository,
        shifts: ShiftRepository,
        assignments: AssignmentRepository,
        time_entries: TimeEntryRepository,
        *,
        transaction: Callable[[], ContextManager] = nullcontext,
    ):
        self._users = users
        self._companies = companies
        self._jobs = jobs
        self._shifts = shifts
        self._assignments = assignments
        self._time_entries = time_entries
        self._transaction = transaction

    @staticmethod
    def _require_admin(actor: SessionUser) -> None:
        if actor.role != UserRole.ADMIN:
            raise AuthorizationError("Only administrators can import shifts")

    # -------- preview --------
    def parse(self, *, actor: SessionUser, text: str) -> dict:
        self._require_admin(actor)
        rows = validate_records(read_csv_records(text))
        valid = sum(1 for r in rows if r.is_valid)
        return {"rows": rows, "counts": {"total": len(rows), "valid": valid, "invalid": len(rows) - valid}}

    # -------- import --------
    def import_csv(self, *, actor: SessionUser, text: str) -> ImportSummary:
        self._require_admin(actor)
        return self._run(actor, validate_records(read_csv_records(text)))

    def import_rows(self, *, actor: SessionUser, records: Any) -> ImportSummary:
        self._require_admin(actor)
        if not isinstance(records, list) or not records:
            raise ValidationError("data must be a non-empty list of rows")
        return self._run(actor, validate_records(records, first_row=1))

    def _run(self, actor: SessionUser, rows: list[ImportRow]) -> ImportSummary:
        summary = ImportSummary()
        for row in rows:
            if not row.is_valid:
                summary.fail(row.row_number, "; ".join(row.errors))
                continue
            try:
                with self._transaction():
                    tally = self._import_row(row)
            except DomainError as e:
                logger.info("Import row %s skipped: %s", row.row_number, e)
                summary.fail(row.row_number, str(e))
                continue
            summary.add(tally)
        logger.info(
            "Shift import by %s: %s rows imported, %s failed",
            actor.user_id,
            summary.imported_rows,
            len(summary.errors),
        )
        return summary

    def _import_row(self, row: ImportRow) -> Counter:
        tally: Counter = Counter()

        company = self._companies.get_by_name(row.client_name)
        if company:
            company_id = company.company_id
        else:
            company_id = self._companies.create(
                name=row.client_name,
                phone=row.contact_phone or None,
                description=f"Contact: {row.contact_name}" if row.contact_name else None,
            )
        tally["companies", company is None] += 1

        job = self._jobs.find_by_name(company_id=company_id, name=row.job_name)
        if job:
            job_id = job.job_id
        else:
            job_id = self._jobs.create(
                name=row.job_name, company_id=company_id, status=JobStatus.ACTIVE, start_date=row.job_start_date
            )
        tally["jobs", job is None] += 1

        shift = self._shifts.find_by_slot(job_id=job_id, on_date=row.shift_date, start_time=row.shift_start_time)
        tally["shifts", shift is None] += 1
        if shift is None:
            shift_id = self._shifts.create(
                requirements=WorkerRequirements(),
                job_id=job_id,
                date=row.shift_date,
                start_time=row.shift_start_time,
                end_time=row.shift_end_time,
                status=ShiftStatus.PENDING,
            )
            shift = self._shifts.get_by_id(shift_id)

        user, created = self._worker_for(row)
        tally["users", created] += 1

        assignment = self._assignments.find_for_user(shift_id=shift.shift_id, user_id=user.user_id)
        tally["assignments", assignment is None] += 1
        if assignment is None:
            self._make_room(shift, row.worker_type)
            assignment_id = self._assignments.create(
                shift_id=shift.shift_id, user_id=user.user_id, role_code=row.worker_type, status=WorkerStatus.ASSIGNED
            )
        else:
            assignment_id = assignment.assignment_id

        tally["time_entries", True] += self._record_clock_times(assignment_id, row)
        return tally

    def _worker_for(self, row: ImportRow) -> tuple[User, bool]:
        email = row.employee_email or generated_email(row.employee_name)
        user = self._users.get_by_email(email)
        if user:
            if not user.is_active:
                raise ValidationError(f"{user.name} is inactive")
            if user.role not in ASSIGNABLE_ROLES:
                raise ValidationError(f"{user.role.value} accounts cannot be assigned to shifts")
            check_role_eligibility(user, row.worker_type)
            return user, False

        # imported workers get an unusable random password until an admin resets it
        user_id = self._users.create_user(
            name=row.employee_name,
            email=email,
            password_hash=generate_password_hash(secrets.token_urlsafe(24)),
            role=UserRole.CREW_CHIEF if row.worker_type == RoleCode.CREW_CHIEF else UserRole.EMPLOYEE,
            company_id=None,
            crew_chief_eligible=row.worker_type == RoleCode.CREW_CHIEF,
            fork_operator_eligible=row.worker_type in FORK_CODES,
        )
        logger.info("Import created user %s (%s)", user_id, email)
        return self._users.get_by_id(user_id), True

    def _make_room(self, shift: Shift, role_code: RoleCode) -> None:
        """Raise the shift's requirement so the imported worker has a slot."""

        taken = sum(1 for a in self._assignments.list_for_shift(shift.shift_id) if a.role_code == role_code)
        if taken < shift.requirements.count_for(role_code):
            return
        if role_code == RoleCode.CREW_CHIEF:
            raise ValidationError("This shift already has a crew chief")
        self._shifts.set_requirements(shift.shift_id, shift.requirements.with_count(role_code, taken + 1))

    def _record_clock_times(self, assignment_id: int, row: ImportRow) -> int:
        existing = {e.entry_number for e in self._time_entries.list_for_assignment(assignment_id)}
        created = 0
        for number, (clock_in, clock_out) in enumerate(row.clock_pairs(), start=1):
            if clock_in is None or number in existing:
                continue
            started = datetime.combine(row.shift_date, clock_in)
            entry_id = self._time_entries.create(assignment_id=assignment_id, entry_number=number, clock_in=started)
            if clock_out is not None:
                ended = datetime.combine(row.shift_date, clock_out)
                if ended <= started:
                    ended += timedelta(days=1)
                self._time_entries.close(entry_id, clock_out=ended)
            created += 1

        entries = self._time_entries.list_for_assignment(assignment_id)
        if entries:
            open_entry = any(e.is_active for e in entries)
            self._assignments.set_status(
                assignment_id, WorkerStatus.CLOCKED_IN if open_entry else WorkerStatus.SHIFT_ENDED
            )
        return created
