from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, time
from typing import Iterable, Optional

import pytest
from werkzeug.security import generate_password_hash

from holitime import create_app
from holitime.assignments.model import Assignment
from holitime.assignments.service import AssignmentService
from holitime.companies.model import Company
from holitime.core.enums import JobStatus, RoleCode, ShiftStatus, TimesheetStatus, UserRole, WorkerStatus
from holitime.crew_permissions.model import CrewChiefPermission, PermissionType
from holitime.jobs.model import Job
from holitime.notifications.model import NewNotification, Notification
from holitime.notifications.service import NotificationService
from holitime.shifts.model import Shift, WorkerRequirements
from holitime.timekeeping.model import TimeEntry
from holitime.timekeeping.service import TimeTrackingService
from holitime.timesheets.model import Timesheet
from holitime.timesheets.service import TimesheetService
from holitime.users.model import SessionUser, User


class InMemoryUsers:
    def __init__(self):
        self.users: dict[int, User] = {}

    def add(self, user_id: int, role: UserRole, *, company_id=None, active=True, **extra) -> User:
        user = User(
            user_id=user_id,
            name=extra.pop("name", f"User {user_id}"),
            email=extra.pop("email", f"user{user_id}@example.com"),
            password_hash=extra.pop("password_hash", generate_password_hash("password123")),
            role=role,
            company_id=company_id,
            is_active=active,
            **extra,
        )
        self.users[user_id] = user
        return user

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users.get(int(user_id))

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.email.lower() == email.lower()), None)

    def create_user(self, *, name, email, password_hash, role, company_id, **extra) -> int:
        user_id = max(self.users, default=0) + 1
        extra["certifications"] = tuple(extra.get("certifications") or ())
        self.users[user_id] = User(user_id, name, email, password_hash, role, company_id, **extra)
        return user_id

    def update_user(self, user_id: int, **fields) -> bool:
        if user_id not in self.users:
            return False
        if "certifications" in fields:
            fields["certifications"] = tuple(fields["certifications"])
        self.users[user_id] = replace(self.users[user_id], **fields)
        return True

    def set_password_hash(self, user_id: int, password_hash: str) -> bool:
        return self.update_user(user_id, password_hash=password_hash)

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        return self.update_user(user_id, is_active=is_active)

    def list_users(self, *, role=None, is_active=None, company_id=None, limit=200):
        out = [
            u
            for u in self.users.values()
            if (role is None or u.role == role)
            and (is_active is None or u.is_active == is_active)
            and (company_id is None or u.company_id == company_id)
        ]
        return out[:limit]

    def list_active_by_roles(self, roles: Iterable[UserRole]):
        roles = set(roles)
        return [u for u in self.users.values() if u.is_active and u.role in roles]

    def find_active_company_user(self, company_id: int) -> Optional[User]:
        return next(
            (u for u in self.users.values() if u.role == UserRole.COMPANY_USER and u.company_id == company_id and u.is_active),
            None,
        )


class InMemoryCompanies:
    def __init__(self):
        self.rows: dict[int, Company] = {}
        self.job_counts: dict[int, int] = {}

    def get_by_id(self, company_id: int) -> Optional[Company]:
        return self.rows.get(int(company_id))

    def get_by_name(self, name: str) -> Optional[Company]:
        return next((c for c in self.rows.values() if c.name.lower() == name.lower()), None)

    def create(self, **fields) -> int:
        company_id = max(self.rows, default=0) + 1
        self.rows[company_id] = Company(company_id=company_id, **fields)
        return company_id

    def update(self, company_id: int, **fields) -> bool:
        self.rows[company_id] = replace(self.rows[company_id], **fields)
        return True

    def delete(self, company_id: int) -> bool:
        return self.rows.pop(company_id, None) is not None

    def count_jobs(self, company_id: int) -> int:
        return self.job_counts.get(company_id, 0)

    def list_all(self, *, active_only: bool = False, limit: int = 200):
        return [c for c in self.rows.values() if c.is_active or not active_only][:limit]


class InMemoryJobs:
    def __init__(self, companies: InMemoryCompanies):
        self._companies = companies
        self.rows: dict[int, Job] = {}
        self.shift_counts: dict[int, int] = {}

    def get_by_id(self, job_id: int) -> Optional[Job]:
        return self.rows.get(int(job_id))

    def find_by_name(self, *, company_id: int, name: str) -> Optional[Job]:
        return next((j for j in self.rows.values() if j.company_id == company_id and j.name == name), None)

    def create(self, **fields) -> int:
        job_id = max(self.rows, default=0) + 1
        company = self._companies.get_by_id(fields["company_id"])
        self.rows[job_id] = Job(job_id=job_id, company_name=company.name if company else None, **fields)
        return job_id

    def update(self, job_id: int, **fields) -> bool:
        self.rows[job_id] = replace(self.rows[job_id], **fields)
        return True

    def delete(self, job_id: int) -> bool:
        return self.rows.pop(job_id, None) is not None

    def count_shifts(self, job_id: int) -> int:
        return self.shift_counts.get(job_id, 0)

    def list_jobs(self, *, company_id=None, status=None, limit=200):
        return [
            j
            for j in self.rows.values()
            if (company_id is None or j.company_id == company_id) and (status is None or j.status == status)
        ][:limit]

    def count_jobs(self, *, status=None, company_id=None) -> int:
        return len(self.list_jobs(company_id=company_id, status=status))


class InMemoryAssignments:
    def __init__(self, users: InMemoryUsers):
        self._users = users
        self.rows: dict[int, Assignment] = {}
        self._id = 0

    def _decorate(self, a: Assignment) -> Assignment:
        user = self._users.get_by_id(a.user_id) if a.user_id is not None else None
        return replace(a, user_name=user.name if user else None, user_email=user.email if user else None)

    def get_by_id(self, assignment_id: int) -> Optional[Assignment]:
        a = self.rows.get(int(assignment_id))
        return self._decorate(a) if a else None

    def list_for_shift(self, shift_id: int):
        return [self._decorate(a) for a in sorted(self.rows.values(), key=lambda a: a.assignment_id) if a.shift_id == shift_id]

    def find_for_user(self, *, shift_id: int, user_id: int) -> Optional[Assignment]:
        return next((a for a in self.list_for_shift(shift_id) if a.user_id == user_id), None)

    def find_placeholder(self, *, shift_id: int, role_code: RoleCode) -> Optional[Assignment]:
        return next((a for a in self.list_for_shift(shift_id) if a.is_placeholder and a.role_code == role_code), None)

    def create(self, *, shift_id, user_id, role_code, status=WorkerStatus.ASSIGNED) -> int:
        self._id += 1
        self.rows[self._id] = Assignment(self._id, shift_id, user_id, role_code, status)
        return self._id

    def assign_user(self, assignment_id: int, *, user_id: int, status=WorkerStatus.ASSIGNED) -> bool:
        self.rows[assignment_id] = replace(self.rows[assignment_id], user_id=user_id, status=status)
        return True

    def set_status(self, assignment_id: int, status: WorkerStatus) -> bool:
        self.rows[assignment_id] = replace(self.rows[assignment_id], status=status)
        return True

    def make_placeholder(self, assignment_id: int) -> bool:
        self.rows[assignment_id] = replace(self.rows[assignment_id], user_id=None, status=WorkerStatus.UP_FOR_GRABS)
        return True

    def delete(self, assignment_id: int) -> bool:
        return self.rows.pop(assignment_id, None) is not None


class InMemoryShifts:
    def __init__(self, assignments: InMemoryAssignments):
        self._assignments = assignments
        self.rows: dict[int, Shift] = {}

    def add(self, shift: Shift) -> Shift:
        self.rows[shift.shift_id] = shift
        return shift

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        return self.rows.get(int(shift_id))

    def create(self, *, requirements: WorkerRequirements, **fields) -> int:
        shift_id = max(self.rows, default=0) + 1
        self.rows[shift_id] = Shift(shift_id=shift_id, requirements=requirements, **fields)
        return shift_id

    def update(self, shift_id: int, **fields) -> bool:
        self.rows[shift_id] = replace(self.rows[shift_id], **fields)
        return True

    def set_status(self, shift_id: int, status: ShiftStatus) -> bool:
        self.rows[shift_id] = replace(self.rows[shift_id], status=status)
        return True

    def set_requirements(self, shift_id: int, requirements: WorkerRequirements) -> bool:
        self.rows[shift_id] = replace(self.rows[shift_id], requirements=requirements)
        return True

    def delete(self, shift_id: int) -> bool:
        for a in self._assignments.list_for_shift(shift_id):
            self._assignments.delete(a.assignment_id)
        return self.rows.pop(shift_id, None) is not None

    def has_time_entries(self, shift_id: int) -> bool:
        return False

    def find_by_slot(self, *, job_id: int, on_date: date, start_time: time) -> Optional[Shift]:
        return next(
            (s for s in self.rows.values() if s.job_id == job_id and s.date == on_date and s.start_time == start_time),
            None,
        )

    def list_shifts(self, *, job_id=None, company_id=None, on_date=None, date_from=None, date_to=None, limit=200):
        out = [
            s
            for s in self.rows.values()
            if (job_id is None or s.job_id == job_id)
            and (company_id is None or s.company_id == company_id)
            and (on_date is None or s.date == on_date)
            and (date_from is None or s.date >= date_from)
            and (date_to is None or s.date <= date_to)
        ]
        return sorted(out, key=lambda s: (s.date, s.start_time))[:limit]

    def list_for_user(self, *, user_id: int, date_from: Optional[date] = None, limit: int = 200):
        shift_ids = {a.shift_id for a in self._assignments.rows.values() if a.user_id == user_id}
        out = [s for s in self.rows.values() if s.shift_id in shift_ids and (date_from is None or s.date >= date_from)]
        return sorted(out, key=lambda s: (s.date, s.start_time))[:limit]


class InMemoryTimeEntries:
    def __init__(self, assignments: InMemoryAssignments):
        self._assignments = assignments
        self.rows: dict[int, TimeEntry] = {}

    def list_for_assignment(self, assignment_id: int):
        return sorted((e for e in self.rows.values() if e.assignment_id == assignment_id), key=lambda e: e.entry_number)

    def list_for_shift(self, shift_id: int):
        ids = {a.assignment_id for a in self._assignments.list_for_shift(shift_id)}
        return [e for e in self.rows.values() if e.assignment_id in ids]

    def get_active(self, assignment_id: int) -> Optional[TimeEntry]:
        return next((e for e in self.list_for_assignment(assignment_id) if e.is_active), None)

    def create(self, *, assignment_id: int, entry_number: int, clock_in: datetime, notes=None) -> int:
        entry_id = len(self.rows) + 1
        self.rows[entry_id] = TimeEntry(entry_id, assignment_id, entry_number, clock_in, None, notes, False, True)
        return entry_id

    def close(self, entry_id: int, *, clock_out: datetime) -> bool:
        self.rows[entry_id] = replace(self.rows[entry_id], clock_out=clock_out, is_active=False)
        return True


class InMemoryTimesheets:
    def __init__(self, shifts: InMemoryShifts):
        self._shifts = shifts
        self.rows: dict[int, Timesheet] = {}

    def _decorate(self, ts: Timesheet) -> Timesheet:
        shift = self._shifts.get_by_id(ts.shift_id)
        if not shift:
            return ts
        return replace(
            ts,
            shift_date=shift.date,
            job_id=shift.job_id,
            job_name=shift.job_name,
            company_id=shift.company_id,
            company_name=shift.company_name,
        )

    def get_by_id(self, timesheet_id: int) -> Optional[Timesheet]:
        ts = self.rows.get(int(timesheet_id))
        return self._decorate(ts) if ts else None

    def get_by_shift_id(self, shift_id: int) -> Optional[Timesheet]:
        ts = next((t for t in self.rows.values() if t.shift_id == shift_id), None)
        return self._decorate(ts) if ts else None

    def create(self, *, shift_id, status, submitted_by, submitted_at) -> int:
        timesheet_id = len(self.rows) + 1
        self.rows[timesheet_id] = Timesheet(timesheet_id, shift_id, status, submitted_by, submitted_at)
        return timesheet_id

    def update(self, timesheet_id: int, **fields) -> bool:
        self.rows[timesheet_id] = replace(self.rows[timesheet_id], **fields)
        return True

    def list_timesheets(self, *, status=None, company_id=None, assigned_user_id=None, limit=200):
        items = [self._decorate(t) for t in self.rows.values()]
        if status is not None:
            items = [t for t in items if t.status == status]
        if company_id is not None:
            items = [t for t in items if t.company_id == company_id]
        if assigned_user_id is not None:
            mine = {a.shift_id for a in self._shifts._assignments.rows.values() if a.user_id == assigned_user_id}
            items = [t for t in items if t.shift_id in mine]
        return sorted(items, key=lambda t: t.timesheet_id, reverse=True)[:limit]

    def statuses_for_shifts(self, shift_ids):
        wanted = set(shift_ids)
        return {t.shift_id: t.status for t in self.rows.values() if t.shift_id in wanted}

    def count_by_status(self, status: TimesheetStatus, *, company_id=None) -> int:
        return len(self.list_timesheets(status=status, company_id=company_id))


class InMemoryNotifications:
    def __init__(self):
        self.rows: dict[int, Notification] = {}

    def create_many(self, items: Iterable[NewNotification]) -> int:
        count = 0
        for item in items:
            nid = len(self.rows) + 1
            self.rows[nid] = Notification(
                notification_id=nid,
                user_id=item.user_id,
                type=item.type.value,
                title=item.title,
                message=item.message,
                related_timesheet_id=item.related_timesheet_id,
                related_shift_id=item.related_shift_id,
            )
            count += 1
        return count

    def get_by_id(self, notification_id: int) -> Optional[Notification]:
        return self.rows.get(int(notification_id))

    def list_for_user(self, *, user_id: int, unread_only: bool = False, limit: int = 200):
        items = [n for n in self.rows.values() if n.user_id == user_id and (not unread_only or not n.is_read)]
        return sorted(items, key=lambda n: n.notification_id, reverse=True)[:limit]

    def count_unread(self, user_id: int) -> int:
        return len(self.list_for_user(user_id=user_id, unread_only=True))

    def mark_read(self, *, user_id: int, notification_ids=None) -> int:
        wanted = None if notification_ids is None else set(notification_ids)
        count = 0
        for nid, n in list(self.rows.items()):
            if n.user_id == user_id and not n.is_read and (wanted is None or nid in wanted):
                self.rows[nid] = replace(n, is_read=True)
                count += 1
        return count

    def delete(self, notification_id: int) -> bool:
        return self.rows.pop(int(notification_id), None) is not None

    def for_user(self, user_id: int) -> list[Notification]:
        return [n for n in self.rows.values() if n.user_id == user_id]


class InMemoryCrewPermissions:
    def __init__(self, shifts: InMemoryShifts):
        self._shifts = shifts
        self.rows: dict[int, CrewChiefPermission] = {}

    def get(self, *, user_id, permission_type, target_id) -> Optional[CrewChiefPermission]:
        return next(
            (
                p
                for p in self.rows.values()
                if (p.user_id, p.permission_type, p.target_id) == (user_id, permission_type, target_id)
            ),
            None,
        )

    def create(self, *, user_id, permission_type, target_id, granted_by) -> int:
        permission_id = max(self.rows, default=0) + 1
        self.rows[permission_id] = CrewChiefPermission(permission_id, user_id, permission_type, target_id, granted_by)
        return permission_id

    def delete(self, *, user_id, permission_type, target_id) -> bool:
        p = self.get(user_id=user_id, permission_type=permission_type, target_id=target_id)
        return p is not None and self.rows.pop(p.permission_id, None) is not None

    def list_permissions(self, *, user_id=None, permission_type=None, target_id=None):
        return [
            p
            for p in self.rows.values()
            if (user_id is None or p.user_id == user_id)
            and (permission_type is None or p.permission_type == permission_type)
            and (target_id is None or p.target_id == target_id)
        ]

    def has_shift_access(self, *, user_id: int, shift_id: int) -> bool:
        shift = self._shifts.get_by_id(shift_id)
        if not shift:
            return False
        targets = {
            PermissionType.SHIFT: shift.shift_id,
            PermissionType.JOB: shift.job_id,
            PermissionType.CLIENT: shift.company_id,
        }
        return any(p.user_id == user_id and targets[p.permission_type] == p.target_id for p in self.rows.values())


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def session_user(user: User) -> SessionUser:
    return SessionUser(user.user_id, user.name, user.email, user.role, user.company_id)


@dataclass
class World:
    """Fake repositories plus the services under test, sharing one clock."""

    clock: FakeClock
    users: InMemoryUsers
    assignments: InMemoryAssignments
    shifts: InMemoryShifts
    time_entries: InMemoryTimeEntries
    timesheets: InMemoryTimesheets
    notifications: InMemoryNotifications
    grants: InMemoryCrewPermissions
    notification_service: NotificationService
    assignment_service: AssignmentService
    time_tracking_service: TimeTrackingService
    timesheet_service: TimesheetService

    admin: SessionUser
    staff: SessionUser
    chief: SessionUser
    client: SessionUser
    shift: Shift

    def worker(self, user_id: int, role: UserRole = UserRole.EMPLOYEE, **extra) -> SessionUser:
        return session_user(self.users.add(user_id, role, **extra))


COMPANY_ID = 7
SHIFT_DAY = date(2025, 3, 10)


@pytest.fixture
def world() -> World:
    clock = FakeClock(datetime(2025, 3, 10, 7, 0))
    users = InMemoryUsers()
    assignments = InMemoryAssignments(users)
    shifts = InMemoryShifts(assignments)
    time_entries = InMemoryTimeEntries(assignments)
    timesheets = InMemoryTimesheets(shifts)
    notifications = InMemoryNotifications()
    grants = InMemoryCrewPermissions(shifts)
    notification_service = NotificationService(notifications)

    admin = session_user(users.add(1, UserRole.ADMIN, name="Ada Admin"))
    staff = session_user(users.add(2, UserRole.STAFF))
    chief = session_user(users.add(3, UserRole.CREW_CHIEF, name="Chris Chief", crew_chief_eligible=True))
    client = session_user(users.add(4, UserRole.COMPANY_USER, company_id=COMPANY_ID))

    shift = shifts.add(
        Shift(
            shift_id=100,
            job_id=10,
            date=SHIFT_DAY,
            start_time=time(8, 0),
            end_time=time(16, 0),
            status=ShiftStatus.ACTIVE,
            location="Dock B",
            requirements=WorkerRequirements().with_count(RoleCode.STAGEHAND, 2),
            job_name="Arena Load-In",
            company_id=COMPANY_ID,
            company_name="Demo Productions",
        )
    )
    assignments.create(shift_id=shift.shift_id, user_id=chief.user_id, role_code=RoleCode.CREW_CHIEF)

    return World(
        clock=clock,
        users=users,
        assignments=assignments,
        shifts=shifts,
        time_entries=time_entries,
        timesheets=timesheets,
        notifications=notifications,
        grants=grants,
        notification_service=notification_service,
        assignment_service=AssignmentService(
            assignments, shifts, users, time_entries, notification_service, clock=clock, grants=grants
        ),
        time_tracking_service=TimeTrackingService(
            assignments, time_entries, shifts, timesheets, clock=clock, grants=grants
        ),
        timesheet_service=TimesheetService(
            timesheets, shifts, assignments, time_entries, users, notification_service, clock=clock, grants=grants
        ),
        admin=admin,
        staff=staff,
        chief=chief,
        client=client,
        shift=shift,
    )


@pytest.fixture
def companies() -> InMemoryCompanies:
    repo = InMemoryCompanies()
    repo.rows[COMPANY_ID] = Company(company_id=COMPANY_ID, name="Demo Productions")
    return repo


@pytest.fixture
def jobs(companies: InMemoryCompanies) -> InMemoryJobs:
    repo = InMemoryJobs(companies)
    repo.rows[10] = Job(
        job_id=10,
        name="Arena Load-In",
        company_id=COMPANY_ID,
        status=JobStatus.ACTIVE,
        company_name="Demo Productions",
    )
    return repo


@pytest.fixture
def app(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app({"AUTO_SEED_DB": True})


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client):
    def _login(email: str, password: str):
        return client.post("/api/auth/login", json={"email": email, "password": password})

    return _login
