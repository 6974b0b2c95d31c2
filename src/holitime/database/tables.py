from __future__ import annotations

from datetime import datetime

from ..core.enums import JobStatus, ShiftStatus, TimesheetStatus, UserRole, WorkerStatus
from .extensions import db


class CompanyRow(db.Model):
    __tablename__ = "companies"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), unique=True, nullable=False)
    address = db.Column(db.String(255))
    phone = db.Column(db.String(50))
    email = db.Column(db.String(150))
    website = db.Column(db.String(255))
    description = db.Column(db.Text)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)

    users = db.relationship("UserRow", backref="company", lazy=True)
    jobs = db.relationship("JobRow", backref="company", lazy=True)


class UserRow(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False, index=True)
    email = db.Column(db.String(150), unique=True, nullable=False)
    password_hash = db.Column(db.String(255))
    role = db.Column(db.String(20), nullable=False, default=UserRole.STAFF.value)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id", ondelete="SET NULL"))
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    crew_chief_eligible = db.Column(db.Boolean, nullable=False, default=False)
    fork_operator_eligible = db.Column(db.Boolean, nullable=False, default=False)
    certifications = db.Column(db.JSON, nullable=False, default=list)
    location = db.Column(db.String(255))

    __table_args__ = (
        db.Index("ix_users_company_role", "company_id", "role"),
        db.Index("ix_users_role_active", "role", "is_active"),
    )


class JobRow(db.Model):
    __tablename__ = "jobs"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    status = db.Column(db.String(20), nullable=False, default=JobStatus.PENDING.value)
    start_date = db.Column(db.Date)
    end_date = db.Column(db.Date)
    location = db.Column(db.String(255))
    budget = db.Column(db.String(100))
    notes = db.Column(db.Text)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)

    shifts = db.relationship("ShiftRow", backref="job", lazy=True)

    __table_args__ = (
        db.UniqueConstraint("name", "company_id", name="uq_jobs_name_company"),
        db.Index("ix_jobs_company_status", "company_id", "status"),
    )


class ShiftRow(db.Model):
    __tablename__ = "shifts"

    id = db.Column(db.Integer, primary_key=True)
    job_id = db.Column(db.Integer, db.ForeignKey("jobs.id"), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False, index=True)
    start_time = db.Column(db.Time, nullable=False)
    end_time = db.Column(db.Time, nullable=False)
    status = db.Column(db.String(20), nullable=False, default=ShiftStatus.PENDING.value)
    location = db.Column(db.String(255))
    description = db.Column(db.Text)
    notes = db.Column(db.Text)
    requested_workers = db.Column(db.Integer)

    required_crew_chiefs = db.Column(db.Integer, nullable=False, default=1)
    required_stagehands = db.Column(db.Integer, nullable=False, default=0)
    required_fork_operators = db.Column(db.Integer, nullable=False, default=0)
    required_reach_fork_operators = db.Column(db.Integer, nullable=False, default=0)
    required_riggers = db.Column(db.Integer, nullable=False, default=0)
    required_general_laborers = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)

    assignments = db.relationship("AssignmentRow", backref="shift", lazy=True)

    __table_args__ = (db.Index("ix_shifts_date_status", "date", "status"),)


class AssignmentRow(db.Model):
    __tablename__ = "assigned_personnel"

    id = db.Column(db.Integer, primary_key=True)
    shift_id = db.Column(db.Integer, db.ForeignKey("shifts.id"), nullable=False, index=True)
    # NULL user means an open (up for grabs) placeholder slot
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), index=True)
    role_code = db.Column(db.String(5), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=WorkerStatus.ASSIGNED.value)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)

    user = db.relationship("UserRow", lazy="joined")
    time_entries = db.relationship(
        "TimeEntryRow",
        backref="assignment",
        lazy=True,
        order_by="TimeEntryRow.entry_number",
    )

    __table_args__ = (db.Index("ix_assigned_shift_status", "shift_id", "status"),)


class TimeEntryRow(db.Model):
    __tablename__ = "time_entries"

    id = db.Column(db.Integer, primary_key=True)
    assignment_id = db.Column(db.Integer, db.ForeignKey("assigned_personnel.id"), nullable=False, index=True)
    entry_number = db.Column(db.Integer, nullable=False, default=1)
    clock_in = db.Column(db.DateTime, nullable=False)
    clock_out = db.Column(db.DateTime)
    notes = db.Column(db.Text)
    verified = db.Column(db.Boolean, nullable=False, default=False)
    is_active = db.Column(db.Boolean, nullable=False, default=False)

    __table_args__ = (
        db.UniqueConstraint("assignment_id", "entry_number", name="uq_time_entries_assignment_entry"),
    )


class TimesheetRow(db.Model):
    __tablename__ = "timesheets"

    id = db.Column(db.Integer, primary_key=True)
    shift_id = db.Column(db.Integer, db.ForeignKey("shifts.id", ondelete="CASCADE"), unique=True, nullable=False)
    status = db.Column(db.String(30), nullable=False, default=TimesheetStatus.DRAFT.value)
    submitted_by = db.Column(db.Integer, db.ForeignKey("users.id"))
    submitted_at = db.Column(db.DateTime)

    company_signature = db.Column(db.Text)
    company_approved_at = db.Column(db.DateTime)
    company_approved_by = db.Column(db.Integer, db.ForeignKey("users.id"))
    company_notes = db.Column(db.Text)

    manager_approved_at = db.Column(db.DateTime)
    manager_approved_by = db.Column(db.Integer, db.ForeignKey("users.id"))
    manager_notes = db.Column(db.Text)

    rejection_reason = db.Column(db.Text)
    rejected_at = db.Column(db.DateTime)
    rejected_by = db.Column(db.Integer, db.ForeignKey("users.id"))

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)

    shift = db.relationship("ShiftRow", backref=db.backref("timesheet", uselist=False))


class NotificationRow(db.Model):
    __tablename__ = "notifications"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    type = db.Column(db.String(50), nullable=False)
    title = db.Column(db.String(200), nullable=False)
    message = db.Column(db.Text, nullable=False)
    related_timesheet_id = db.Column(db.Integer)
    related_shift_id = db.Column(db.Integer)
    is_read = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)

    __table_args__ = (db.Index("ix_notifications_user_read", "user_id", "is_read"),)


class AnnouncementRow(db.Model):
    __tablename__ = "announcements"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    content = db.Column(db.Text, nullable=False)
    date = db.Column(db.DateTime, nullable=False, default=datetime.now)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)


class CrewChiefPermissionRow(db.Model):
    __tablename__ = "crew_chief_permissions"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # shift, job or client; target_id points at that table
    permission_type = db.Column(db.String(10), nullable=False)
    target_id = db.Column(db.Integer, nullable=False)
    granted_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"))
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)

    __table_args__ = (
        db.UniqueConstraint("user_id", "permission_type", "target_id", name="uq_crew_chief_permission"),
        db.Index("ix_crew_chief_permissions_target", "permission_type", "target_id"),
    )
