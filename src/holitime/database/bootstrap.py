from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import time, timedelta

import mysql.connector
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import inspect, select
from werkzeug.security import generate_password_hash

from ..common.datetime_utils import now_local
from ..core.enums import JobStatus, RoleCode, ShiftStatus, UserRole, WorkerStatus
from . import tables
from .session import session_scope

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DemoUser:
    name: str
    email: str
    password: str
    role: UserRole
    crew_chief_eligible: bool = False
    fork_operator_eligible: bool = False


DEMO_COMPANY = "Demo Productions"
DEMO_JOB = "Arena Load-In"

DEMO_USERS = (
    DemoUser("Admin User", "admin@holitime.local", "admin123", UserRole.ADMIN, True, True),
    DemoUser("Sam Staff", "staff@holitime.local", "staff123", UserRole.STAFF),
    DemoUser("Chris Chief", "crewchief@holitime.local", "chief123", UserRole.CREW_CHIEF, True, True),
    DemoUser("Erin Employee", "employee@holitime.local", "employee123", UserRole.EMPLOYEE, False, True),
    DemoUser("Casey Client", "client@holitime.local", "client123", UserRole.COMPANY_USER),
)


def ensure_database_exists(db_config: dict) -> None:
    """Create the MySQL database named in ``db_config`` if it is missing."""

    conn = mysql.connector.connect(
        host=str(db_config.get("host", "localhost")),
        port=int(db_config.get("port", 3306)),
        user=str(db_config.get("user", "root")),
        password=str(db_config.get("password", "")),
        use_pure=True,
    )
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{db_config['database']}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def create_schema(db: SQLAlchemy) -> list[str]:
    """Create missing tables; returns the table names now present."""

    db.create_all()
    names = list_tables(db)
    logger.info("Schema ready (%d tables)", len(names))
    return names


def list_tables(db: SQLAlchemy) -> list[str]:
    return sorted(inspect(db.engine).get_table_names())


def seed_demo_data(db: SQLAlchemy) -> None:
    """Insert demo accounts, a company, a job and tomorrow's shift.

    Safe to run repeatedly: existing users get their password and role reset,
    the rest is only created when missing.
    """

    with session_scope(db) as s:
        company = s.execute(select(tables.CompanyRow).where(tables.CompanyRow.name == DEMO_COMPANY)).scalar_one_or_none()
        if company is None:
            company = tables.CompanyRow(name=DEMO_COMPANY, email="office@demo-productions.local")
            s.add(company)
            s.flush()

        users: dict[UserRole, tables.UserRow] = {}
        for demo in DEMO_USERS:
            row = s.execute(select(tables.UserRow).where(tables.UserRow.email == demo.email)).scalar_one_or_none()
            if row is None:
                row = tables.UserRow(email=demo.email)
                s.add(row)
            row.name = demo.name
            row.password_hash = generate_password_hash(demo.password)
            row.role = demo.role.value
            row.is_active = True
            row.crew_chief_eligible = demo.crew_chief_eligible
            row.fork_operator_eligible = demo.fork_operator_eligible
            row.company_id = company.id if demo.role == UserRole.COMPANY_USER else None
            users[demo.role] = row
        s.flush()

        job = s.execute(
            select(tables.JobRow).where(tables.JobRow.name == DEMO_JOB, tables.JobRow.company_id == company.id)
        ).scalar_one_or_none()
        if job is None:
            job = tables.JobRow(name=DEMO_JOB, company_id=company.id, status=JobStatus.ACTIVE.value, location="Main Arena")
            s.add(job)
            s.flush()

        if not job.shifts:
            shift = tables.ShiftRow(
                job_id=job.id,
                date=now_local().date() + timedelta(days=1),
                start_time=time(8, 0),
                end_time=time(16, 0),
                status=ShiftStatus.ACTIVE.value,
                location="Dock B",
                required_crew_chiefs=1,
                required_stagehands=2,
                required_fork_operators=1,
            )
            s.add(shift)
            s.flush()
            s.add(
                tables.AssignmentRow(
                    shift_id=shift.id,
                    user_id=users[UserRole.CREW_CHIEF].id,
                    role_code=RoleCode.CREW_CHIEF.value,
                    status=WorkerStatus.ASSIGNED.value,
                )
            )
            s.add(
                tables.AssignmentRow(
                    shift_id=shift.id,
                    user_id=users[UserRole.EMPLOYEE].id,
                    role_code=RoleCode.STAGEHAND.value,
                    status=WorkerStatus.ASSIGNED.value,
                )
            )

    logger.info("Demo data ready (%d users)", len(DEMO_USERS))
