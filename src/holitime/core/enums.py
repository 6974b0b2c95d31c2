from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    """Account role used for authorization."""

    STAFF = "Staff"
    ADMIN = "Admin"
    COMPANY_USER = "CompanyUser"
    CREW_CHIEF = "CrewChief"
    EMPLOYEE = "Employee"


class JobStatus(str, Enum):
    PENDING = "Pending"
    ACTIVE = "Active"
    ON_HOLD = "OnHold"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class ShiftStatus(str, Enum):
    """Status persisted on the shift row."""

    PENDING = "Pending"
    ACTIVE = "Active"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class LiveShiftStatus(str, Enum):
    """Status derived from the clock and the timesheet, never stored."""

    SCHEDULED = "Scheduled"
    ONGOING = "Ongoing"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    PENDING = "Pending"

    @property
    def label(self) -> str:
        return {
            LiveShiftStatus.SCHEDULED: "Scheduled",
            LiveShiftStatus.ONGOING: "Live",
            LiveShiftStatus.COMPLETED: "Completed",
            LiveShiftStatus.CANCELLED: "Cancelled",
            LiveShiftStatus.PENDING: "Pending Completion",
        }[self]


class TimesheetStatus(str, Enum):
    DRAFT = "DRAFT"
    PENDING_COMPANY_APPROVAL = "PENDING_COMPANY_APPROVAL"
    PENDING_MANAGER_APPROVAL = "PENDING_MANAGER_APPROVAL"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"


class WorkerStatus(str, Enum):
    """Status of one assignment (a worker on a shift)."""

    ASSIGNED = "Assigned"
    CLOCKED_IN = "ClockedIn"
    ON_BREAK = "OnBreak"
    CLOCKED_OUT = "ClockedOut"
    SHIFT_ENDED = "ShiftEnded"
    NO_SHOW = "NoShow"
    UP_FOR_GRABS = "UpForGrabs"


class RoleCode(str, Enum):
    """Role a worker fills on a shift."""

    CREW_CHIEF = "CC"
    STAGEHAND = "SH"
    FORK_OPERATOR = "FO"
    REACH_FORK_OPERATOR = "RFO"
    RIGGER = "RG"
    GENERAL_LABOR = "GL"

    @property
    def label(self) -> str:
        return {
            RoleCode.CREW_CHIEF: "Crew Chief",
            RoleCode.STAGEHAND: "Stagehand",
            RoleCode.FORK_OPERATOR: "Fork Operator",
            RoleCode.REACH_FORK_OPERATOR: "Reach Fork Operator",
            RoleCode.RIGGER: "Rigger",
            RoleCode.GENERAL_LABOR: "General Labor",
        }[self]


class ApprovalType(str, Enum):
    COMPANY = "company"
    MANAGER = "manager"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: str) -> "ApprovalType":
        v = str(value or "").strip().lower()
        if v == "client":
            return cls.COMPANY
        return cls(v)
