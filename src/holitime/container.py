from __future__ import annotations

from dataclasses import dataclass

from flask_sqlalchemy import SQLAlchemy

from .announcements.service import AnnouncementService
from .announcements.sqlalchemy_announcement_repository import SQLAlchemyAnnouncementRepository
from .assignments.service import AssignmentService
from .assignments.sqlalchemy_assignment_repository import SQLAlchemyAssignmentRepository
from .companies.service import CompanyService
from .companies.sqlalchemy_company_repository import SQLAlchemyCompanyRepository
from .crew_permissions.service import CrewChiefPermissionService
from .crew_permissions.sqlalchemy_crew_permission_repository import SQLAlchemyCrewChiefPermissionRepository
from .dashboard.service import DashboardService
from .database.session import session_scope
from .imports.service import ShiftImportService
from .jobs.service import JobService
from .jobs.sqlalchemy_job_repository import SQLAlchemyJobRepository
from .notifications.service import NotificationService
from .notifications.sqlalchemy_notification_repository import SQLAlchemyNotificationRepository
from .reports.service import JobReportService
from .shifts.service import ShiftService
from .shifts.sqlalchemy_shift_repository import SQLAlchemyShiftRepository
from .timekeeping.service import TimeTrackingService
from .timekeeping.sqlalchemy_time_entry_repository import SQLAlchemyTimeEntryRepository
from .timesheets.service import TimesheetService
from .timesheets.sqlalchemy_timesheet_repository import SQLAlchemyTimesheetRepository
from .users.service import AuthService, UserService
from .users.sqlalchemy_user_repository import SQLAlchemyUserRepository


@dataclass(frozen=True)
class Container:
    db: SQLAlchemy

    users_repo: SQLAlchemyUserRepository
    companies_repo: SQLAlchemyCompanyRepository
    jobs_repo: SQLAlchemyJobRepository
    shifts_repo: SQLAlchemyShiftRepository
    assignments_repo: SQLAlchemyAssignmentRepository
    time_entries_repo: SQLAlchemyTimeEntryRepository
    timesheets_repo: SQLAlchemyTimesheetRepository
    notifications_repo: SQLAlchemyNotificationRepository
    announcements_repo: SQLAlchemyAnnouncementRepository
    crew_permissions_repo: SQLAlchemyCrewChiefPermissionRepository

    auth_service: AuthService
    user_service: UserService
    company_service: CompanyService
    job_service: JobService
    shift_service: ShiftService
    assignment_service: AssignmentService
    time_tracking_service: TimeTrackingService
    timesheet_service: TimesheetService
    notification_service: NotificationService
    announcement_service: AnnouncementService
    job_report_service: JobReportService
    dashboard_service: DashboardService
    crew_permission_service: CrewChiefPermissionService
    shift_import_service: ShiftImportService


def build_container(db: SQLAlchemy) -> Container:
    users_repo = SQLAlchemyUserRepository(db)
    companies_repo = SQLAlchemyCompanyRepository(db)
    jobs_repo = SQLAlchemyJobRepository(db)
    shifts_repo = SQLAlchemyShiftRepository(db)
    assignments_repo = SQLAlchemyAssignmentRepository(db)
    time_entries_repo = SQLAlchemyTimeEntryRepository(db)
    timesheets_repo = SQLAlchemyTimesheetRepository(db)
    notifications_repo = SQLAlchemyNotificationRepository(db)
    announcements_repo = SQLAlchemyAnnouncementRepository(db)
    crew_permissions_repo = SQLAlchemyCrewChiefPermissionRepository(db)

    def transaction():
        return session_scope(db)

    notification_service = NotificationService(notifications_repo)
    shift_service = ShiftService(shifts_repo, jobs_repo, assignments_repo, timesheets_repo)
    timesheet_service = TimesheetService(
        timesheets_repo,
        shifts_repo,
        assignments_repo,
        time_entries_repo,
        users_repo,
        notification_service,
        transaction=transaction,
        grants=crew_permissions_repo,
    )

    return Container(
        db=db,
        users_repo=users_repo,
        companies_repo=companies_repo,
        jobs_repo=jobs_repo,
        shifts_repo=shifts_repo,
        assignments_repo=assignments_repo,
        time_entries_repo=time_entries_repo,
        timesheets_repo=timesheets_repo,
        notifications_repo=notifications_repo,
        announcements_repo=announcements_repo,
        crew_permissions_repo=crew_permissions_repo,
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo, companies_repo),
        company_service=CompanyService(companies_repo),
        job_service=JobService(jobs_repo, companies_repo),
        shift_service=shift_service,
        assignment_service=AssignmentService(
            assignments_repo,
            shifts_repo,
            users_repo,
            time_entries_repo,
            notification_service,
            transaction=transaction,
            grants=crew_permissions_repo,
        ),
        time_tracking_service=TimeTrackingService(
            assignments_repo,
            time_entries_repo,
            shifts_repo,
            timesheets_repo,
            transaction=transaction,
            grants=crew_permissions_repo,
        ),
        timesheet_service=timesheet_service,
        notification_service=notification_service,
        announcement_service=AnnouncementService(announcements_repo),
        job_report_service=JobReportService(jobs_repo, shifts_repo, assignments_repo, time_entries_repo),
        dashboard_service=DashboardService(
            jobs_repo, timesheets_repo, notifications_repo, shift_service, timesheet_service
        ),
        crew_permission_service=CrewChiefPermissionService(
            crew_permissions_repo, users_repo, shifts_repo, jobs_repo, companies_repo
        ),
        shift_import_service=ShiftImportService(
            users_repo,
            companies_repo,
            jobs_repo,
            shifts_repo,
            assignments_repo,
            time_entries_repo,
            transaction=transaction,
        ),
    )
