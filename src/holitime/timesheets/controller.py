from __future__ import annotations

from flask import Flask, request

from ..common.http import api_endpoint, current_user, json_body, login_required, ok, query_int
from ..container import Container
from ..core.enums import ApprovalType, TimesheetStatus
from ..core.exceptions import ValidationError
from .export import EXCEL_MIMETYPE, export_filename, review_rows, to_csv_bytes, to_excel_bytes


def _parse_status(value: str) -> TimesheetStatus:
    try:
        return TimesheetStatus(value.strip().upper())
    except ValueError:
        raise ValidationError(f"Unknown timesheet status: {value!r}")


def _parse_approval_type(value) -> ApprovalType:
    try:
        return ApprovalType.parse(str(value or ""))
    except ValueError:
        raise ValidationError(f"Unknown approval type: {value!r}")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/shifts/<int:shift_id>/finalize-timesheet", methods=["POST"], endpoint="finalize_timesheet")
    @api_endpoint
    @login_required
    def finalize_timesheet(shift_id: int):
        ts = container.timesheet_service.finalize(actor=current_user(), shift_id=shift_id)
        return ok(timesheet=ts, message="Timesheet submitted for client approval")

    @app.route("/api/timesheets", methods=["GET"], endpoint="list_timesheets")
    @api_endpoint
    @login_required
    def list_timesheets():
        status = request.args.get("status")
        items = container.timesheet_service.list_timesheets(
            actor=current_user(),
            status=_parse_status(status) if status else None,
            limit=query_int("limit", 200),
        )
        return ok(timesheets=items)

    @app.route("/api/timesheets/company-approval", methods=["GET"], endpoint="company_approval_timesheets")
    @api_endpoint
    @login_required
    def company_approval_timesheets():
        return ok(timesheets=container.timesheet_service.list_pending_company_approval(actor=current_user()))

    @app.route("/api/timesheets/<int:timesheet_id>", methods=["GET"], endpoint="get_timesheet")
    @api_endpoint
    @login_required
    def get_timesheet(timesheet_id: int):
        return ok(**container.timesheet_service.review(actor=current_user(), timesheet_id=timesheet_id))

    @app.route("/api/timesheets/<int:timesheet_id>/approve", methods=["POST"], endpoint="approve_timesheet")
    @api_endpoint
    @login_required
    def approve_timesheet(timesheet_id: int):
        data = json_body()
        ts = container.timesheet_service.approve(
            actor=current_user(),
            timesheet_id=timesheet_id,
            approval_type=_parse_approval_type(data.get("approvalType")),
            signature=data.get("signature"),
            notes=data.get("notes"),
        )
        return ok(timesheet=ts)

    @app.route("/api/timesheets/<int:timesheet_id>/reject", methods=["POST"], endpoint="reject_timesheet")
    @api_endpoint
    @login_required
    def reject_timesheet(timesheet_id: int):
        data = json_body()
        ts = container.timesheet_service.reject(
            actor=current_user(), timesheet_id=timesheet_id, reason=data.get("reason", "")
        )
        return ok(timesheet=ts, message="Timesheet rejected")

    @app.route("/api/timesheets/<int:timesheet_id>/unlock", methods=["POST"], endpoint="unlock_timesheet")
    @api_endpoint
    @login_required
    def unlock_timesheet(timesheet_id: int):
        data = json_body()
        ts = container.timesheet_service.unlock(
            actor=current_user(),
            timesheet_id=timesheet_id,
            reason=data.get("reason", ""),
            notes=data.get("notes"),
        )
        return ok(timesheet=ts, message="Timesheet unlocked")

    @app.route("/api/timesheets/<int:timesheet_id>/excel", methods=["GET"], endpoint="timesheet_excel")
    @api_endpoint
    @login_required
    def timesheet_excel(timesheet_id: int):
        review = container.timesheet_service.review(actor=current_user(), timesheet_id=timesheet_id)
        return app.response_class(
            to_excel_bytes(review_rows(review)),
            mimetype=EXCEL_MIMETYPE,
            headers={"Content-Disposition": f"attachment; filename={export_filename(review, 'xlsx')}"},
        )

    @app.route("/api/timesheets/<int:timesheet_id>/csv", methods=["GET"], endpoint="timesheet_csv")
    @api_endpoint
    @login_required
    def timesheet_csv(timesheet_id: int):
        review = container.timesheet_service.review(actor=current_user(), timesheet_id=timesheet_id)
        return app.response_class(
            to_csv_bytes(review_rows(review)),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={export_filename(review, 'csv')}"},
        )
