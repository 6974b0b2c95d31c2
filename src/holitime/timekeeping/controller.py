from __future__ import annotations

from flask import Flask

from ..common.http import api_endpoint, current_user, json_body, login_required, ok
from ..common.validators import optional_int, require_int
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _assignment_id(data: dict) -> int:
        return require_int(data.get("assignmentId"), "assignmentId", minimum=1)

    @app.route("/api/shifts/<int:shift_id>/clock-in", methods=["POST"], endpoint="clock_in")
    @api_endpoint
    @login_required
    def clock_in(shift_id: int):
        data = json_body()
        entry_id = container.time_tracking_service.clock_in(
            actor=current_user(),
            shift_id=shift_id,
            assignment_id=_assignment_id(data),
            entry_number=optional_int(data.get("entryNumber"), "entryNumber", minimum=1),
        )
        return ok(entry_id=entry_id, message="Clocked in")

    @app.route("/api/shifts/<int:shift_id>/clock-out", methods=["POST"], endpoint="clock_out")
    @api_endpoint
    @login_required
    def clock_out(shift_id: int):
        data = json_body()
        minutes = container.time_tracking_service.clock_out(
            actor=current_user(), shift_id=shift_id, assignment_id=_assignment_id(data)
        )
        return ok(worked_minutes=minutes, message="Clocked out")

    @app.route("/api/shifts/<int:shift_id>/end-worker-shift", methods=["POST"], endpoint="end_worker_shift")
    @api_endpoint
    @login_required
    def end_worker_shift(shift_id: int):
        data = json_body()
        result = container.time_tracking_service.end_worker_shift(
            actor=current_user(), shift_id=shift_id, assignment_id=_assignment_id(data)
        )
        return ok(**result)

    @app.route("/api/shifts/<int:shift_id>/master-start-break", methods=["POST"], endpoint="master_start_break")
    @api_endpoint
    @login_required
    def master_start_break(shift_id: int):
        count = container.time_tracking_service.master_start_break(actor=current_user(), shift_id=shift_id)
        return ok(workers_on_break=count)

    @app.route("/api/shifts/<int:shift_id>/master-end-shift", methods=["POST"], endpoint="master_end_shift")
    @api_endpoint
    @login_required
    def master_end_shift(shift_id: int):
        result = container.time_tracking_service.master_end_shift(actor=current_user(), shift_id=shift_id)
        return ok(**result)

    @app.route("/api/shifts/<int:shift_id>/time-entries", methods=["GET"], endpoint="list_time_entries")
    @api_endpoint
    @login_required
    def list_time_entries(shift_id: int):
        workers = container.time_tracking_service.list_time_entries(actor=current_user(), shift_id=shift_id)
        return ok(workers=workers)
