from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_iso_date, parse_optional_date
from ..common.http import api_endpoint, current_user, json_body, login_required, ok, query_int
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/shifts", methods=["GET"], endpoint="list_shifts")
    @api_endpoint
    @login_required
    def list_shifts():
        shifts = container.shift_service.list_shifts(
            actor=current_user(),
            job_id=query_int("job_id"),
            date_from=parse_optional_date(request.args.get("date_from")),
            date_to=parse_optional_date(request.args.get("date_to")),
            limit=query_int("limit", 200),
        )
        return ok(shifts=shifts)

    @app.route("/api/shifts", methods=["POST"], endpoint="create_shift")
    @api_endpoint
    @login_required
    def create_shift():
        shift_id = container.shift_service.create_shift(actor=current_user(), data=json_body())
        return ok(201, shift_id=shift_id)

    @app.route("/api/shifts/today", methods=["GET"], endpoint="today_shifts")
    @api_endpoint
    @login_required
    def today_shifts():
        return ok(shifts=container.shift_service.today_shifts(actor=current_user()))

    @app.route("/api/shifts/by-date", methods=["GET"], endpoint="shifts_by_date")
    @api_endpoint
    @login_required
    def shifts_by_date():
        on_date = parse_iso_date(request.args.get("date", ""))
        return ok(shifts=container.shift_service.list_shifts(actor=current_user(), on_date=on_date))

    @app.route("/api/shifts/upcoming", methods=["GET"], endpoint="my_upcoming_shifts")
    @api_endpoint
    @login_required
    def my_upcoming_shifts():
        return ok(shifts=container.shift_service.upcoming_for_user(actor=current_user()))

    @app.route("/api/shifts/<int:shift_id>", methods=["GET"], endpoint="get_shift")
    @api_endpoint
    @login_required
    def get_shift(shift_id: int):
        return ok(**container.shift_service.get_shift_detail(actor=current_user(), shift_id=shift_id))

    @app.route("/api/shifts/<int:shift_id>", methods=["PUT"], endpoint="update_shift")
    @api_endpoint
    @login_required
    def update_shift(shift_id: int):
        shift = container.shift_service.update_shift(actor=current_user(), shift_id=shift_id, data=json_body())
        return ok(shift=shift)

    @app.route("/api/shifts/<int:shift_id>", methods=["DELETE"], endpoint="delete_shift")
    @api_endpoint
    @login_required
    def delete_shift(shift_id: int):
        container.shift_service.delete_shift(actor=current_user(), shift_id=shift_id)
        return ok(message="Shift deleted")

    @app.route("/api/shifts/<int:shift_id>/worker-requirements", methods=["GET"], endpoint="get_worker_requirements")
    @api_endpoint
    @login_required
    def get_worker_requirements(shift_id: int):
        reqs = container.shift_service.get_worker_requirements(actor=current_user(), shift_id=shift_id)
        return ok(workerRequirements=reqs)

    @app.route("/api/shifts/<int:shift_id>/worker-requirements", methods=["PUT"], endpoint="update_worker_requirements")
    @api_endpoint
    @login_required
    def update_worker_requirements(shift_id: int):
        reqs = container.shift_service.update_worker_requirements(
            actor=current_user(), shift_id=shift_id, items=json_body().get("workerRequirements")
        )
        return ok(workerRequirements=reqs)

    @app.route("/api/shifts/<int:shift_id>/slots", methods=["GET"], endpoint="worker_slots")
    @api_endpoint
    @login_required
    def worker_slots(shift_id: int):
        return ok(slots=container.shift_service.worker_slots(actor=current_user(), shift_id=shift_id))
