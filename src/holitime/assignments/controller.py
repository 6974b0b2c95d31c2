from __future__ import annotations

from flask import Flask

from ..common.http import api_endpoint, current_user, json_body, login_required, ok
from ..common.validators import optional_int, parse_bool, require_int
from ..container import Container
from ..shifts.service import parse_role_code


def register(app: Flask, container: Container) -> None:
    @app.route("/api/shifts/<int:shift_id>/assigned", methods=["GET"], endpoint="list_assigned")
    @api_endpoint
    @login_required
    def list_assigned(shift_id: int):
        return ok(assignments=container.assignment_service.list_assigned(actor=current_user(), shift_id=shift_id))

    @app.route("/api/shifts/<int:shift_id>/assigned", methods=["POST"], endpoint="assign_worker")
    @api_endpoint
    @login_required
    def assign_worker(shift_id: int):
        data = json_body()
        assignment = container.assignment_service.assign_worker(
            actor=current_user(),
            shift_id=shift_id,
            user_id=require_int(data.get("userId"), "userId", minimum=1),
            role_code=parse_role_code(data.get("roleCode")),
            force=parse_bool(data.get("force", False), "force"),
        )
        return ok(201, assignment=assignment)

    @app.route(
        "/api/shifts/<int:shift_id>/assigned/<int:assignment_id>",
        methods=["DELETE"],
        endpoint="unassign_worker",
    )
    @api_endpoint
    @login_required
    def unassign_worker(shift_id: int, assignment_id: int):
        container.assignment_service.unassign(actor=current_user(), shift_id=shift_id, assignment_id=assignment_id)
        return ok(message="Worker removed from shift")

    @app.route("/api/shifts/<int:shift_id>/replace-assignment", methods=["POST"], endpoint="replace_assignment")
    @api_endpoint
    @login_required
    def replace_assignment(shift_id: int):
        data = json_body()
        assignment = container.assignment_service.replace_assignment(
            actor=current_user(),
            shift_id=shift_id,
            assignment_id=require_int(data.get("assignmentId"), "assignmentId", minimum=1),
            new_user_id=require_int(data.get("newUserId"), "newUserId", minimum=1),
            force=parse_bool(data.get("force", False), "force"),
        )
        return ok(assignment=assignment)

    @app.route("/api/shifts/<int:shift_id>/check-conflicts", methods=["POST"], endpoint="check_conflicts")
    @api_endpoint
    @login_required
    def check_conflicts(shift_id: int):
        data = json_body()
        conflicts = container.assignment_service.check_conflicts(
            actor=current_user(),
            shift_id=shift_id,
            user_id=require_int(data.get("userId"), "userId", minimum=1),
        )
        return ok(hasConflicts=bool(conflicts), conflicts=conflicts)

    @app.route("/api/shifts/<int:shift_id>/mark-no-show", methods=["POST"], endpoint="mark_no_show")
    @api_endpoint
    @login_required
    def mark_no_show(shift_id: int):
        data = json_body()
        assignment = container.assignment_service.mark_no_show(
            actor=current_user(),
            shift_id=shift_id,
            assignment_id=require_int(data.get("assignmentId"), "assignmentId", minimum=1),
        )
        return ok(assignment=assignment)

    @app.route("/api/shifts/<int:shift_id>/drop", methods=["POST"], endpoint="drop_shift")
    @api_endpoint
    @login_required
    def drop_shift(shift_id: int):
        outcome = container.assignment_service.drop_shift(actor=current_user(), shift_id=shift_id)
        if outcome == "removed":
            return ok(outcome=outcome, message="You have been removed from the shift.")
        return ok(outcome=outcome, message="Your spot is now up for grabs.")

    @app.route("/api/shifts/<int:shift_id>/claim", methods=["POST"], endpoint="claim_shift")
    @api_endpoint
    @login_required
    def claim_shift(shift_id: int):
        data = json_body()
        assignment = container.assignment_service.claim_shift(
            actor=current_user(),
            shift_id=shift_id,
            assignment_id=optional_int(data.get("assignmentId"), "assignmentId", minimum=1),
        )
        return ok(assignment=assignment)
