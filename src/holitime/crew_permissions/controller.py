from __future__ import annotations

from flask import Flask, request

from ..common.http import api_endpoint, current_user, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/crew-chief-permissions", methods=["GET"], endpoint="list_crew_chief_permissions")
    @api_endpoint
    @login_required
    def list_crew_chief_permissions():
        permissions = container.crew_permission_service.list_permissions(
            actor=current_user(),
            user_id=request.args.get("userId"),
            permission_type=request.args.get("permissionType"),
        )
        return ok(permissions=permissions)

    @app.route("/api/crew-chief-permissions", methods=["POST"], endpoint="grant_crew_chief_permission")
    @api_endpoint
    @login_required
    def grant_crew_chief_permission():
        data = json_body()
        permission_id = container.crew_permission_service.grant(
            actor=current_user(),
            user_id=data.get("userId"),
            permission_type=data.get("permissionType"),
            target_id=data.get("targetId"),
        )
        return ok(201, permission_id=permission_id)

    @app.route("/api/crew-chief-permissions", methods=["DELETE"], endpoint="revoke_crew_chief_permission")
    @api_endpoint
    @login_required
    def revoke_crew_chief_permission():
        container.crew_permission_service.revoke(
            actor=current_user(),
            user_id=request.args.get("userId"),
            permission_type=request.args.get("permissionType"),
            target_id=request.args.get("targetId"),
        )
        return ok(message="Permission revoked")
