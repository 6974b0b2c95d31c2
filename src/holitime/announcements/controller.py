from __future__ import annotations

from flask import Flask

from ..common.http import api_endpoint, current_user, json_body, login_required, ok, query_int
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/announcements", methods=["GET"], endpoint="list_announcements")
    @api_endpoint
    @login_required
    def list_announcements():
        return ok(announcements=container.announcement_service.list_recent(limit=query_int("limit", 50)))

    @app.route("/api/announcements", methods=["POST"], endpoint="create_announcement")
    @api_endpoint
    @login_required
    def create_announcement():
        data = json_body()
        announcement_id = container.announcement_service.create(
            actor=current_user(),
            title=data.get("title", ""),
            content=data.get("content", ""),
            date=data.get("date"),
        )
        return ok(201, announcement_id=announcement_id)

    @app.route("/api/announcements/<int:announcement_id>", methods=["PUT"], endpoint="update_announcement")
    @api_endpoint
    @login_required
    def update_announcement(announcement_id: int):
        item = container.announcement_service.update(
            actor=current_user(), announcement_id=announcement_id, data=json_body()
        )
        return ok(announcement=item)

    @app.route("/api/announcements/<int:announcement_id>", methods=["DELETE"], endpoint="delete_announcement")
    @api_endpoint
    @login_required
    def delete_announcement(announcement_id: int):
        container.announcement_service.delete(actor=current_user(), announcement_id=announcement_id)
        return ok(message="Announcement deleted")
