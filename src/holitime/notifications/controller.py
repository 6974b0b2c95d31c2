from __future__ import annotations

from flask import Flask

from ..common.http import api_endpoint, current_user, json_body, login_required, ok, query_bool, query_int
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/notifications", methods=["GET"], endpoint="list_notifications")
    @api_endpoint
    @login_required
    def list_notifications():
        data = container.notification_service.list_mine(
            actor=current_user(),
            unread_only=query_bool("unread"),
            limit=max(1, min(query_int("limit", 100), 500)),
        )
        return ok(**data)

    @app.route("/api/notifications/<int:notification_id>/read", methods=["POST"], endpoint="mark_notification_read")
    @api_endpoint
    @login_required
    def mark_notification_read(notification_id: int):
        container.notification_service.mark_read(actor=current_user(), notification_id=notification_id)
        return ok(message="Marked as read")

    @app.route("/api/notifications/bulk", methods=["POST"], endpoint="bulk_notifications")
    @api_endpoint
    @login_required
    def bulk_notifications():
        data = json_body()
        count = container.notification_service.bulk(
            actor=current_user(),
            action=data.get("action", ""),
            notification_ids=data.get("notificationIds"),
        )
        return ok(count=count)

    @app.route("/api/notifications/<int:notification_id>", methods=["DELETE"], endpoint="delete_notification")
    @api_endpoint
    @login_required
    def delete_notification(notification_id: int):
        container.notification_service.delete(actor=current_user(), notification_id=notification_id)
        return ok(message="Notification deleted")
