from __future__ import annotations

from flask import Flask

from ..common.http import api_endpoint, current_user, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/dashboard", methods=["GET"], endpoint="dashboard")
    @api_endpoint
    @login_required
    def dashboard():
        return ok(dashboard=container.dashboard_service.summary(actor=current_user()))
