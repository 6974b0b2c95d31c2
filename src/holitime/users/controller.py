from __future__ import annotations

from datetime import timedelta

from flask import Flask, request, session

from ..common.http import api_endpoint, current_user, json_body, login_required, ok, query_bool, query_int
from ..common.validators import parse_bool
from ..container import Container
from .service import parse_role


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    @api_endpoint
    def login():
        data = json_body()
        s_user = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))

        session.clear()
        session.permanent = parse_bool(data.get("remember_me", False), "remember_me")
        app.permanent_session_lifetime = timedelta(days=int(app.config.get("SESSION_DAYS", 7)))
        session.update(s_user.as_session())
        return ok(user=s_user.as_session())

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    @api_endpoint
    def logout():
        session.clear()
        return ok(message="Logged out")

    @app.route("/api/auth/me", methods=["GET"], endpoint="me")
    @api_endpoint
    @login_required
    def me():
        actor = current_user()
        user = container.user_service.get_user(actor=actor, user_id=actor.user_id)
        return ok(user=user.public_view())

    @app.route("/api/users", methods=["GET"], endpoint="list_users")
    @api_endpoint
    @login_required
    def list_users():
        role = request.args.get("role")
        active = request.args.get("active")
        users = container.user_service.list_users(
            actor=current_user(),
            role=parse_role(role) if role else None,
            is_active=query_bool("active") if active is not None else None,
            company_id=query_int("company_id"),
            limit=query_int("limit", 200),
        )
        return ok(users=[u.public_view() for u in users])

    @app.route("/api/users", methods=["POST"], endpoint="create_user")
    @api_endpoint
    @login_required
    def create_user():
        data = json_body()
        user_id = container.user_service.create_user(
            actor=current_user(),
            name=data.get("name", ""),
            email=data.get("email", ""),
            password=data.get("password", ""),
            role=parse_role(data.get("role", "Staff")),
            company_id=data.get("company_id"),
            crew_chief_eligible=data.get("crew_chief_eligible", False),
            fork_operator_eligible=data.get("fork_operator_eligible", False),
            certifications=data.get("certifications") or [],
            location=data.get("location"),
        )
        return ok(201, user_id=user_id)

    @app.route("/api/users/<int:user_id>", methods=["GET"], endpoint="get_user")
    @api_endpoint
    @login_required
    def get_user(user_id: int):
        user = container.user_service.get_user(actor=current_user(), user_id=user_id)
        return ok(user=user.public_view())

    @app.route("/api/users/<int:user_id>", methods=["PUT"], endpoint="update_user")
    @api_endpoint
    @login_required
    def update_user(user_id: int):
        actor = current_user()
        user = container.user_service.update_user(actor=actor, user_id=user_id, changes=json_body())
        if user.user_id == actor.user_id:
            session["name"] = user.name
            session["email"] = user.email
        return ok(user=user.public_view())

    @app.route("/api/users/<int:user_id>", methods=["DELETE"], endpoint="deactivate_user")
    @api_endpoint
    @login_required
    def deactivate_user(user_id: int):
        container.user_service.deactivate_user(actor=current_user(), user_id=user_id)
        return ok(message="User deactivated")

    @app.route("/api/users/<int:user_id>/password", methods=["PUT"], endpoint="change_password")
    @api_endpoint
    @login_required
    def change_password(user_id: int):
        data = json_body()
        container.user_service.change_password(
            actor=current_user(),
            user_id=user_id,
            current_password=data.get("current_password", ""),
            new_password=data.get("new_password", ""),
        )
        return ok(message="Password updated")

    @app.route("/api/users/<int:user_id>/reset-password", methods=["POST"], endpoint="reset_password")
    @api_endpoint
    @login_required
    def reset_password(user_id: int):
        data = json_body()
        container.user_service.reset_password(
            actor=current_user(), user_id=user_id, new_password=data.get("new_password", "")
        )
        return ok(message="Password reset")
