from __future__ import annotations

from flask import Flask, request

from ..common.http import api_endpoint, current_user, json_body, login_required, ok, query_int
from ..container import Container
from .service import parse_job_status


def register(app: Flask, container: Container) -> None:
    @app.route("/api/jobs", methods=["GET"], endpoint="list_jobs")
    @api_endpoint
    @login_required
    def list_jobs():
        status = request.args.get("status")
        jobs = container.job_service.list_jobs(
            actor=current_user(),
            company_id=query_int("company_id"),
            status=parse_job_status(status) if status else None,
            limit=query_int("limit", 200),
        )
        return ok(jobs=jobs)

    @app.route("/api/jobs", methods=["POST"], endpoint="create_job")
    @api_endpoint
    @login_required
    def create_job():
        job_id = container.job_service.create_job(actor=current_user(), data=json_body())
        return ok(201, job_id=job_id)

    @app.route("/api/jobs/<int:job_id>", methods=["GET"], endpoint="get_job")
    @api_endpoint
    @login_required
    def get_job(job_id: int):
        return ok(job=container.job_service.get_job(actor=current_user(), job_id=job_id))

    @app.route("/api/jobs/<int:job_id>", methods=["PUT"], endpoint="update_job")
    @api_endpoint
    @login_required
    def update_job(job_id: int):
        job = container.job_service.update_job(actor=current_user(), job_id=job_id, data=json_body())
        return ok(job=job)

    @app.route("/api/jobs/<int:job_id>", methods=["DELETE"], endpoint="delete_job")
    @api_endpoint
    @login_required
    def delete_job(job_id: int):
        container.job_service.delete_job(actor=current_user(), job_id=job_id)
        return ok(message="Job deleted")
