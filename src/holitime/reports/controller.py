from __future__ import annotations

from flask import Flask

from ..common.http import api_endpoint, current_user, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/jobs/<int:job_id>/report", methods=["GET"], endpoint="job_report")
    @api_endpoint
    @login_required
    def job_report(job_id: int):
        data = container.job_report_service.build_job_report(actor=current_user(), job_id=job_id)
        return ok(job=data.job, shifts=data.shifts, summary=data.summary, totals=data.totals)
