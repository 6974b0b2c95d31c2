from __future__ import annotations

from flask import Flask

from ..common.http import api_endpoint, current_user, json_body, login_required, ok, query_bool
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/companies", methods=["GET"], endpoint="list_companies")
    @api_endpoint
    @login_required
    def list_companies():
        companies = container.company_service.list_companies(
            actor=current_user(), active_only=query_bool("active_only")
        )
        return ok(companies=companies)

    @app.route("/api/companies", methods=["POST"], endpoint="create_company")
    @api_endpoint
    @login_required
    def create_company():
        company_id = container.company_service.create_company(actor=current_user(), data=json_body())
        return ok(201, company_id=company_id)

    @app.route("/api/companies/<int:company_id>", methods=["GET"], endpoint="get_company")
    @api_endpoint
    @login_required
    def get_company(company_id: int):
        return ok(company=container.company_service.get_company(actor=current_user(), company_id=company_id))

    @app.route("/api/companies/<int:company_id>", methods=["PUT"], endpoint="update_company")
    @api_endpoint
    @login_required
    def update_company(company_id: int):
        company = container.company_service.update_company(
            actor=current_user(), company_id=company_id, data=json_body()
        )
        return ok(company=company)

    @app.route("/api/companies/<int:company_id>", methods=["DELETE"], endpoint="delete_company")
    @api_endpoint
    @login_required
    def delete_company(company_id: int):
        container.company_service.delete_company(actor=current_user(), company_id=company_id)
        return ok(message="Company deleted")
