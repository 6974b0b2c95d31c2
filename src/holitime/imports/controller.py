from __future__ import annotations

from flask import Flask, request

from ..common.http import api_endpoint, current_user, json_body, login_required, ok
from ..container import Container
from ..core.exceptions import ValidationError


def _uploaded_text() -> str:
    """CSV text from a multipart ``file`` field or the raw request body."""

    upload = request.files.get("file")
    raw = upload.read() if upload else request.get_data()
    if not raw:
        raise ValidationError("No CSV file uploaded")
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise ValidationError("CSV file must be UTF-8 encoded")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/import/csv/parse", methods=["POST"], endpoint="parse_shift_csv")
    @api_endpoint
    @login_required
    def parse_shift_csv():
        preview = container.shift_import_service.parse(actor=current_user(), text=_uploaded_text())
        return ok(**preview)

    @app.route("/api/import/csv/import", methods=["POST"], endpoint="import_shift_csv")
    @api_endpoint
    @login_required
    def import_shift_csv():
        service = container.shift_import_service
        if request.is_json:
            summary = service.import_rows(actor=current_user(), records=json_body().get("data"))
        else:
            summary = service.import_csv(actor=current_user(), text=_uploaded_text())
        return ok(summary=summary)
