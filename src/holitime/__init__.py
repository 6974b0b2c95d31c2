"""HoliTime workforce scheduling and timesheet service.

Organized by feature modules (users, jobs, shifts, timesheets, ...), each with
a thin Flask controller over service and repository layers.
"""
from __future__ import annotations

import importlib
import logging
from datetime import timedelta

from dotenv import load_dotenv
from flask import Flask
from sqlalchemy.engine import make_url

from .announcements.controller import register as register_announcements
from .assignments.controller import register as register_assignments
from .companies.controller import register as register_companies
from .config import get_settings_module
from .container import build_container
from .crew_permissions.controller import register as register_crew_permissions
from .core.logging import configure_logging
from .dashboard.controller import register as register_dashboard
from .database.bootstrap import create_schema, ensure_database_exists, seed_demo_data
from .database.extensions import db
from .database.session import build_database_uri
from .imports.controller import register as register_imports
from .jobs.controller import register as register_jobs
from .notifications.controller import register as register_notifications
from .reports.controller import register as register_reports
from .shifts.controller import register as register_shifts
from .timekeeping.controller import register as register_timekeeping
from .timesheets.controller import register as register_timesheets
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def create_app(overrides: dict | None = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"), getattr(settings, "LOG_FILE", None))

    # every upper-case setting (cookie flags included), then the derived ones
    app.config.from_object(settings)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["SESSION_DAYS"] = int(getattr(settings, "SESSION_DAYS", 7))
    db_config = dict(getattr(settings, "DB_CONFIG"))
    explicit_uri = getattr(settings, "SQLALCHEMY_DATABASE_URI", None)
    app.config["SQLALCHEMY_DATABASE_URI"] = explicit_uri or build_database_uri(db_config)
    app.config["AUTO_INIT_DB"] = bool(getattr(settings, "AUTO_INIT_DB", False))
    app.config["AUTO_SEED_DB"] = bool(getattr(settings, "AUTO_SEED_DB", False))
    if overrides:
        app.config.update(overrides)
    app.permanent_session_lifetime = timedelta(days=app.config["SESSION_DAYS"])

    db.init_app(app)
    logger.info(
        "settings=%s db=%s",
        settings_module,
        make_url(app.config["SQLALCHEMY_DATABASE_URI"]).render_as_string(hide_password=True),
    )

    with app.app_context():
        if app.config["AUTO_INIT_DB"]:
            if not explicit_uri and "SQLALCHEMY_DATABASE_URI" not in (overrides or {}):
                ensure_database_exists(db_config)
            create_schema(db)
        if app.config["AUTO_SEED_DB"]:
            seed_demo_data(db)

    container = build_container(db)
    app.extensions["holitime.container"] = container

    register_users(app, container)
    register_companies(app, container)
    register_jobs(app, container)
    register_shifts(app, container)
    register_assignments(app, container)
    register_timekeeping(app, container)
    register_timesheets(app, container)
    register_notifications(app, container)
    register_announcements(app, container)
    register_reports(app, container)
    register_dashboard(app, container)
    register_crew_permissions(app, container)
    register_imports(app, container)

    return app
