from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator
from urllib.parse import quote_plus

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.orm import Session

_DEPTH_KEY = "holitime.scope_depth"


def build_database_uri(db_config: dict) -> str:
    """MySQL URL for mysql-connector, password safely quoted."""
    password = quote_plus(str(db_config.get("password", "")))
    return (
        f"mysql+mysqlconnector://{db_config['user']}:{password}"
        f"@{db_config['host']}:{int(db_config.get('port', 3306))}/{db_config['database']}"
    )


@contextmanager
def session_scope(db: SQLAlchemy) -> Iterator[Session]:
    """Unit of work over the request-scoped session.

    Scopes nest: only the outermost one commits (or rolls back), so a service
    can group several repository calls into one transaction.
    """

    session = db.session()
    depth = session.info.get(_DEPTH_KEY, 0)
    session.info[_DEPTH_KEY] = depth + 1
    try:
        yield session
        if depth == 0:
            session.commit()
    except Exception:
        if depth == 0:
            session.rollback()
        raise
    finally:
        session.info[_DEPTH_KEY] = depth
