from __future__ import annotations

import pytest
from sqlalchemy import select

from holitime.database.extensions import db
from holitime.database.session import session_scope
from holitime.database.tables import CompanyRow


def _company_names(app) -> set[str]:
    # a fresh app context means a fresh session, so only committed rows show
    with app.app_context():
        return set(db.session.execute(select(CompanyRow.name)).scalars())


def test_inner_failure_rolls_back_outer_writes(app):
    with app.app_context():
        with pytest.raises(RuntimeError):
            with session_scope(db) as outer:
                outer.add(CompanyRow(name="Outer Co"))
                outer.flush()
                with session_scope(db) as inner:
                    inner.add(CompanyRow(name="Inner Co"))
                    inner.flush()
                    raise RuntimeError("boom")

    names = _company_names(app)
    assert "Outer Co" not in names
    assert "Inner Co" not in names


def test_inner_scope_does_not_commit(app):
    with app.app_context():
        with pytest.raises(RuntimeError):
            with session_scope(db) as outer:
                with session_scope(db) as inner:
                    inner.add(CompanyRow(name="Inner Co"))
                outer.add(CompanyRow(name="Outer Co"))
                outer.flush()
                raise RuntimeError("after the inner scope closed")

    names = _company_names(app)
    assert "Inner Co" not in names
    assert "Outer Co" not in names


def test_outermost_scope_commits_nested_work(app):
    with app.app_context():
        with session_scope(db) as outer:
            outer.add(CompanyRow(name="Outer Co"))
            with session_scope(db) as inner:
                inner.add(CompanyRow(name="Inner Co"))

    assert {"Outer Co", "Inner Co"} <= _company_names(app)


def test_depth_resets_after_a_failure(app):
    with app.app_context():
        with pytest.raises(ValueError):
            with session_scope(db):
                raise ValueError("x")
        with session_scope(db) as s:
            s.add(CompanyRow(name="After Failure Co"))

    assert "After Failure Co" in _company_names(app)
