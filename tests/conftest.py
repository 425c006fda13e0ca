"""
Shared pytest fixtures for the Flange QC Tracker test suite.

Provides:
    - app: Flask application (session-scoped, in-memory SQLite)
    - _setup_db: Table creation/teardown (session-scoped)
    - session: Per-test app context with table recreate (autouse)
    - client: Flask test client
    - customer / asset / project / workpack: a ready-made hierarchy chain
    - make_flange: factory for flanges at an arbitrary status
"""

import pytest

from flange_qc import create_app
from flange_qc.models import db as _db
from flange_qc.models.flange import Flange
from flange_qc.models.hierarchy import Asset, Customer, Project, Workpack


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    return create_app("testing")


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield _db.session
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


# ── Hierarchy fixtures (ORM level, bypass the API) ───────────────────────


def _add(obj):
    _db.session.add(obj)
    _db.session.commit()
    return obj


@pytest.fixture()
def customer():
    return _add(Customer(name="Acme Energy"))


@pytest.fixture()
def asset(customer):
    return _add(Asset(name="Platform Alpha", customer_id=customer.id))


@pytest.fixture()
def project(asset):
    return _add(Project(name="2026 Turnaround", asset_id=asset.id))


@pytest.fixture()
def workpack(project):
    return _add(Workpack(name="WP-001 Compression", project_id=project.id))


@pytest.fixture()
def make_flange(workpack):
    """Factory: ``make_flange(status="qc", tag="F-2")`` → committed Flange."""

    def _make(status="pending", workpack_id=None, **attrs):
        attrs.setdefault("tag", "F-1")
        flange = Flange(
            workpack_id=workpack_id if workpack_id is not None else workpack.id,
            status=status,
            **attrs,
        )
        return _add(flange)

    return _make
