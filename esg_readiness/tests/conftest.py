"""Shared fixtures: a fresh app on in-memory SQLite per test."""
from datetime import datetime

import pytest

from config import TestConfig
from esg_readiness import create_app, db
from esg_readiness.models import Company


# ---------------------------------------------------------------------------
# Fixtures: app, client, in-memory SQLite database
# ---------------------------------------------------------------------------

@pytest.fixture()
def app():
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def make_company(app):
    def _make(name="Acme Textiles", employee_count=150, industry="Textiles"):
        company = Company(name=name, employee_count=employee_count, industry=industry)
        db.session.add(company)
        db.session.commit()
        return company
    return _make


@pytest.fixture()
def company(make_company):
    return make_company()


@pytest.fixture()
def now():
    # Midnight keeps the "due this week" window boundaries exact
    return datetime(2026, 3, 2, 0, 0, 0)
