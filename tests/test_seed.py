# tests/test_seed.py

"""
Demo account seeding (jobs/seed.py).
"""

import pytest
from sqlmodel import select

from core.security import verify_password
from jobs import seed as seed_job
from models.user import User


def test_seed_creates_each_role_once(database):
    with database.session() as session:
        assert seed_job.seed(session, "Seeded123") == 3
        assert seed_job.seed(session, "Seeded123") == 0

        users = session.exec(select(User)).all()
        assert sorted(u.role for u in users) == ["ADMIN", "CUSTOMER", "STAFF"]
        assert all(verify_password("Seeded123", u.password) for u in users)


def test_run_requires_seed_password(monkeypatch):
    monkeypatch.delenv("SEED_PASSWORD", raising=False)
    opened = []
    monkeypatch.setattr(seed_job, "Database", lambda url: opened.append(url))

    with pytest.raises(RuntimeError, match="SEED_PASSWORD"):
        seed_job.run()

    assert opened == []


def test_run_rejects_empty_seed_password(monkeypatch):
    monkeypatch.setenv("SEED_PASSWORD", "")

    with pytest.raises(RuntimeError):
        seed_job.run()
