"""
Pytest fixtures for the payroll core test suite.

Provides:
- A fresh database per test (SQLite file under tmp_path by default)
- Sessions, a deterministic clock and the wired service container
- User factories

Environment Variables:
- DATABASE_URL: run against another database (e.g. PostgreSQL) instead of
  the per-test SQLite file.  Tables are dropped and recreated per test.
"""

import json
import logging
import os
from collections.abc import Callable, Generator
from datetime import UTC, datetime
from decimal import Decimal
from io import StringIO
from itertools import count
from uuid import uuid4

import pytest
from sqlalchemy.orm import Session

from payroll_kernel.domain.clock import DeterministicClock
from payroll_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from payroll_kernel.models.user import User, UserRole
from payroll_services.database import Database
from payroll_services.portal import PayrollPortal

# Test actor ID for all test operations
TEST_ACTOR_ID = uuid4()


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture payroll_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, portal):
            portal.orders.submit(...)
            logs = captured_logs()
            assert any(r["message"] == "order_submitted" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("payroll_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


def get_database_url(tmp_path) -> str:
    """DATABASE_URL if set, else a throwaway SQLite file for this test."""
    return os.environ.get("DATABASE_URL") or f"sqlite:///{tmp_path / 'payroll_test.db'}"


@pytest.fixture
def database(tmp_path) -> Generator[Database, None, None]:
    db = Database(get_database_url(tmp_path))
    db.drop_tables()
    db.create_tables()
    yield db
    db.drop_tables()
    db.dispose()


@pytest.fixture
def session(database) -> Generator[Session, None, None]:
    """A session whose transaction is rolled back after the test."""
    s = database.session()
    yield s
    s.rollback()
    s.close()


@pytest.fixture
def test_actor_id():
    return TEST_ACTOR_ID


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    """Fixed at 2024-02-15 12:00 UTC unless a test moves it."""
    return DeterministicClock(datetime(2024, 2, 15, 12, 0, tzinfo=UTC))


@pytest.fixture
def portal(session, deterministic_clock) -> PayrollPortal:
    return PayrollPortal(session, deterministic_clock)


# =============================================================================
# Data factories
# =============================================================================

_user_seq = count(1)


def make_user(
    session: Session,
    *,
    name: str | None = None,
    role: UserRole = UserRole.EMPLOYEE,
    rate_per_order: Decimal | str | None = None,
    is_active: bool = True,
) -> User:
    n = next(_user_seq)
    user = User(
        name=name or f"User {n}",
        email=f"user{n}-{uuid4().hex[:8]}@example.com",
        role=role.value,
        rate_per_order=Decimal(rate_per_order) if rate_per_order is not None else None,
        is_active=is_active,
    )
    session.add(user)
    session.flush()
    return user


@pytest.fixture
def create_user(session) -> Callable[..., User]:
    """Factory: ``create_user(rate_per_order="2.50")``."""

    def _create(**kwargs) -> User:
        return make_user(session, **kwargs)

    return _create


@pytest.fixture
def employee(create_user) -> User:
    return create_user(name="Employee", rate_per_order="2.50")


@pytest.fixture
def manager(create_user) -> User:
    return create_user(name="Morgan", role=UserRole.MANAGER)


@pytest.fixture
def admin(create_user) -> User:
    return create_user(name="Root", role=UserRole.ADMIN)
