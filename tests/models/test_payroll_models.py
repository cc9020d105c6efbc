"""
ORM-level tests for the payroll tables.

Verifies the uniqueness constraints the services rely on, exact money
storage and UTC timestamp round-trips through the database.
"""

from datetime import UTC, datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from payroll_kernel.db.types import to_decimal
from payroll_kernel.models.attendance import Attendance
from payroll_kernel.models.deduction import Deduction, SourceRole
from payroll_kernel.models.order_submission import (
    ORDER_TRANSITIONS,
    OrderStatus,
    OrderSubmission,
)
from payroll_kernel.models.user import User


class TestOrderSubmissionModel:

    def test_one_submission_per_user_day(self, session, employee):
        session.add(OrderSubmission(user_id=employee.id, date_key="2024-02-10", submitted_count=1, status="PENDING"))
        session.flush()

        session.add(OrderSubmission(user_id=employee.id, date_key="2024-02-10", submitted_count=2, status="PENDING"))
        with pytest.raises(IntegrityError):
            session.flush()

    def test_same_day_for_different_users(self, session, employee, create_user):
        other = create_user()
        for user in (employee, other):
            session.add(OrderSubmission(user_id=user.id, date_key="2024-02-10", submitted_count=1, status="PENDING"))
        session.flush()

        assert session.query(OrderSubmission).count() == 2

    def test_is_locked(self):
        assert OrderSubmission(status=OrderStatus.APPROVED.value).is_locked
        assert not OrderSubmission(status=OrderStatus.REJECTED.value).is_locked

    def test_transition_table(self):
        assert ORDER_TRANSITIONS[OrderStatus.APPROVED] == frozenset()
        assert OrderStatus.PENDING in ORDER_TRANSITIONS[OrderStatus.REJECTED]
        assert OrderStatus.APPROVED not in ORDER_TRANSITIONS[OrderStatus.REJECTED]


class TestAttendanceModel:

    def test_one_mark_per_user_day(self, session, employee):
        now = datetime(2024, 2, 15, 9, tzinfo=UTC)
        session.add(Attendance(user_id=employee.id, date_key="2024-02-15", timestamp=now))
        session.flush()

        session.add(Attendance(user_id=employee.id, date_key="2024-02-15", timestamp=now))
        with pytest.raises(IntegrityError):
            session.flush()


class TestUserModel:

    def test_email_unique(self, session):
        session.add(User(name="A", email="dup@example.com"))
        session.flush()
        session.add(User(name="B", email="dup@example.com"))
        with pytest.raises(IntegrityError):
            session.flush()

    def test_defaults(self, session):
        user = User(name="A", email="a@example.com")
        session.add(user)
        session.flush()

        assert user.is_active is True
        assert user.role == "EMPLOYEE"
        assert user.rate_per_order is None
        assert user.created_at.tzinfo is not None


class TestColumnTypes:

    def test_money_round_trips_exactly(self, session, employee, test_actor_id):
        deduction = Deduction(
            user_id=employee.id,
            amount=Decimal("1234567.123456789"),
            reason="Other: other",
            source_role=SourceRole.ADMIN.value,
            source_user_id=test_actor_id,
        )
        session.add(deduction)
        session.flush()
        session.expire_all()

        stored = session.get(Deduction, deduction.id)
        assert isinstance(stored.amount, Decimal)
        assert stored.amount == Decimal("1234567.123456789")

    def test_timestamps_come_back_in_utc(self, session, employee):
        local = datetime(2024, 2, 15, 8, 30, tzinfo=timezone(timedelta(hours=-5)))
        mark = Attendance(user_id=employee.id, date_key="2024-02-15", timestamp=local)
        session.add(mark)
        session.flush()
        session.expire_all()

        stored = session.get(Attendance, mark.id)
        assert stored.timestamp == datetime(2024, 2, 15, 13, 30, tzinfo=UTC)
        assert stored.timestamp.utcoffset() == timedelta(0)

    def test_foreign_keys_enforced(self, session, test_actor_id):
        session.add(Attendance(user_id=test_actor_id, date_key="2024-02-15", timestamp=datetime.now(UTC)))
        with pytest.raises(IntegrityError):
            session.flush()


class TestToDecimal:

    @pytest.mark.parametrize(
        "value,expected",
        [(Decimal("1.10"), Decimal("1.10")), (3, Decimal("3")), ("2.50", Decimal("2.50")), (0.1, Decimal("0.1"))],
    )
    def test_accepts(self, value, expected):
        assert to_decimal(value) == expected

    @pytest.mark.parametrize("value", [True, "abc", "Infinity", float("nan"), None, [1]])
    def test_rejects(self, value):
        with pytest.raises(ValueError):
            to_decimal(value)
