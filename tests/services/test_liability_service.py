"""
Tests for LiabilityService.

Each user's salary is computed in its own session, so the fixtures commit
their setup before aggregating.
"""

from contextlib import contextmanager
from decimal import Decimal

import pytest

from payroll_kernel.exceptions import InvalidMonthKeyError
from payroll_kernel.models.deduction import SourceRole
from payroll_kernel.models.order_submission import OrderAction
from payroll_kernel.services.salary_service import SalaryService
from payroll_services.database import Database
from payroll_services.liability_service import LiabilityService


@pytest.fixture
def payroll_month(session, portal, create_user, test_actor_id):
    """U1 earns 30.00 in 2024-02, U2 has no rate, U3 is inactive."""
    u1 = create_user(name="U1", rate_per_order="2.50")
    u2 = create_user(name="U2", rate_per_order=None)
    u3 = create_user(name="U3", rate_per_order="10", is_active=False)

    for user, count in ((u1, 20), (u2, 7), (u3, 9)):
        order = portal.orders.submit(user.id, "2024-02-10", count)
        portal.orders.decide(order.id, OrderAction.APPROVE, approved_count=count, decided_by_id=test_actor_id)
    portal.discipline.create_deduction(test_actor_id, SourceRole.ADMIN, u1.id, "other", "20.00")

    session.commit()
    return u1, u2, u3


class TestPendingPayroll:

    @pytest.mark.parametrize("max_workers", [1, 4])
    def test_sums_active_users(self, database, deterministic_clock, payroll_month, max_workers):
        service = LiabilityService(database, max_workers=max_workers, clock=deterministic_clock)

        result = service.pending_payroll("2024-02")

        assert result.total_pending_salary == Decimal("30.00")
        assert result.user_count == 2
        assert result.month == "2024-02"

    def test_empty_month(self, database, deterministic_clock, payroll_month):
        result = LiabilityService(database, clock=deterministic_clock).pending_payroll("2024-03")

        assert result.total_pending_salary == Decimal("0")
        assert result.user_count == 2

    def test_invalid_month_before_any_read(self, database, monkeypatch):
        service = LiabilityService(database)

        def fail(*args, **kwargs):
            raise AssertionError("users must not be read for an invalid month")

        monkeypatch.setattr(LiabilityService, "_active_user_ids", fail)

        with pytest.raises(InvalidMonthKeyError):
            service.pending_payroll("2024-2")

    @pytest.mark.parametrize("max_workers", [1, 4])
    def test_any_failure_fails_the_aggregation(self, database, deterministic_clock, payroll_month, monkeypatch, max_workers):
        u1, _, _ = payroll_month
        original = SalaryService.calculate

        def flaky(self, user_id, month_key):
            if user_id == u1.id:
                raise RuntimeError("storage unavailable")
            return original(self, user_id, month_key)

        monkeypatch.setattr(SalaryService, "calculate", flaky)
        service = LiabilityService(database, max_workers=max_workers, clock=deterministic_clock)

        with pytest.raises(RuntimeError, match="storage unavailable"):
            service.pending_payroll("2024-02")

    @pytest.mark.parametrize("max_workers", [1, 4])
    def test_each_salary_reads_from_a_snapshot_session(
        self, database, deterministic_clock, payroll_month, monkeypatch, max_workers,
    ):
        snapshot_sessions = []
        calculated_in = []
        original_scope = Database.snapshot_scope
        original_calculate = SalaryService.calculate

        @contextmanager
        def recording_scope(db):
            with original_scope(db) as session:
                snapshot_sessions.append(session)
                yield session

        def recording_calculate(self, user_id, month_key):
            calculated_in.append(self.session)
            return original_calculate(self, user_id, month_key)

        monkeypatch.setattr(Database, "snapshot_scope", recording_scope)
        monkeypatch.setattr(SalaryService, "calculate", recording_calculate)
        service = LiabilityService(database, max_workers=max_workers, clock=deterministic_clock)

        assert service.pending_payroll("2024-02").total_pending_salary == Decimal("30.00")
        assert len(calculated_in) == 2
        assert all(any(s is t for t in snapshot_sessions) for s in calculated_in)

    def test_to_dict(self, database, deterministic_clock, payroll_month):
        result = LiabilityService(database, clock=deterministic_clock).pending_payroll("2024-02")
        assert result.to_dict() == {
            "total_pending_salary": Decimal("30.00"),
            "month": "2024-02",
            "user_count": 2,
        }

    def test_rejects_zero_workers(self, database):
        with pytest.raises(ValueError):
            LiabilityService(database, max_workers=0)
