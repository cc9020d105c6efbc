"""
LiabilityService -- organization-wide pending payroll for a month.

Responsibility:
    Sums ``SalaryService.calculate()`` over every active user to produce
    the total unpaid salary liability for a month.

Architecture position:
    Services.  Sits above the kernel because it needs a session per worker,
    i.e. it needs the ``Database`` handle rather than a single session.

Invariants enforced:
    - The month key is validated before any user is read.
    - Each user's salary is computed in its own ``snapshot_scope()``, so
      the approved count and the deduction total come from one snapshot
      even under concurrent writers.
    - Exact Decimal summation.
    - All-or-nothing: any per-user failure fails the whole aggregation.
      A partial total is never returned.

Failure modes:
    - InvalidMonthKeyError for a malformed month key.
    - Any per-user error (storage or kernel) propagates unchanged.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select

from payroll_kernel.domain.clock import Clock, SystemClock
from payroll_kernel.domain.dtos import ZERO, PendingPayroll
from payroll_kernel.domain.month_window import parse_month_key
from payroll_kernel.logging_config import LogContext, get_logger
from payroll_kernel.models.user import User
from payroll_services.database import Database
from payroll_services.portal import PayrollPortal

logger = get_logger("services.liability")


class LiabilityService:
    """Fans the salary engine out across all active users."""

    def __init__(
        self,
        database: Database,
        max_workers: int = 4,
        clock: Clock | None = None,
    ):
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self._database = database
        self._max_workers = max_workers
        self._clock = clock or SystemClock()

    def _active_user_ids(self) -> list[UUID]:
        with self._database.session_scope() as session:
            stmt = (
                select(User.id)
                .where(User.is_active.is_(True))
                .order_by(User.created_at, User.id)
            )
            return list(session.execute(stmt).scalars())

    def _salary_for(self, user_id: UUID, month_key: str) -> Decimal:
        with LogContext.bind(user_id=user_id, month_key=month_key):
            with self._database.snapshot_scope() as session:
                portal = PayrollPortal(session, self._clock)
                return portal.salary.calculate(user_id, month_key).salary

    def pending_payroll(self, month_key: str) -> PendingPayroll:
        """
        Total salary owed to active users for ``month_key``.

        Raises:
            InvalidMonthKeyError: month_key is malformed.
        """
        parse_month_key(month_key)
        user_ids = self._active_user_ids()

        if self._max_workers == 1 or len(user_ids) <= 1:
            salaries = [self._salary_for(uid, month_key) for uid in user_ids]
        else:
            workers = min(self._max_workers, len(user_ids))
            with ThreadPoolExecutor(
                max_workers=workers, thread_name_prefix="payroll-liability",
            ) as pool:
                salaries = list(
                    pool.map(lambda uid: self._salary_for(uid, month_key), user_ids)
                )

        total = sum(salaries, ZERO)
        logger.info(
            "pending_payroll_computed",
            extra={
                "month_key": month_key,
                "user_count": len(user_ids),
                "total_pending_salary": total,
            },
        )
        return PendingPayroll(
            total_pending_salary=total,
            month=month_key,
            user_count=len(user_ids),
        )
