"""
SalaryService -- monthly salary from approved orders minus deductions.

Responsibility:
    ``calculate()`` turns the order ledger and the deduction cascade into
    one user's salary for one month:

        salary = max(0, approved_orders_count * rate_per_order - total_deductions)

Architecture position:
    Kernel > Services.  Depends on OrderLedgerService (approved counts) and
    DisciplineService (monthly deduction total); fanned out across users by
    ``payroll_services.LiabilityService``.

Invariants enforced:
    - Users without ``rate_per_order`` always get the zero breakdown.
    - Salary is clamped at zero; deductions never produce a negative figure.
    - Decimal arithmetic only.
    - Both inputs are read through the same session.  They agree under
      concurrent writers only when that session is a
      ``Database.snapshot_scope()``.

Failure modes:
    - UserNotFoundError if the user does not exist.
    - InvalidMonthKeyError for a malformed month key (checked after the
      rate short-circuit).
"""

from uuid import UUID

from sqlalchemy.orm import Session

from payroll_kernel.domain.clock import Clock
from payroll_kernel.domain.dtos import ZERO, MonthSummary, SalaryBreakdown
from payroll_kernel.domain.month_window import parse_month_key
from payroll_kernel.logging_config import get_logger
from payroll_kernel.models.user import User
from payroll_kernel.services.attendance_service import AttendanceService
from payroll_kernel.services.base import BaseService
from payroll_kernel.services.discipline_service import DisciplineService
from payroll_kernel.services.order_ledger_service import OrderLedgerService

logger = get_logger("services.salary")


class SalaryService(BaseService[User]):
    """Read-only salary engine."""

    def __init__(
        self,
        session: Session,
        orders: OrderLedgerService,
        discipline: DisciplineService,
        attendance: AttendanceService | None = None,
        clock: Clock | None = None,
    ):
        super().__init__(session, clock)
        self._orders = orders
        self._discipline = discipline
        self._attendance = attendance or AttendanceService(session, self._clock)

    def calculate(self, user_id: UUID, month_key: str) -> SalaryBreakdown:
        """
        Compute the user's salary for ``month_key``.

        Raises:
            UserNotFoundError: user does not exist.
            InvalidMonthKeyError: month_key is malformed.
        """
        user = self._get_user(user_id)
        rate = user.rate_per_order
        if rate is None:
            return SalaryBreakdown.zero()

        parse_month_key(month_key)
        approved_orders_count = self._orders.approved_count_for_month(user_id, month_key)
        total_deductions = self._discipline.monthly_total(user_id, month_key)

        gross = rate * approved_orders_count
        salary = gross - total_deductions
        if salary < ZERO:
            salary = ZERO

        logger.debug(
            "salary_calculated",
            extra={
                "user_id": str(user_id),
                "month_key": month_key,
                "approved_orders_count": approved_orders_count,
                "gross": gross,
                "total_deductions": total_deductions,
                "salary": salary,
            },
        )
        return SalaryBreakdown(
            salary=salary,
            approved_orders_count=approved_orders_count,
            total_deductions=total_deductions,
        )

    def month_summary(self, user_id: UUID, month_key: str) -> MonthSummary:
        """Dashboard figures: salary breakdown, attendance and unread warnings."""
        breakdown = self.calculate(user_id, month_key)
        return MonthSummary(
            month=month_key,
            salary=breakdown.salary,
            total_deductions=breakdown.total_deductions,
            approved_orders=breakdown.approved_orders_count,
            days_present=self._attendance.days_present(user_id, month_key),
            unread_warnings=self._discipline.unread_count(user_id),
        )
