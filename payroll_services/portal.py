"""
PayrollPortal -- per-session wiring of the payroll kernel services.

Builds one OrderLedgerService, DisciplineService, AttendanceService and
SalaryService that share a session, a clock and an audit trail, so that a
caller (an HTTP handler, a batch job, a test) gets a consistent set of
services for one unit of work.  Settings are translated here into the plain
values the kernel accepts; the kernel itself never reads configuration.
"""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from payroll_config.schema import PayrollSettings
from payroll_kernel.domain.clock import Clock, SystemClock
from payroll_kernel.domain.dtos import DeductionReason
from payroll_kernel.services import (
    AttendanceService,
    AuditTrail,
    DisciplineService,
    OrderLedgerService,
    SalaryService,
)
from payroll_kernel.services.discipline_service import DEFAULT_ARCHIVE_AFTER_DAYS


class PayrollPortal:
    """Service container bound to one session."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        archive_after_days: int = DEFAULT_ARCHIVE_AFTER_DAYS,
        deduction_reasons: Sequence[DeductionReason] | None = None,
    ):
        self.session = session
        self.clock = clock or SystemClock()
        self.audit = AuditTrail(self.clock)
        self.orders = OrderLedgerService(session, self.clock, self.audit)
        self.discipline = DisciplineService(
            session,
            self.clock,
            self.audit,
            archive_after_days=archive_after_days,
            deduction_reasons=deduction_reasons,
        )
        self.attendance = AttendanceService(session, self.clock)
        self.salary = SalaryService(
            session, self.orders, self.discipline, self.attendance, self.clock,
        )

    @classmethod
    def from_settings(
        cls,
        session: Session,
        settings: PayrollSettings,
        clock: Clock | None = None,
    ) -> PayrollPortal:
        reasons = [
            DeductionReason(key=r.key, label=r.label)
            for r in settings.discipline.deduction_reasons
        ]
        return cls(
            session,
            clock,
            archive_after_days=settings.discipline.archive_after_days,
            deduction_reasons=reasons or None,
        )
