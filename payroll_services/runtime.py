"""
Process bootstrap: settings -> logging, database and liability service.

    runtime = create_runtime()
    with runtime.database.session_scope() as session:
        runtime.portal(session).orders.submit(user_id, "2024-02-10", 12)
    runtime.liability.pending_payroll("2024-02")
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.orm import Session

from payroll_config import PayrollSettings, get_active_config
from payroll_kernel.domain.clock import Clock, SystemClock
from payroll_kernel.logging_config import configure_logging
from payroll_services.database import Database
from payroll_services.liability_service import LiabilityService
from payroll_services.portal import PayrollPortal


@dataclass(frozen=True)
class PayrollRuntime:
    """Everything a process needs, built once from settings."""

    settings: PayrollSettings
    database: Database
    liability: LiabilityService
    clock: Clock

    def portal(self, session: Session) -> PayrollPortal:
        return PayrollPortal.from_settings(session, self.settings, self.clock)

    def close(self) -> None:
        self.database.dispose()


def create_runtime(
    settings: PayrollSettings | None = None,
    clock: Clock | None = None,
) -> PayrollRuntime:
    settings = settings or get_active_config()
    clock = clock or SystemClock()
    configure_logging(level=settings.logging.level)
    database = Database.from_settings(settings.database)
    return PayrollRuntime(
        settings=settings,
        database=database,
        liability=LiabilityService(database, settings.liability.max_workers, clock),
        clock=clock,
    )
