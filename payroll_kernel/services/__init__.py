"""Services for the payroll kernel."""

from payroll_kernel.services.attendance_service import AttendanceService
from payroll_kernel.services.audit_trail import AuditAction, AuditTrail
from payroll_kernel.services.discipline_service import (
    DEFAULT_DEDUCTION_REASONS,
    DisciplineService,
)
from payroll_kernel.services.order_ledger_service import OrderLedgerService
from payroll_kernel.services.salary_service import SalaryService

__all__ = [
    "AttendanceService",
    "AuditAction",
    "AuditTrail",
    "DEFAULT_DEDUCTION_REASONS",
    "DisciplineService",
    "OrderLedgerService",
    "SalaryService",
]
