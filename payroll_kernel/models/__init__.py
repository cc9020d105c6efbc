"""Domain models for the payroll kernel."""

from payroll_kernel.models.attendance import Attendance
from payroll_kernel.models.deduction import Deduction, SourceRole
from payroll_kernel.models.order_submission import (
    ORDER_TRANSITIONS,
    OrderAction,
    OrderStatus,
    OrderSubmission,
)
from payroll_kernel.models.user import User, UserRole
from payroll_kernel.models.warning import EmployeeWarning

__all__ = [
    "Attendance",
    "Deduction",
    "EmployeeWarning",
    "ORDER_TRANSITIONS",
    "OrderAction",
    "OrderStatus",
    "OrderSubmission",
    "SourceRole",
    "User",
    "UserRole",
]
