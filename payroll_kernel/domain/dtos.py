"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Defines the immutable records that services return to callers: order
    submissions, deductions, warnings, attendance marks, salary breakdowns
    and the organization-wide pending payroll figure.

Architecture position:
    Kernel > Domain -- pure data, zero I/O.
    ``from_model()`` class methods are boundary converters invoked only from
    the service layer; domain code never touches ORM entities.

Invariants enforced:
    - All DTOs are ``frozen=True``.
    - All monetary fields are ``Decimal`` -- NEVER ``float``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any
from uuid import UUID

if TYPE_CHECKING:
    from payroll_kernel.models.attendance import Attendance
    from payroll_kernel.models.deduction import Deduction
    from payroll_kernel.models.order_submission import OrderSubmission
    from payroll_kernel.models.warning import EmployeeWarning


ZERO = Decimal("0")


# ---------------------------------------------------------------------------
# Order ledger
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OrderSubmissionInfo:
    """Immutable view of one daily order submission."""

    id: UUID
    user_id: UUID
    date_key: str
    submitted_count: int
    approved_count: int | None
    status: str
    decided_by_id: UUID | None
    decided_at: datetime | None
    created_at: datetime

    @classmethod
    def from_model(cls, order: OrderSubmission) -> OrderSubmissionInfo:
        return cls(
            id=order.id,
            user_id=order.user_id,
            date_key=order.date_key,
            submitted_count=order.submitted_count,
            approved_count=order.approved_count,
            status=order.status,
            decided_by_id=order.decided_by_id,
            decided_at=order.decided_at,
            created_at=order.created_at,
        )


@dataclass(frozen=True)
class DailyTrendPoint:
    """Submitted and approved totals for one calendar day."""

    date_key: str
    submitted: int
    approved: int


# ---------------------------------------------------------------------------
# Deductions and warnings
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DeductionInfo:
    """Immutable view of a deduction."""

    id: UUID
    user_id: UUID
    amount: Decimal
    reason: str
    source_role: str
    source_user_id: UUID
    warning_id: UUID | None
    created_at: datetime

    @classmethod
    def from_model(cls, deduction: Deduction) -> DeductionInfo:
        return cls(
            id=deduction.id,
            user_id=deduction.user_id,
            amount=deduction.amount,
            reason=deduction.reason,
            source_role=deduction.source_role,
            source_user_id=deduction.source_user_id,
            warning_id=deduction.warning_id,
            created_at=deduction.created_at,
        )


@dataclass(frozen=True)
class DeductionReason:
    """Entry of the fixed deduction-reason catalog."""

    key: str
    label: str


@dataclass(frozen=True)
class WarningInfo:
    """Immutable view of a warning."""

    id: UUID
    user_id: UUID
    reason: str
    note: str | None
    source_role: str
    source_user_id: UUID
    deduction_amount: Decimal | None
    is_read: bool
    read_at: datetime | None
    archived_at: datetime | None
    created_at: datetime

    @classmethod
    def from_model(cls, warning: EmployeeWarning) -> WarningInfo:
        return cls(
            id=warning.id,
            user_id=warning.user_id,
            reason=warning.reason,
            note=warning.note,
            source_role=warning.source_role,
            source_user_id=warning.source_user_id,
            deduction_amount=warning.deduction_amount,
            is_read=warning.is_read,
            read_at=warning.read_at,
            archived_at=warning.archived_at,
            created_at=warning.created_at,
        )

    @property
    def message(self) -> str:
        """Reason with the optional note appended."""
        if self.note:
            return f"{self.reason}: {self.note}"
        return self.reason


@dataclass(frozen=True)
class WarningIssued:
    """Result of issuing a warning: the warning and its optional deduction."""

    warning: WarningInfo
    deduction: DeductionInfo | None


@dataclass(frozen=True)
class WarningListItem:
    """Row of a user's warning list."""

    id: UUID
    message: str
    source_tag: str
    is_read: bool
    read_at: datetime | None
    archived_at: datetime | None
    created_at: datetime


@dataclass(frozen=True)
class WarningPage:
    """One page of warnings plus the keyset cursor for the next page."""

    items: tuple[WarningListItem, ...]
    next_cursor: str | None


# ---------------------------------------------------------------------------
# Attendance
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AttendanceInfo:
    """Immutable view of a daily attendance mark."""

    id: UUID
    user_id: UUID
    date_key: str
    timestamp: datetime
    created_at: datetime

    @classmethod
    def from_model(cls, attendance: Attendance) -> AttendanceInfo:
        return cls(
            id=attendance.id,
            user_id=attendance.user_id,
            date_key=attendance.date_key,
            timestamp=attendance.timestamp,
            created_at=attendance.created_at,
        )


# ---------------------------------------------------------------------------
# Salary and liability
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SalaryBreakdown:
    """
    A user's salary for one month.

    ``salary = max(0, approved_orders_count * rate_per_order - total_deductions)``
    """

    salary: Decimal
    approved_orders_count: int
    total_deductions: Decimal

    @classmethod
    def zero(cls) -> SalaryBreakdown:
        return cls(salary=ZERO, approved_orders_count=0, total_deductions=ZERO)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class MonthSummary:
    """Employee dashboard figures for one month."""

    month: str
    salary: Decimal
    total_deductions: Decimal
    approved_orders: int
    days_present: int
    unread_warnings: int


@dataclass(frozen=True)
class PendingPayroll:
    """Total unpaid salary across all active users for a month."""

    total_pending_salary: Decimal
    month: str
    user_count: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
