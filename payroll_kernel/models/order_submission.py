"""
Module: payroll_kernel.models.order_submission
Responsibility: ORM persistence for daily order submissions and their
    approval state.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - At most one submission per (user_id, date_key)
      (uq_order_submission_user_day).
    - APPROVED is terminal; only PENDING orders can be decided and only
      PENDING/REJECTED orders can be resubmitted (ORDER_TRANSITIONS,
      enforced by OrderLedgerService).
"""

from datetime import datetime
from enum import Enum
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from payroll_kernel.db.base import TimestampedBase, UUIDString, utcnow
from payroll_kernel.db.types import UTCDateTime


class OrderStatus(str, Enum):
    """Approval status of a daily order submission."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class OrderAction(str, Enum):
    """Manager decision on a pending submission."""

    APPROVE = "APPROVE"
    REJECT = "REJECT"


ORDER_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset(
        {OrderStatus.PENDING, OrderStatus.APPROVED, OrderStatus.REJECTED}
    ),
    OrderStatus.REJECTED: frozenset({OrderStatus.PENDING}),
    OrderStatus.APPROVED: frozenset(),
}


class OrderSubmission(TimestampedBase):
    """
    One employee's order count for one calendar day.

    Contract:
        Created PENDING by the employee.  ``submitted_count`` may be
        overwritten while PENDING or REJECTED.  A manager moves it to
        APPROVED (fixing ``approved_count``) or REJECTED.
    """

    __tablename__ = "order_submissions"

    __table_args__ = (
        UniqueConstraint("user_id", "date_key", name="uq_order_submission_user_day"),
        Index("idx_order_submission_status", "status"),
        Index("idx_order_submission_user_status_day", "user_id", "status", "date_key"),
    )

    user_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("users.id"), nullable=False
    )
    date_key: Mapped[str] = mapped_column(String(10), nullable=False)
    submitted_count: Mapped[int] = mapped_column(nullable=False)
    approved_count: Mapped[int | None] = mapped_column(nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        default=OrderStatus.PENDING.value,
        nullable=False,
    )

    # Who decided the order and when (cleared again on resubmission)
    decided_by_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    decided_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<OrderSubmission {self.user_id} {self.date_key}: {self.status}>"

    @property
    def is_locked(self) -> bool:
        """APPROVED submissions are immutable to the employee."""
        return self.status == OrderStatus.APPROVED.value
