"""
Module: payroll_kernel.models.warning
Responsibility: ORM persistence for disciplinary warnings.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - A warning owns at most one Deduction (1:0..1).  The Deduction holds
      the ``warning_id`` back-reference; the warning keeps only a display
      copy of the amount in ``deduction_amount``.
    - Only two mutations are allowed after insert: the owner marking it
      read, and the lazy sweep setting ``archived_at``.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from payroll_kernel.db.base import TimestampedBase, UUIDString
from payroll_kernel.db.types import UTCDateTime


class EmployeeWarning(TimestampedBase):
    """Warning issued to a user by an admin or manager."""

    __tablename__ = "warnings"

    __table_args__ = (
        Index("idx_warning_user_created", "user_id", "created_at"),
        Index("idx_warning_user_archived", "user_id", "archived_at"),
    )

    user_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("users.id"), nullable=False
    )
    reason: Mapped[str] = mapped_column(String(2000), nullable=False)
    note: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    source_role: Mapped[str] = mapped_column(String(20), nullable=False)
    source_user_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    deduction_amount: Mapped[Decimal | None] = mapped_column(nullable=True)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    read_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    archived_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    def __repr__(self) -> str:
        return f"<EmployeeWarning {self.id} user={self.user_id} read={self.is_read}>"
