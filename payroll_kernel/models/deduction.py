"""
Module: payroll_kernel.models.deduction
Responsibility: ORM persistence for salary deductions.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - Deductions are append-only; no service updates or deletes them.
    - A deduction counts toward the calendar month (UTC) containing its
      ``created_at``.  There is no separate "effective month" field.
    - ``warning_id`` is a traceability back-reference, never ownership.
"""

from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from payroll_kernel.db.base import TimestampedBase, UUIDString


class SourceRole(str, Enum):
    """Role of the actor who created a warning or deduction."""

    ADMIN = "ADMIN"
    MANAGER = "MANAGER"


class Deduction(TimestampedBase):
    """Amount subtracted from a user's salary for one month."""

    __tablename__ = "deductions"

    __table_args__ = (
        Index("idx_deduction_user_created", "user_id", "created_at"),
        Index("idx_deduction_warning", "warning_id"),
    )

    user_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("users.id"), nullable=False
    )
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    reason: Mapped[str] = mapped_column(String(2000), nullable=False)
    source_role: Mapped[str] = mapped_column(String(20), nullable=False)
    source_user_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    warning_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), ForeignKey("warnings.id"), nullable=True
    )

    def __repr__(self) -> str:
        return f"<Deduction {self.id} user={self.user_id} amount={self.amount}>"
