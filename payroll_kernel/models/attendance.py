"""
Module: payroll_kernel.models.attendance
Responsibility: ORM persistence for daily presence marks.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - One row per (user_id, date_key) (uq_attendance_user_day).
    - ``timestamp`` is the first mark of the day and is never updated.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from payroll_kernel.db.base import TimestampedBase, UUIDString
from payroll_kernel.db.types import UTCDateTime


class Attendance(TimestampedBase):
    """A user's presence on one UTC calendar day."""

    __tablename__ = "attendance"

    __table_args__ = (
        UniqueConstraint("user_id", "date_key", name="uq_attendance_user_day"),
    )

    user_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("users.id"), nullable=False
    )
    date_key: Mapped[str] = mapped_column(String(10), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    def __repr__(self) -> str:
        return f"<Attendance {self.user_id} {self.date_key}>"
