"""
Module: payroll_kernel.models.user
Responsibility: ORM row for portal users as seen by the payroll core.
Architecture position: Kernel > Models.  May import from db/ only.

The user table is owned by the identity/HTTP layer.  The payroll core only
reads ``rate_per_order`` and ``is_active``; a user without a rate never
accrues salary.
"""

from decimal import Decimal
from enum import Enum

from sqlalchemy import Boolean, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from payroll_kernel.db.base import TimestampedBase


class UserRole(str, Enum):
    """Portal roles."""

    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    EMPLOYEE = "EMPLOYEE"


class User(TimestampedBase):
    """
    Portal user.

    Guarantees:
        - email is unique (uq_user_email).
        - rate_per_order is Decimal or None, never float.
    """

    __tablename__ = "users"

    __table_args__ = (
        UniqueConstraint("email", name="uq_user_email"),
        Index("idx_user_active", "is_active"),
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    role: Mapped[str] = mapped_column(
        String(20),
        default=UserRole.EMPLOYEE.value,
        nullable=False,
    )
    rate_per_order: Mapped[Decimal | None] = mapped_column(nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role}) active={self.is_active}>"
