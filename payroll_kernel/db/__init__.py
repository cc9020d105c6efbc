"""Database layer - base classes and column types."""

from payroll_kernel.db.base import UUID, Base, TimestampedBase, UUIDString
from payroll_kernel.db.types import MoneyType, UTCDateTime, as_utc, to_decimal

__all__ = [
    "Base",
    "TimestampedBase",
    "UUIDString",
    "UUID",
    "MoneyType",
    "UTCDateTime",
    "as_utc",
    "to_decimal",
]
