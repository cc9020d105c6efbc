"""
AttendanceService -- idempotent daily presence marks.

Responsibility:
    Marks a user present for the current UTC day and lists a month's marks.

Invariants enforced:
    - One row per (user_id, date_key) (uq_attendance_user_day).  A second
      mark on the same day returns the first row unchanged; a concurrent
      duplicate insert resolves to the winner's row, never to an error.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from payroll_kernel.db.types import as_utc
from payroll_kernel.domain.dtos import AttendanceInfo
from payroll_kernel.domain.month_window import date_key_for, month_bounds
from payroll_kernel.logging_config import get_logger
from payroll_kernel.models.attendance import Attendance
from payroll_kernel.services.base import BaseService

logger = get_logger("services.attendance")


class AttendanceService(BaseService[Attendance]):
    """Service for the attendance register."""

    def _find(self, user_id: UUID, date_key: str) -> Attendance | None:
        stmt = select(Attendance).where(
            Attendance.user_id == user_id,
            Attendance.date_key == date_key,
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def mark(self, user_id: UUID, now: datetime | None = None) -> AttendanceInfo:
        """Mark the user present today (UTC).  Idempotent per day."""
        now = as_utc(now) if now is not None else self._clock.now()
        date_key = date_key_for(now)

        existing = self._find(user_id, date_key)
        if existing is not None:
            return AttendanceInfo.from_model(existing)

        try:
            with self.session.begin_nested():
                record = Attendance(
                    user_id=user_id,
                    date_key=date_key,
                    timestamp=now,
                    created_at=now,
                )
                self.session.add(record)
                self.session.flush()
        except IntegrityError:
            winner = self._find(user_id, date_key)
            if winner is None:
                raise
            logger.info(
                "attendance_race_resolved",
                extra={"user_id": str(user_id), "date_key": date_key},
            )
            return AttendanceInfo.from_model(winner)

        logger.info(
            "attendance_marked",
            extra={"user_id": str(user_id), "date_key": date_key},
        )
        return AttendanceInfo.from_model(record)

    def list_for_month(self, user_id: UUID, month_key: str) -> list[AttendanceInfo]:
        window = month_bounds(month_key)
        stmt = (
            select(Attendance)
            .where(
                Attendance.user_id == user_id,
                Attendance.date_key >= window.start_date,
                Attendance.date_key <= window.end_date,
            )
            .order_by(Attendance.date_key)
        )
        return [AttendanceInfo.from_model(a) for a in self.session.execute(stmt).scalars()]

    def days_present(self, user_id: UUID, month_key: str) -> int:
        window = month_bounds(month_key)
        stmt = select(func.count()).select_from(Attendance).where(
            Attendance.user_id == user_id,
            Attendance.date_key >= window.start_date,
            Attendance.date_key <= window.end_date,
        )
        return int(self.session.execute(stmt).scalar_one())
