"""
DisciplineService -- warnings and the deductions they cascade into.

Responsibility:
    Issues warnings (optionally spawning a linked deduction), records
    standalone deductions, tracks warning read state, performs the lazy
    30-day archival sweep, and totals a user's deductions for a month.

Architecture position:
    Kernel > Services -- imperative shell.  Read by SalaryService through
    ``monthly_total()``.

Invariants enforced:
    - Warning + deduction are written in one SAVEPOINT: an observer never
      sees one without the other.
    - Deductions are append-only and windowed by UTC ``created_at``.
    - Archival is lazy: ``list_warnings()`` runs ``sweep_stale_warnings()``
      first; there is no scheduler.
    - Money is Decimal end to end; ``monthly_total()`` sums in Python
      Decimal, never in a float-typed SQL aggregate.

Failure modes:
    - UserNotFoundError / UserInactiveError for the warning target.
    - InvalidAmountError for negative or non-numeric amounts.
    - WarningNotFoundError when marking another user's warning.

Audit relevance:
    ``warning_issued`` and ``deduction_created`` audit records carry the
    warning id, deduction id and amount.
"""

from __future__ import annotations

import base64
import json
from collections.abc import Sequence
from datetime import datetime, timedelta
from decimal import Decimal
from uuid import UUID

from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session

from payroll_kernel.db.types import as_utc, to_decimal
from payroll_kernel.domain.clock import Clock
from payroll_kernel.domain.dtos import (
    ZERO,
    DeductionInfo,
    DeductionReason,
    WarningInfo,
    WarningIssued,
    WarningListItem,
    WarningPage,
)
from payroll_kernel.domain.month_window import month_timestamp_bounds
from payroll_kernel.exceptions import (
    InvalidAmountError,
    UserInactiveError,
    WarningNotFoundError,
)
from payroll_kernel.logging_config import get_logger
from payroll_kernel.models.deduction import Deduction, SourceRole
from payroll_kernel.models.user import User
from payroll_kernel.models.warning import EmployeeWarning
from payroll_kernel.services.audit_trail import AuditAction, AuditTrail
from payroll_kernel.services.base import BaseService

logger = get_logger("services.discipline")

DEFAULT_ARCHIVE_AFTER_DAYS = 30

DEFAULT_DEDUCTION_REASONS: tuple[DeductionReason, ...] = (
    DeductionReason("late_submission", "Late Submission"),
    DeductionReason("quality_issue", "Quality Issue"),
    DeductionReason("attendance", "Attendance Violation"),
    DeductionReason("policy_violation", "Policy Violation"),
    DeductionReason("other", "Other"),
)

WARNING_TABS = ("recent", "archive")


def _parse_amount(amount: object) -> Decimal:
    try:
        value = to_decimal(amount)  # type: ignore[arg-type]
    except ValueError as exc:
        raise InvalidAmountError(amount) from exc
    if value < 0:
        raise InvalidAmountError(amount)
    return value


def _source_tag(source_role: str, source_name: str | None) -> str:
    if source_role == SourceRole.ADMIN.value:
        return "Warning from Admin"
    if source_role == SourceRole.MANAGER.value and source_name:
        return f"Warning from Manager {source_name}"
    if source_role == SourceRole.MANAGER.value:
        return "Warning from Manager"
    return "Warning"


def encode_cursor(created_at: datetime, warning_id: UUID) -> str:
    """Keyset cursor for the warning list."""
    payload = {"created_at": as_utc(created_at).isoformat(), "id": str(warning_id)}
    return base64.b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")


def decode_cursor(cursor: str) -> tuple[datetime, UUID]:
    """Inverse of ``encode_cursor``; raises ValueError on garbage."""
    try:
        data = json.loads(base64.b64decode(cursor, validate=True).decode("utf-8"))
        return as_utc(datetime.fromisoformat(data["created_at"])), UUID(data["id"])
    except (KeyError, TypeError) as exc:
        raise ValueError(f"Malformed cursor: {cursor!r}") from exc


class DisciplineService(BaseService[EmployeeWarning]):
    """
    Service for warnings and deductions.

    Contract:
        Returns frozen DTOs.  Writes flush inside the caller's transaction.

    Non-goals:
        - Does NOT check whether the issuing actor may discipline the
          target (team scoping is the caller's concern).
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        audit: AuditTrail | None = None,
        archive_after_days: int = DEFAULT_ARCHIVE_AFTER_DAYS,
        deduction_reasons: Sequence[DeductionReason] | None = None,
    ):
        super().__init__(session, clock)
        self._audit = audit or AuditTrail(self._clock)
        self._archive_after = timedelta(days=archive_after_days)
        self._reasons = tuple(deduction_reasons or DEFAULT_DEDUCTION_REASONS)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def issue_warning(
        self,
        source_user_id: UUID,
        source_role: SourceRole | str,
        target_user_id: UUID,
        reason: str,
        note: str | None = None,
        deduction_amount: Decimal | int | str | None = None,
    ) -> WarningIssued:
        """
        Issue a warning and, for a positive amount, its linked deduction.

        Raises:
            InvalidAmountError: deduction_amount is negative or not numeric.
            UserNotFoundError: target does not exist.
            UserInactiveError: target is deactivated.
        """
        role = SourceRole(source_role)
        amount = _parse_amount(deduction_amount) if deduction_amount is not None else None
        target = self._get_user(target_user_id)
        if not target.is_active:
            raise UserInactiveError(str(target_user_id))

        spawn_deduction = amount is not None and amount > 0
        now = self._clock.now()
        deduction: Deduction | None = None

        with self.session.begin_nested():
            warning = EmployeeWarning(
                user_id=target_user_id,
                reason=reason,
                note=note,
                source_role=role.value,
                source_user_id=source_user_id,
                deduction_amount=amount if spawn_deduction else None,
                is_read=False,
                created_at=now,
            )
            self.session.add(warning)
            self.session.flush()

            if spawn_deduction:
                deduction = Deduction(
                    user_id=target_user_id,
                    amount=amount,
                    reason=f"Deduction from warning: {reason}",
                    source_role=role.value,
                    source_user_id=source_user_id,
                    warning_id=warning.id,
                    created_at=now,
                )
                self.session.add(deduction)
                self.session.flush()

        self._audit.record(
            AuditAction.WARNING_ISSUED,
            performed_by_id=source_user_id,
            target_user_id=target_user_id,
            details={
                "warning_id": str(warning.id),
                "reason": reason,
                "deduction_amount": amount,
                "deduction_id": str(deduction.id) if deduction else None,
            },
        )
        logger.info(
            "warning_issued",
            extra={
                "warning_id": str(warning.id),
                "user_id": str(target_user_id),
                "source_role": role.value,
                "with_deduction": deduction is not None,
            },
        )
        return WarningIssued(
            warning=WarningInfo.from_model(warning),
            deduction=DeductionInfo.from_model(deduction) if deduction else None,
        )

    def create_deduction(
        self,
        source_user_id: UUID,
        source_role: SourceRole | str,
        target_user_id: UUID,
        reason_key: str,
        amount: Decimal | int | str,
    ) -> DeductionInfo:
        """
        Record a deduction that is not tied to a warning.

        The stored reason is ``"{label}: {reason_key}"``; unknown keys use
        the key as their own label.

        Raises:
            InvalidAmountError: amount is negative or not numeric.
            UserNotFoundError: target does not exist.
        """
        role = SourceRole(source_role)
        value = _parse_amount(amount)
        self._get_user(target_user_id)

        label = next((r.label for r in self._reasons if r.key == reason_key), reason_key)
        deduction = Deduction(
            user_id=target_user_id,
            amount=value,
            reason=f"{label}: {reason_key}",
            source_role=role.value,
            source_user_id=source_user_id,
            created_at=self._clock.now(),
        )
        self.session.add(deduction)
        self.session.flush()

        self._audit.record(
            AuditAction.DEDUCTION_CREATED,
            performed_by_id=source_user_id,
            target_user_id=target_user_id,
            details={
                "deduction_id": str(deduction.id),
                "amount": value,
                "reason_key": reason_key,
            },
        )
        logger.info(
            "deduction_created",
            extra={
                "deduction_id": str(deduction.id),
                "user_id": str(target_user_id),
                "amount": value,
            },
        )
        return DeductionInfo.from_model(deduction)

    def mark_warning_read(self, user_id: UUID, warning_id: UUID) -> WarningInfo:
        """
        Mark the user's own warning as read.  Repeated calls keep the
        first ``read_at``.

        Raises:
            WarningNotFoundError: missing, or owned by another user.
        """
        stmt = select(EmployeeWarning).where(
            EmployeeWarning.id == warning_id,
            EmployeeWarning.user_id == user_id,
        )
        warning = self.session.execute(stmt).scalar_one_or_none()
        if warning is None:
            raise WarningNotFoundError(str(warning_id), str(user_id))

        if not warning.is_read:
            warning.is_read = True
            warning.read_at = self._clock.now()
            self.session.flush()
            logger.info(
                "warning_marked_read",
                extra={"warning_id": str(warning.id), "user_id": str(user_id)},
            )
        return WarningInfo.from_model(warning)

    def sweep_stale_warnings(self, user_id: UUID, now: datetime | None = None) -> int:
        """Archive the user's unarchived warnings older than the window."""
        now = as_utc(now) if now is not None else self._clock.now()
        cutoff = now - self._archive_after
        stmt = select(EmployeeWarning).where(
            EmployeeWarning.user_id == user_id,
            EmployeeWarning.created_at <= cutoff,
            EmployeeWarning.archived_at.is_(None),
        )
        stale = self.session.execute(stmt).scalars().all()
        for warning in stale:
            warning.archived_at = now
        archived = len(stale)
        if archived:
            self.session.flush()
            logger.info(
                "warnings_archived",
                extra={"user_id": str(user_id), "count": archived},
            )
        return archived

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def deduction_reasons(self) -> list[DeductionReason]:
        return list(self._reasons)

    def list_warnings(
        self,
        user_id: UUID,
        tab: str = "recent",
        cursor: str | None = None,
        limit: int = 10,
    ) -> WarningPage:
        """
        Page through the user's warnings, newest first.

        Runs the archival sweep first.  ``recent`` holds unarchived
        warnings inside the window; ``archive`` holds the rest.  An
        undecodable cursor is ignored.
        """
        if tab not in WARNING_TABS:
            raise ValueError(f"tab must be one of {WARNING_TABS}, got {tab!r}")
        if limit < 1:
            raise ValueError(f"limit must be positive, got {limit!r}")

        now = self._clock.now()
        self.sweep_stale_warnings(user_id, now)
        cutoff = now - self._archive_after

        stmt = select(EmployeeWarning).where(EmployeeWarning.user_id == user_id)
        if tab == "recent":
            stmt = stmt.where(
                EmployeeWarning.archived_at.is_(None),
                EmployeeWarning.created_at >= cutoff,
            )
        else:
            stmt = stmt.where(
                or_(
                    EmployeeWarning.archived_at.is_not(None),
                    EmployeeWarning.created_at < cutoff,
                )
            )

        if cursor:
            try:
                cursor_at, cursor_id = decode_cursor(cursor)
            except ValueError:
                logger.debug("warning_cursor_ignored", extra={"user_id": str(user_id)})
            else:
                stmt = stmt.where(
                    or_(
                        EmployeeWarning.created_at < cursor_at,
                        and_(
                            EmployeeWarning.created_at == cursor_at,
                            EmployeeWarning.id < cursor_id,
                        ),
                    )
                )

        stmt = stmt.order_by(
            EmployeeWarning.created_at.desc(), EmployeeWarning.id.desc()
        ).limit(limit + 1)
        rows = self.session.execute(stmt).scalars().all()

        has_more = len(rows) > limit
        rows = rows[:limit]
        names = self._source_names({w.source_user_id for w in rows})

        items = tuple(
            WarningListItem(
                id=w.id,
                message=WarningInfo.from_model(w).message,
                source_tag=_source_tag(w.source_role, names.get(w.source_user_id)),
                is_read=w.is_read,
                read_at=w.read_at,
                archived_at=w.archived_at,
                created_at=w.created_at,
            )
            for w in rows
        )
        next_cursor = None
        if has_more and rows:
            next_cursor = encode_cursor(rows[-1].created_at, rows[-1].id)
        return WarningPage(items=items, next_cursor=next_cursor)

    def _source_names(self, user_ids: set[UUID]) -> dict[UUID, str]:
        if not user_ids:
            return {}
        stmt = select(User.id, User.name).where(User.id.in_(list(user_ids)))
        return {row.id: row.name for row in self.session.execute(stmt)}

    def unread_count(self, user_id: UUID) -> int:
        stmt = select(func.count()).select_from(EmployeeWarning).where(
            EmployeeWarning.user_id == user_id,
            EmployeeWarning.is_read.is_(False),
        )
        return int(self.session.execute(stmt).scalar_one())

    def list_deductions_for_month(self, user_id: UUID, month_key: str) -> list[DeductionInfo]:
        window = month_timestamp_bounds(month_key)
        stmt = (
            select(Deduction)
            .where(
                Deduction.user_id == user_id,
                Deduction.created_at >= window.start,
                Deduction.created_at < window.end,
            )
            .order_by(Deduction.created_at)
        )
        return [DeductionInfo.from_model(d) for d in self.session.execute(stmt).scalars()]

    def monthly_total(self, user_id: UUID, month_key: str) -> Decimal:
        """
        Exact sum of the user's deductions created inside the month's UTC
        timestamp window (both ends inclusive).
        """
        window = month_timestamp_bounds(month_key)
        stmt = select(Deduction.amount).where(
            Deduction.user_id == user_id,
            Deduction.created_at >= window.start,
            Deduction.created_at < window.end,
        )
        total = ZERO
        for amount in self.session.execute(stmt).scalars():
            total += amount
        return total
