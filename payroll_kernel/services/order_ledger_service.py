"""
OrderLedgerService -- daily order submissions and their approval state.

Responsibility:
    Owns the per-user per-day submission records: employee submission and
    resubmission, manager approval/rejection, and the month / review-queue
    reads that the salary engine and dashboards use.

Architecture position:
    Kernel > Services -- imperative shell.

Invariants enforced:
    - One submission per (user_id, date_key), backed by the
      uq_order_submission_user_day constraint.  A lost insert race is
      resolved by re-reading the winner's row inside the same transaction.
    - APPROVED is terminal: ``submit`` raises OrderLockedError and
      ``decide`` raises InvalidOrderTransitionError, both before mutating.
    - Flush-only: never commits or rolls back the outer transaction.

Failure modes:
    - InvalidDateKeyError / InvalidMonthKeyError on malformed keys.
    - InvalidSubmittedCountError / InvalidApprovedCountError on bad counts.
    - InvalidOrderActionError for an action other than APPROVE/REJECT.
    - OrderNotFoundError when an order id does not resolve.

Audit relevance:
    Every decision emits an ``order_approved`` / ``order_rejected`` audit
    record carrying the submitted and approved counts and the day key.
"""

from collections.abc import Iterable
from datetime import timedelta
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from payroll_kernel.domain.clock import Clock
from payroll_kernel.domain.dtos import DailyTrendPoint, OrderSubmissionInfo
from payroll_kernel.domain.month_window import month_bounds, parse_date_key
from payroll_kernel.exceptions import (
    InvalidApprovedCountError,
    InvalidOrderActionError,
    InvalidOrderTransitionError,
    InvalidSubmittedCountError,
    OrderLockedError,
    OrderNotFoundError,
)
from payroll_kernel.logging_config import get_logger
from payroll_kernel.models.order_submission import (
    ORDER_TRANSITIONS,
    OrderAction,
    OrderStatus,
    OrderSubmission,
)
from payroll_kernel.services.audit_trail import AuditAction, AuditTrail
from payroll_kernel.services.base import BaseService

logger = get_logger("services.order_ledger")


def _is_count(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _coerce_action(action: OrderAction | str) -> OrderAction:
    if isinstance(action, OrderAction):
        return action
    if isinstance(action, str):
        try:
            return OrderAction(action.strip().upper())
        except ValueError:
            pass
    raise InvalidOrderActionError(action)


class OrderLedgerService(BaseService[OrderSubmission]):
    """
    Service for daily order submissions.

    Contract:
        Accepts user ids, day keys and month keys; returns frozen
        ``OrderSubmissionInfo`` DTOs.

    Non-goals:
        - Does NOT decide who may approve whose orders; actor authorization
          and team scoping are enforced by the caller.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        audit: AuditTrail | None = None,
    ):
        super().__init__(session, clock)
        self._audit = audit or AuditTrail(self._clock)

    def _find(self, user_id: UUID, date_key: str) -> OrderSubmission | None:
        stmt = select(OrderSubmission).where(
            OrderSubmission.user_id == user_id,
            OrderSubmission.date_key == date_key,
        )
        return self.session.execute(stmt).scalar_one_or_none()

    # ------------------------------------------------------------------
    # Employee side
    # ------------------------------------------------------------------

    def submit(
        self,
        user_id: UUID,
        date_key: str,
        submitted_count: int,
    ) -> OrderSubmissionInfo:
        """
        Create or overwrite the user's submission for ``date_key``.

        A new submission starts PENDING.  An existing PENDING submission has
        its count overwritten; a REJECTED one is overwritten and returned to
        PENDING with its decision cleared.

        Raises:
            InvalidSubmittedCountError: count is not an integer >= 0.
            InvalidDateKeyError: date_key is not a real YYYY-MM-DD day.
            OrderLockedError: the submission is already APPROVED.
        """
        if not _is_count(submitted_count):
            raise InvalidSubmittedCountError(submitted_count)
        parse_date_key(date_key)

        order = self._find(user_id, date_key)
        if order is None:
            try:
                with self.session.begin_nested():
                    order = OrderSubmission(
                        user_id=user_id,
                        date_key=date_key,
                        submitted_count=submitted_count,
                        status=OrderStatus.PENDING.value,
                        created_at=self._clock.now(),
                    )
                    self.session.add(order)
                    self.session.flush()
            except IntegrityError:
                # Lost the (user_id, date_key) race: apply the update rules
                # to the winner's row instead.
                order = self._find(user_id, date_key)
                if order is None:
                    raise
                logger.info(
                    "order_submission_race_resolved",
                    extra={"user_id": str(user_id), "date_key": date_key},
                )
            else:
                logger.info(
                    "order_submitted",
                    extra={
                        "order_id": str(order.id),
                        "user_id": str(user_id),
                        "date_key": date_key,
                        "submitted_count": submitted_count,
                    },
                )
                return OrderSubmissionInfo.from_model(order)

        return self._resubmit(order, submitted_count)

    def _resubmit(
        self, order: OrderSubmission, submitted_count: int
    ) -> OrderSubmissionInfo:
        if order.is_locked:
            logger.warning(
                "order_submission_locked",
                extra={"order_id": str(order.id), "date_key": order.date_key},
            )
            raise OrderLockedError(str(order.id), order.date_key)

        previous_status = order.status
        order.submitted_count = submitted_count
        if previous_status == OrderStatus.REJECTED.value:
            order.status = OrderStatus.PENDING.value
            order.approved_count = None
            order.decided_by_id = None
            order.decided_at = None
        self.session.flush()

        logger.info(
            "order_resubmitted",
            extra={
                "order_id": str(order.id),
                "user_id": str(order.user_id),
                "date_key": order.date_key,
                "submitted_count": submitted_count,
                "previous_status": previous_status,
            },
        )
        return OrderSubmissionInfo.from_model(order)

    # ------------------------------------------------------------------
    # Manager side
    # ------------------------------------------------------------------

    def decide(
        self,
        order_id: UUID,
        action: OrderAction | str,
        approved_count: int | None = None,
        decided_by_id: UUID | None = None,
    ) -> OrderSubmissionInfo:
        """
        Approve or reject a PENDING submission.

        APPROVE stores ``approved_count``; REJECT ignores it and leaves the
        approved count null.

        Raises:
            InvalidOrderActionError: action is not APPROVE or REJECT.
            InvalidApprovedCountError: APPROVE without a count >= 0.
            OrderNotFoundError: order_id does not resolve.
            InvalidOrderTransitionError: the order is not PENDING.
        """
        action = _coerce_action(action)
        if action is OrderAction.APPROVE and not _is_count(approved_count):
            raise InvalidApprovedCountError(approved_count)

        stmt = (
            select(OrderSubmission)
            .where(OrderSubmission.id == order_id)
            .with_for_update()
        )
        order = self.session.execute(stmt).scalar_one_or_none()
        if order is None:
            raise OrderNotFoundError(str(order_id))

        current = OrderStatus(order.status)
        target = (
            OrderStatus.APPROVED if action is OrderAction.APPROVE
            else OrderStatus.REJECTED
        )
        if target not in ORDER_TRANSITIONS[current]:
            raise InvalidOrderTransitionError(
                str(order.id), current.value, target.value,
            )

        order.status = target.value
        order.approved_count = approved_count if target is OrderStatus.APPROVED else None
        order.decided_by_id = decided_by_id
        order.decided_at = self._clock.now()
        self.session.flush()

        self._audit.record(
            AuditAction.ORDER_APPROVED if target is OrderStatus.APPROVED
            else AuditAction.ORDER_REJECTED,
            performed_by_id=decided_by_id,
            target_user_id=order.user_id,
            details={
                "order_id": str(order.id),
                "date_key": order.date_key,
                "submitted_count": order.submitted_count,
                "approved_count": order.approved_count,
            },
        )
        logger.info(
            "order_decided",
            extra={
                "order_id": str(order.id),
                "user_id": str(order.user_id),
                "action": action.value,
                "status": order.status,
                "approved_count": order.approved_count,
            },
        )
        return OrderSubmissionInfo.from_model(order)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, order_id: UUID) -> OrderSubmissionInfo:
        order = self.session.get(OrderSubmission, order_id)
        if order is None:
            raise OrderNotFoundError(str(order_id))
        return OrderSubmissionInfo.from_model(order)

    def list_for_month(self, user_id: UUID, month_key: str) -> list[OrderSubmissionInfo]:
        """All of the user's submissions in the month, by day ascending."""
        window = month_bounds(month_key)
        stmt = (
            select(OrderSubmission)
            .where(
                OrderSubmission.user_id == user_id,
                OrderSubmission.date_key >= window.start_date,
                OrderSubmission.date_key <= window.end_date,
            )
            .order_by(OrderSubmission.date_key)
        )
        orders = self.session.execute(stmt).scalars().all()
        return [OrderSubmissionInfo.from_model(o) for o in orders]

    def list_pending(
        self, user_ids: Iterable[UUID] | None = None
    ) -> list[OrderSubmissionInfo]:
        """The review queue: PENDING submissions, newest first."""
        stmt = select(OrderSubmission).where(
            OrderSubmission.status == OrderStatus.PENDING.value
        )
        if user_ids is not None:
            stmt = stmt.where(OrderSubmission.user_id.in_(list(user_ids)))
        stmt = stmt.order_by(
            OrderSubmission.created_at.desc(), OrderSubmission.date_key.desc()
        )
        orders = self.session.execute(stmt).scalars().all()
        return [OrderSubmissionInfo.from_model(o) for o in orders]

    def approved_count_for_month(self, user_id: UUID, month_key: str) -> int:
        """Sum of approved counts over APPROVED submissions in the month."""
        window = month_bounds(month_key)
        stmt = select(
            func.coalesce(func.sum(OrderSubmission.approved_count), 0)
        ).where(
            OrderSubmission.user_id == user_id,
            OrderSubmission.status == OrderStatus.APPROVED.value,
            OrderSubmission.date_key >= window.start_date,
            OrderSubmission.date_key <= window.end_date,
        )
        return int(self.session.execute(stmt).scalar_one())

    def daily_trend(
        self, user_id: UUID, end_date_key: str, days: int
    ) -> list[DailyTrendPoint]:
        """
        Zero-filled daily totals for ``[end - days, end]``.

        Approved totals only count APPROVED submissions.
        """
        if not _is_count(days):
            raise ValueError(f"days must be a non-negative integer, got {days!r}")
        end = parse_date_key(end_date_key)
        start = end - timedelta(days=days)

        stmt = select(OrderSubmission).where(
            OrderSubmission.user_id == user_id,
            OrderSubmission.date_key >= start.isoformat(),
            OrderSubmission.date_key <= end.isoformat(),
        )
        by_day: dict[str, list[int]] = {
            (start + timedelta(days=i)).isoformat(): [0, 0]
            for i in range(days + 1)
        }
        for order in self.session.execute(stmt).scalars():
            totals = by_day[order.date_key]
            totals[0] += order.submitted_count
            if order.status == OrderStatus.APPROVED.value and order.approved_count:
                totals[1] += order.approved_count

        return [
            DailyTrendPoint(date_key=day, submitted=submitted, approved=approved)
            for day, (submitted, approved) in by_day.items()
        ]
