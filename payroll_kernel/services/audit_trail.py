"""
AuditTrail -- structured audit emission for payroll state changes.

Responsibility:
    Emits one ``audit`` record for every significant state change (order
    decisions, warnings, deductions) with the fields an audit store needs:
    action, performing actor, target user, occurred_at and a details map.

Architecture position:
    Kernel > Services -- called by OrderLedgerService and DisciplineService.

Non-goals:
    Persisting audit rows.  Records go to the ``payroll_kernel.audit``
    logger; where they are stored is the deployment's concern.
"""

from enum import Enum
from typing import Any
from uuid import UUID

from payroll_kernel.domain.clock import Clock, SystemClock
from payroll_kernel.logging_config import get_logger

logger = get_logger("audit")


class AuditAction(str, Enum):
    """Audited actions."""

    ORDER_APPROVED = "order_approved"
    ORDER_REJECTED = "order_rejected"
    WARNING_ISSUED = "warning_issued"
    DEDUCTION_CREATED = "deduction_created"


class AuditTrail:
    """Emits audit records through the structured logger."""

    def __init__(self, clock: Clock | None = None):
        self._clock = clock or SystemClock()

    def record(
        self,
        action: AuditAction,
        performed_by_id: UUID | None,
        target_user_id: UUID | None,
        details: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Emit an audit record and return it."""
        entry = {
            "audit_action": action.value,
            "performed_by_id": str(performed_by_id) if performed_by_id else None,
            "target_user_id": str(target_user_id) if target_user_id else None,
            "occurred_at": self._clock.now(),
            "details": details or {},
        }
        logger.info("audit", extra=entry)
        return entry
