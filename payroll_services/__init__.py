"""
payroll_services -- wiring above the payroll kernel.

Owns the database handle, the per-session service container, the
organization-wide liability aggregation and the process bootstrap.
"""

from payroll_services.database import Database
from payroll_services.liability_service import LiabilityService
from payroll_services.portal import PayrollPortal
from payroll_services.runtime import PayrollRuntime, create_runtime

__all__ = [
    "Database",
    "LiabilityService",
    "PayrollPortal",
    "PayrollRuntime",
    "create_runtime",
]
