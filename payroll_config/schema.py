"""
Payroll runtime settings schema.

Parsed from YAML by ``payroll_config.loader`` and handed to
``payroll_services`` wiring.  The kernel never imports this package; it
receives plain values (archive window, reason catalog) through service
constructors.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DatabaseSettings:
    """Connection and pool settings."""

    url: str
    echo: bool = False
    pool_size: int = 10
    max_overflow: int = 5
    pool_timeout: int = 30
    pool_recycle: int = 1800


@dataclass(frozen=True)
class DeductionReasonDef:
    """One entry of the deduction-reason catalog."""

    key: str
    label: str


@dataclass(frozen=True)
class DisciplineSettings:
    """Warning archival and deduction catalog."""

    archive_after_days: int = 30
    deduction_reasons: tuple[DeductionReasonDef, ...] = ()


@dataclass(frozen=True)
class LiabilitySettings:
    """Fan-out of the pending payroll computation."""

    max_workers: int = 4


@dataclass(frozen=True)
class LoggingSettings:
    """Structured logging level."""

    level: str = "INFO"


@dataclass(frozen=True)
class PayrollSettings:
    """Root settings object returned by ``get_active_config()``."""

    database: DatabaseSettings
    discipline: DisciplineSettings = field(default_factory=DisciplineSettings)
    liability: LiabilitySettings = field(default_factory=LiabilitySettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    checksum: str = ""
