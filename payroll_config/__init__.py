"""
payroll_config -- single public entrypoint for runtime settings.

Responsibility:
    Provides the ONLY way to obtain settings at runtime through
    ``get_active_config()``.  No other component reads configuration files
    or environment variables.

Environment:
    PAYROLL_CONFIG  -- path to an alternative YAML settings file.
    DATABASE_URL    -- overrides ``database.url``.

Failure modes:
    - ``FileNotFoundError`` -- the settings file does not exist.
    - ``KeyError`` / ``ValueError`` -- missing or invalid settings.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from payroll_config.loader import load_yaml_file, parse_settings
from payroll_config.schema import (
    DatabaseSettings,
    DeductionReasonDef,
    DisciplineSettings,
    LiabilitySettings,
    LoggingSettings,
    PayrollSettings,
)

_logger = logging.getLogger("payroll_kernel.config")

_DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_config(config_path: Path | None = None) -> PayrollSettings:
    """Load, validate and return the active settings."""
    if config_path is None:
        env_path = os.environ.get("PAYROLL_CONFIG")
        config_path = Path(env_path) if env_path else _DEFAULT_CONFIG_PATH

    data = load_yaml_file(config_path)
    settings = parse_settings(data, database_url=os.environ.get("DATABASE_URL"))

    _logger.info(
        "PAYROLL_CONFIG_TRACE",
        extra={
            "config_path": str(config_path),
            "checksum": settings.checksum,
            "archive_after_days": settings.discipline.archive_after_days,
            "deduction_reason_count": len(settings.discipline.deduction_reasons),
            "liability_max_workers": settings.liability.max_workers,
        },
    )
    return settings


__all__ = [
    "DatabaseSettings",
    "DeductionReasonDef",
    "DisciplineSettings",
    "LiabilitySettings",
    "LoggingSettings",
    "PayrollSettings",
    "get_active_config",
]
