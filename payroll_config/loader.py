"""
Configuration Loader (``payroll_config.loader``).

Responsibility
--------------
Loads a YAML settings document and parses it into the frozen dataclasses
of ``payroll_config.schema``.  The public entry point for runtime config
is ``payroll_config.get_active_config()``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Out-of-range values  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from payroll_config.schema import (
    DatabaseSettings,
    DeductionReasonDef,
    DisciplineSettings,
    LiabilitySettings,
    LoggingSettings,
    PayrollSettings,
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML file and return its contents as a dict."""
    with open(path) as f:
        return yaml.safe_load(f) or {}


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 over the parsed document."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def parse_database(data: dict[str, Any], url_override: str | None = None) -> DatabaseSettings:
    return DatabaseSettings(
        url=url_override or data["url"],
        echo=bool(data.get("echo", False)),
        pool_size=int(data.get("pool_size", 10)),
        max_overflow=int(data.get("max_overflow", 5)),
        pool_timeout=int(data.get("pool_timeout", 30)),
        pool_recycle=int(data.get("pool_recycle", 1800)),
    )


def parse_discipline(data: dict[str, Any]) -> DisciplineSettings:
    days = int(data.get("archive_after_days", 30))
    if days < 1:
        raise ValueError(f"archive_after_days must be >= 1, got {days}")
    reasons = tuple(
        DeductionReasonDef(key=r["key"], label=r["label"])
        for r in data.get("deduction_reasons", [])
    )
    keys = [r.key for r in reasons]
    if len(keys) != len(set(keys)):
        raise ValueError(f"Duplicate deduction reason keys: {keys}")
    return DisciplineSettings(archive_after_days=days, deduction_reasons=reasons)


def parse_liability(data: dict[str, Any]) -> LiabilitySettings:
    workers = int(data.get("max_workers", 4))
    if workers < 1:
        raise ValueError(f"max_workers must be >= 1, got {workers}")
    return LiabilitySettings(max_workers=workers)


def parse_settings(data: dict[str, Any], database_url: str | None = None) -> PayrollSettings:
    """Parse a full settings document."""
    return PayrollSettings(
        database=parse_database(data["database"], database_url),
        discipline=parse_discipline(data.get("discipline", {})),
        liability=parse_liability(data.get("liability", {})),
        logging=LoggingSettings(level=str(data.get("logging", {}).get("level", "INFO")).upper()),
        checksum=compute_checksum(data),
    )
