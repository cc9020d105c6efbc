"""
Module: payroll_kernel.db.types
Responsibility: Column types and coercion helpers for money and time.
    Centralizes decimal storage and UTC normalization so that every model
    and service uses identical definitions.
Architecture position: Kernel > DB.  May be imported by models/, domain/ and
    services/.  MUST NOT import from any of those layers.

Invariants enforced:
    CRITICAL: No floats anywhere in the payroll kernel.  Monetary amounts and
    rates are Decimal on the Python side and exact decimals in storage.
    SQLite has no exact decimal column, so MoneyType stores the canonical
    decimal string there; PostgreSQL uses NUMERIC(38, 9).
"""

from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation

from sqlalchemy import DateTime, Numeric, String
from sqlalchemy.types import TypeDecorator

MONEY_PRECISION = 38
MONEY_SCALE = 9


class MoneyType(TypeDecorator):
    """
    Exact decimal column.

    Guarantees:
        - process_bind_param: accepts Decimal/int/str, never float.
        - process_result_value: always returns Decimal (or None).
    """

    impl = Numeric(MONEY_PRECISION, MONEY_SCALE)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String(48))
        return dialect.type_descriptor(
            Numeric(MONEY_PRECISION, MONEY_SCALE, asdecimal=True)
        )

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = to_decimal(value)
        if dialect.name == "sqlite":
            return str(value)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, Decimal):
            return value
        return Decimal(str(value))


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware timestamp normalized to UTC.

    Naive datetimes are taken to already be UTC.  SQLite drops tzinfo on
    storage, so values are stripped on the way in and re-tagged on the way
    out; server databases keep ``timestamp with time zone``.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = as_utc(value)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return as_utc(value)


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime (naive means UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def to_decimal(value: Decimal | int | str | float) -> Decimal:
    """
    Coerce a caller-supplied number to Decimal without binary rounding.

    Floats are converted through their shortest repr (``str``), which is
    what JSON-decoded numbers round-trip to.  Booleans, NaN and infinities
    are rejected with ValueError.
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a decimal value: {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation as exc:
            raise ValueError(f"Not a decimal value: {value!r}") from exc
    else:
        raise ValueError(f"Not a decimal value: {value!r}")
    if not result.is_finite():
        raise ValueError(f"Not a finite decimal value: {value!r}")
    return result

