"""
Command-line access to the payroll core.

Usage:
    payroll-core init-db
    payroll-core salary <user-id> 2024-02
    payroll-core pending 2024-02
    payroll-core reasons

Settings come from ``get_active_config()``; DATABASE_URL and PAYROLL_CONFIG
override them as usual.
"""

from __future__ import annotations

import argparse
import sys
from uuid import UUID

import simplejson

from payroll_kernel.exceptions import PayrollKernelError
from payroll_services.runtime import PayrollRuntime, create_runtime


def _json_default(value: object) -> str:
    if isinstance(value, UUID):
        return str(value)
    raise TypeError(f"Not JSON serializable: {type(value).__name__}")


def _emit(payload: object) -> None:
    # Decimals are written as exact number literals, never through float
    print(simplejson.dumps(payload, use_decimal=True, default=_json_default, indent=2))


def _init_db(runtime: PayrollRuntime, args: argparse.Namespace) -> None:
    runtime.database.create_tables()
    _emit({"status": "ok"})


def _salary(runtime: PayrollRuntime, args: argparse.Namespace) -> None:
    with runtime.database.snapshot_scope() as session:
        breakdown = runtime.portal(session).salary.calculate(args.user_id, args.month)
    _emit(breakdown.to_dict())


def _pending(runtime: PayrollRuntime, args: argparse.Namespace) -> None:
    _emit(runtime.liability.pending_payroll(args.month).to_dict())


def _reasons(runtime: PayrollRuntime, args: argparse.Namespace) -> None:
    with runtime.database.session_scope() as session:
        reasons = runtime.portal(session).discipline.deduction_reasons()
    _emit([{"key": r.key, "label": r.label} for r in reasons])


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="payroll-core",
        description="Payroll ledger and approval-state core",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create missing tables").set_defaults(handler=_init_db)

    salary = sub.add_parser("salary", help="One user's salary for a month")
    salary.add_argument("user_id", type=UUID)
    salary.add_argument("month", help="YYYY-MM")
    salary.set_defaults(handler=_salary)

    pending = sub.add_parser("pending", help="Pending payroll across active users")
    pending.add_argument("month", help="YYYY-MM")
    pending.set_defaults(handler=_pending)

    sub.add_parser("reasons", help="Deduction reason catalog").set_defaults(handler=_reasons)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    runtime = create_runtime()
    try:
        args.handler(runtime, args)
    except PayrollKernelError as exc:
        print(f"ERROR [{exc.code}]: {exc}", file=sys.stderr)
        return 1
    finally:
        runtime.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
