"""Tests for the payroll-core command line."""

import json
from decimal import Decimal
from uuid import uuid4

import pytest

from payroll_kernel.models.order_submission import OrderAction
from payroll_kernel.models.user import User
from payroll_services.cli import main
from payroll_services.database import Database
from payroll_services.portal import PayrollPortal


@pytest.fixture
def cli_database_url(tmp_path, monkeypatch):
    url = f"sqlite:///{tmp_path / 'cli.db'}"
    monkeypatch.delenv("PAYROLL_CONFIG", raising=False)
    monkeypatch.setenv("DATABASE_URL", url)
    assert main(["init-db"]) == 0
    return url


@pytest.fixture
def cli_env(cli_database_url):
    return cli_database_url


@pytest.fixture
def rated_user_id(cli_database_url, test_actor_id):
    """A user earning 7.05 (3 orders at 2.35) in 2024-02."""
    db = Database(cli_database_url)
    try:
        with db.session_scope() as session:
            user = User(name="Cli", email="cli@example.com", rate_per_order=Decimal("2.35"))
            session.add(user)
            session.flush()
            portal = PayrollPortal(session)
            order = portal.orders.submit(user.id, "2024-02-10", 3)
            portal.orders.decide(order.id, OrderAction.APPROVE, approved_count=3, decided_by_id=test_actor_id)
            return user.id
    finally:
        db.dispose()


class TestCli:

    def test_pending_on_empty_database(self, cli_env, capsys):
        capsys.readouterr()
        assert main(["pending", "2024-02"]) == 0

        payload = json.loads(capsys.readouterr().out)
        assert payload == {"total_pending_salary": 0, "month": "2024-02", "user_count": 0}

    def test_money_is_written_as_exact_numbers(self, rated_user_id, capsys):
        capsys.readouterr()
        assert main(["salary", str(rated_user_id), "2024-02"]) == 0

        out = capsys.readouterr().out
        payload = json.loads(out, parse_float=Decimal)
        assert payload["salary"] == Decimal("7.05")
        assert payload["approved_orders_count"] == 3
        assert isinstance(payload["total_deductions"], (int, Decimal))
        assert '"salary": "' not in out

    def test_pending_total_is_a_number(self, rated_user_id, capsys):
        capsys.readouterr()
        assert main(["pending", "2024-02"]) == 0

        payload = json.loads(capsys.readouterr().out, parse_float=Decimal)
        assert payload["total_pending_salary"] == Decimal("7.05")
        assert payload["user_count"] == 1

    def test_reasons(self, cli_env, capsys):
        capsys.readouterr()
        assert main(["reasons"]) == 0

        payload = json.loads(capsys.readouterr().out)
        assert payload[0] == {"key": "late_submission", "label": "Late Submission"}

    def test_kernel_errors_exit_nonzero(self, cli_env, capsys):
        assert main(["salary", str(uuid4()), "2024-02"]) == 1
        assert "USER_NOT_FOUND" in capsys.readouterr().err

    def test_invalid_month(self, cli_env, capsys):
        assert main(["pending", "2024-13"]) == 1
        assert "INVALID_MONTH_KEY" in capsys.readouterr().err
