"""
Health endpoint and CLI tests.
"""

import pytest

from courtside.models import Table, User
from courtside.services import auth_service


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


# =============================================================================
# HEALTH
# =============================================================================


class TestHealth:

    def test_degraded_without_owner(self, client, db_session):
        resp = client.get("/health")

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["status"] == "degraded"
        assert "warning" in body["checks"]["database"]

    def test_healthy_with_owner(self, client, owner, court):
        resp = client.get("/health")

        body = resp.get_json()
        assert body["status"] == "healthy"
        assert body["checks"]["database"]["details"]["owners"] == 1
        assert body["checks"]["database"]["details"]["courts"] == 1
        assert body["timestamp"].endswith("Z")

    def test_reports_stream_subscribers(self, client, owner):
        body = client.get("/health").get_json()
        assert body["checks"]["notification_stream"]["subscribers"] >= 0


# =============================================================================
# CLI
# =============================================================================


class TestSystemInit:

    def test_init_creates_owner_and_tables(self, runner, app, db_session):
        result = runner.invoke(args=["system", "init", "--tables", "3"])

        assert result.exit_code == 0, result.output
        assert "PASS Created owner: owner@courtside.local" in result.output
        owner = db_session.query(User).one()
        assert owner.role == "OWNER"
        assert auth_service.authenticate(app.config["SEED_OWNER_EMAIL"], app.config["SEED_OWNER_PASSWORD"]) == owner
        assert [t.code for t in db_session.query(Table).order_by(Table.code)] == ["T01", "T02", "T03"]

    def test_init_is_idempotent(self, runner, db_session):
        runner.invoke(args=["system", "init", "--tables", "2"])
        result = runner.invoke(args=["system", "init", "--tables", "2"])

        assert result.exit_code == 0
        assert "already exists, skipping" in result.output
        assert "0 created, 2 already present" in result.output
        assert db_session.query(User).count() == 1

    def test_reset_requires_confirmation(self, runner, owner, db_session):
        result = runner.invoke(args=["system", "reset-db"], input="n\n")

        assert result.exit_code == 1
        assert db_session.query(User).count() == 1


class TestUserCommands:

    def test_create_user(self, runner, db_session):
        result = runner.invoke(args=[
            "users", "create",
            "--name", "Kasir 1",
            "--email", "Kasir1@Courtside.local",
            "--password", "Password123!",
            "--role", "KASIR",
        ])

        assert result.exit_code == 0, result.output
        assert "PASS Created user: Kasir 1 (kasir1@courtside.local)" in result.output
        assert db_session.query(User).filter_by(email="kasir1@courtside.local").one().role == "KASIR"

    def test_weak_password_reported(self, runner, db_session):
        result = runner.invoke(args=[
            "users", "create",
            "--name", "Weak",
            "--email", "weak@courtside.local",
            "--password", "weak",
            "--role", "KASIR",
        ])

        assert "FAIL Password validation failed" in result.output
        assert db_session.query(User).count() == 0

    def test_unknown_role_rejected(self, runner, db_session):
        result = runner.invoke(args=[
            "users", "create",
            "--name", "X",
            "--email", "x@courtside.local",
            "--password", "Password123!",
            "--role", "CHEF",
        ])
        assert result.exit_code != 0

    def test_list_users(self, runner, owner, kasir):
        result = runner.invoke(args=["users", "list"])

        assert result.exit_code == 0
        assert "owner@courtside.test" in result.output
        assert "kasir@courtside.test" in result.output


class TestTableCommands:

    def test_seed(self, runner, table, db_session):
        result = runner.invoke(args=["tables", "seed", "--count", "3"])

        assert result.exit_code == 0
        assert "PASS Created 2 table(s)" in result.output
        assert db_session.query(Table).count() == 3

    def test_seed_rejects_zero(self, runner, db_session):
        result = runner.invoke(args=["tables", "seed", "--count", "0"])
        assert "FAIL --count must be at least 1" in result.output
