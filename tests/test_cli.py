"""Tests for the command-line interface."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from click.testing import CliRunner
from pymongo.errors import OperationFailure, ServerSelectionTimeoutError

from mongo_plugin.cli.commands import cli
from mongo_plugin.config.settings import default_config, get_settings
from mongo_plugin.db.errors import MongoConnectionError, MongoOperationError


@pytest.fixture
def fake_client() -> MagicMock:
    """Client double returned by new_client in the CLI."""
    client = MagicMock(name="client")
    client.config = default_config()
    client.ping = AsyncMock(return_value=None)
    client.close = AsyncMock(return_value=None)
    client.health_check = AsyncMock(
        return_value={"status": "connected", "healthy": True, "latency_ms": 1.2, "server_version": "7.0.4"}
    )
    client.list_collections = AsyncMock(return_value=["users", "roles"])
    client.create_collection = AsyncMock(return_value=None)
    client.drop_collection = AsyncMock(return_value=None)
    client.has_collection = AsyncMock(return_value=True)
    client.list_indexes = AsyncMock(return_value=["_id_", "email_1"])
    client.drop_index = AsyncMock(return_value=None)
    client.get_server_status = AsyncMock(return_value={"version": "7.0.4", "ok": 1.0})
    client.get_database_stats = AsyncMock(return_value={"collections": 5, "ok": 1.0})
    client.get_collection_stats = AsyncMock(return_value={"count": 3, "ok": 1.0})
    return client


@pytest.fixture
def connect(monkeypatch, fake_client: MagicMock) -> AsyncMock:
    """Patch new_client and logging setup for CLI runs."""
    factory = AsyncMock(return_value=fake_client)
    monkeypatch.setattr("mongo_plugin.cli.commands.new_client", factory)
    monkeypatch.setattr("mongo_plugin.cli.commands.configure_logging", MagicMock())
    return factory


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def fresh_settings():
    """Reload settings from the environment for one test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_ping(runner, connect, fake_client):
    result = runner.invoke(cli, ["ping"])

    assert result.exit_code == 0, result.output
    assert "Connected to MongoDB" in result.output
    fake_client.ping.assert_awaited_once()
    fake_client.close.assert_awaited_once()


def test_uri_and_database_overrides(runner, connect):
    result = runner.invoke(cli, ["--uri", "mongodb://db.example:27017", "-d", "reports", "ping"])

    assert result.exit_code == 0, result.output
    cfg = connect.await_args.args[0]
    assert cfg.uri == "mongodb://db.example:27017"
    assert cfg.database == "reports"


def test_connection_error_exits_nonzero(runner, connect):
    connect.side_effect = MongoConnectionError("ping", ServerSelectionTimeoutError("no servers"))

    result = runner.invoke(cli, ["ping"])

    assert result.exit_code == 1
    assert "failed to ping MongoDB" in result.output


def test_operation_error_closes_client(runner, connect, fake_client):
    fake_client.list_collections.side_effect = MongoOperationError(
        "list collections", OperationFailure("not authorized")
    )

    result = runner.invoke(cli, ["collections", "list"])

    assert result.exit_code == 1
    assert "not authorized" in result.output
    fake_client.close.assert_awaited_once()


def test_status(runner, connect):
    result = runner.invoke(cli, ["status"])

    assert result.exit_code == 0, result.output
    assert "7.0.4" in result.output


def test_status_unhealthy(runner, connect, fake_client):
    fake_client.health_check.return_value = {"status": "error", "healthy": False, "error": "down"}

    result = runner.invoke(cli, ["status"])

    assert result.exit_code == 1
    assert "down" in result.output


def test_collections_list(runner, connect):
    result = runner.invoke(cli, ["collections", "list"])

    assert result.exit_code == 0, result.output
    assert "users" in result.output
    assert "roles" in result.output


def test_collections_create(runner, connect, fake_client):
    result = runner.invoke(cli, ["collections", "create", "audit_logs"])

    assert result.exit_code == 0, result.output
    fake_client.create_collection.assert_awaited_once_with("audit_logs")


def test_collections_drop_requires_confirmation(runner, connect, fake_client):
    result = runner.invoke(cli, ["collections", "drop", "users"], input="n\n")

    assert result.exit_code == 1
    fake_client.drop_collection.assert_not_awaited()


def test_collections_drop(runner, connect, fake_client):
    result = runner.invoke(cli, ["collections", "drop", "users", "--yes"])

    assert result.exit_code == 0, result.output
    fake_client.drop_collection.assert_awaited_once_with("users")


def test_collections_exists_missing(runner, connect, fake_client):
    fake_client.has_collection.return_value = False

    result = runner.invoke(cli, ["collections", "exists", "users"])

    assert result.exit_code == 1
    assert "does not exist" in result.output


def test_indexes_list(runner, connect, fake_client):
    result = runner.invoke(cli, ["indexes", "list", "users"])

    assert result.exit_code == 0, result.output
    assert "email_1" in result.output
    fake_client.list_indexes.assert_awaited_once_with("users")


def test_indexes_drop(runner, connect, fake_client):
    result = runner.invoke(cli, ["indexes", "drop", "users", "email_1"])

    assert result.exit_code == 0, result.output
    fake_client.drop_index.assert_awaited_once_with("users", "email_1")


def test_indexes_init(runner, connect, monkeypatch):
    ensure = AsyncMock(return_value={"users": ["username_1", "email_1"]})
    monkeypatch.setattr("mongo_plugin.cli.commands.ensure_indexes", ensure)

    result = runner.invoke(cli, ["indexes", "init"])

    assert result.exit_code == 0, result.output
    assert "username_1" in result.output
    ensure.assert_awaited_once()


def test_stats_collection(runner, connect, fake_client):
    result = runner.invoke(cli, ["stats", "collection", "users"])

    assert result.exit_code == 0, result.output
    assert "count" in result.output
    fake_client.get_collection_stats.assert_awaited_once_with("users")


def test_stats_server_json(runner, connect):
    result = runner.invoke(cli, ["stats", "server", "--json"])

    assert result.exit_code == 0, result.output
    assert '"version": "7.0.4"' in result.output


def test_stats_db(runner, connect, fake_client):
    result = runner.invoke(cli, ["stats", "db"])

    assert result.exit_code == 0, result.output
    fake_client.get_database_stats.assert_awaited_once()


def test_invalid_environment_setting(runner, connect, fresh_settings, monkeypatch):
    monkeypatch.setenv("MONGO_PORT", "not-a-port")

    result = runner.invoke(cli, ["ping"])

    assert result.exit_code == 1
    assert "Configuration error" in result.output
    connect.assert_not_awaited()
