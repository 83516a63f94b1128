"""Tests for the management CLI.

Uses Click's CliRunner; the task store is mocked so no database is needed.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from taskboard_service.cli.main import cli
from tests.utils import make_task


@pytest.fixture
def cli_runner():
    return CliRunner()


def test_help_lists_command_groups(cli_runner):
    result = cli_runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    for group in ("server", "db", "reminders"):
        assert group in result.output


def test_version(cli_runner):
    result = cli_runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert "1.0.0" in result.output


def test_server_run_uses_settings(cli_runner):
    with patch("taskboard_service.cli.commands.server.uvicorn.run") as run:
        result = cli_runner.invoke(cli, ["server", "run", "--port", "9001"])

    assert result.exit_code == 0, result.output
    args, kwargs = run.call_args
    assert args == ("taskboard_service.app.main:app",)
    assert kwargs["port"] == 9001


def test_reminders_preview(cli_runner):
    now = datetime.now(UTC)
    tasks = [
        make_task("Overdue call", reminder=now - timedelta(minutes=10)),
        make_task("Standup", reminder=now + timedelta(minutes=20)),
    ]

    with patch(
        "taskboard_service.features.tasks.source.DatabaseTaskSource.list_tasks",
        new=AsyncMock(return_value=tasks),
    ):
        result = cli_runner.invoke(cli, ["reminders", "preview", "test-user"])

    assert result.exit_code == 0, result.output
    assert 'Reminder: "Overdue call"' in result.output
    assert "Upcoming within 60 minutes" in result.output
    assert "Standup: " in result.output


def test_reminders_preview_nothing_due(cli_runner):
    with patch(
        "taskboard_service.features.tasks.source.DatabaseTaskSource.list_tasks",
        new=AsyncMock(return_value=[]),
    ):
        result = cli_runner.invoke(cli, ["reminders", "preview", "test-user"])

    assert result.exit_code == 0, result.output
    assert "No reminders due" in result.output
