"""Tests for the command line interface."""

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from squadlens import __version__
from squadlens.cli.main import cli


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def _invoke(runner: CliRunner, root, *args: str):
    return runner.invoke(cli, ["--root", str(root), *args])


class TestCli:
    """Tests for CLI commands against a squad folder on disk."""

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_members(self, runner, populated_squad):
        result = _invoke(runner, populated_squad.root, "members")

        assert result.exit_code == 0, result.output
        assert "Banner" in result.output
        assert "working-on-issue" in result.output
        assert "acme/widgets" in result.output

    def test_tasks(self, runner, populated_squad):
        result = _invoke(runner, populated_squad.root, "tasks")

        assert result.exit_code == 0, result.output
        assert "42" in result.output
        assert "2026-02-01-banner" not in result.output

    def test_tasks_history_for_member(self, runner, populated_squad):
        result = _invoke(runner, populated_squad.root, "tasks", "--history", "-m", "romanoff")

        assert result.exit_code == 0, result.output
        assert "2026-02-01-romanoff" in result.output
        assert "2026-02-01-banner" not in result.output

    def test_task_details(self, runner, populated_squad):
        result = _invoke(runner, populated_squad.root, "task", "42")

        assert result.exit_code == 0, result.output
        assert "Add pagination to the list endpoint" in result.output
        assert "api-work" in result.output

    def test_unknown_task_is_usage_error(self, runner, populated_squad):
        result = _invoke(runner, populated_squad.root, "task", "999")

        assert result.exit_code == 2
        assert "Task not found: 999" in result.output

    def test_logs(self, runner, populated_squad):
        result = _invoke(runner, populated_squad.root, "logs", "-n", "1")

        assert result.exit_code == 0, result.output
        assert "review" in result.output
        assert "older entries not shown" in result.output

    def test_decisions_search(self, runner, populated_squad):
        result = _invoke(runner, populated_squad.root, "decisions", "postgres")

        assert result.exit_code == 0, result.output
        assert "Use Postgres for storage" in result.output
        assert "Keep the API read-only" not in result.output

    def test_decisions_invalid_date(self, runner, populated_squad):
        result = _invoke(runner, populated_squad.root, "decisions", "--since", "yesterday")
        assert result.exit_code == 2

    def test_activity(self, runner, populated_squad):
        result = _invoke(runner, populated_squad.root, "activity", "--days", "60")

        assert result.exit_code == 0, result.output
        assert "Participation" in result.output

    def test_health_fails_on_empty_squad(self, runner, squad_workspace):
        result = _invoke(runner, squad_workspace.root, "health")

        assert result.exit_code == 1
        assert "Summary: 0 passed" in result.output

    def test_health_passes(self, runner, populated_squad):
        result = _invoke(runner, populated_squad.root, "health")

        assert result.exit_code == 0, result.output
        assert "Summary: 4 passed" in result.output

    def test_serve_uses_config(self, runner, populated_squad):
        with patch("uvicorn.run") as mock_run:
            result = _invoke(runner, populated_squad.root, "serve", "--port", "9000")

        assert result.exit_code == 0, result.output
        mock_run.assert_called_once()
        kwargs = mock_run.call_args.kwargs
        assert kwargs["host"] == "127.0.0.1"
        assert kwargs["port"] == 9000
        assert kwargs["factory"] is True
