"""Unit tests for CLI main entry point."""

import pytest

from shiftledger import __version__
from shiftledger.cli import cli


class TestCLIMain:
    """Test suite for CLI main entry point."""

    def test_cli_help_text(self, runner):
        """Test that CLI help text is informative."""
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "ShiftLedger" in result.output
        assert "Commands:" in result.output

    def test_cli_version_flag(self, runner):
        """Test that --version flag works."""
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    @pytest.mark.parametrize(
        "command",
        ["sessions", "hours", "payroll", "site-profit", "job-profit", "audit"],
    )
    def test_commands_are_registered(self, runner, command):
        result = runner.invoke(cli, ["--help"])
        assert command in result.output

    def test_unknown_command_shows_error(self, runner):
        """Test that unknown commands show helpful error."""
        result = runner.invoke(cli, ["unknown-command"])
        assert result.exit_code != 0
        assert "No such command" in result.output

    def test_invalid_configuration_exits_with_1(self, runner, mock_env, monkeypatch):
        monkeypatch.setenv("TIMEZONE", "Nowhere/Special")

        result = runner.invoke(cli, ["sessions"])

        assert result.exit_code == 1
        assert "Configuration Error" in result.output

    def test_missing_data_directory_exits_with_2(self, runner, mock_env, tmp_path):
        result = runner.invoke(cli, ["--data-dir", str(tmp_path / "nope"), "sessions"])

        assert result.exit_code == 2
        assert "Data directory not found" in result.output
        assert "SHIFTLEDGER_DATA_DIR" in result.output
