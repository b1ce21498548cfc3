"""Fixtures for CLI tests."""

import pytest
from click.testing import CliRunner

from shiftledger.cli import cli


@pytest.fixture
def runner():
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def run_cli(runner, data_dir, mock_env):
    """Invoke the CLI against the sample data directory."""

    def invoke(*args):
        return runner.invoke(cli, ["--data-dir", str(data_dir), *args])

    return invoke
