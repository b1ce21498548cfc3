"""
Global pytest configuration and fixtures.
"""
import datetime as dt
import json
import os
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List

import pytest

from shiftledger.config import ShiftLedgerConfig, reload_config, reset_logging
from shiftledger.models import BusinessSettings, Employee, Entry, Site

MINUTE = 60_000

# 2024-07-01 00:00 UTC, a Monday
JULY_1 = int(dt.datetime(2024, 7, 1, tzinfo=dt.timezone.utc).timestamp() * 1000)


def make_entry(
    entry_id: str,
    action: str,
    minutes: float,
    employee_id: str = "emp-1",
    employee: str = "Ana Diaz",
    site: str = "Harbor Office",
    base: int = JULY_1,
    **extra: Any,
) -> Entry:
    """Entry ``minutes`` after ``base`` (2024-07-01 00:00 UTC by default)."""
    return Entry(
        id=entry_id,
        employee=employee,
        employeeId=employee_id,
        action=action,
        ts=base + int(minutes * MINUTE),
        site=site,
        **extra,
    )


@pytest.fixture(scope="session")
def test_env_vars() -> Dict[str, str]:
    """Test environment variables for configuration."""
    return {
        'SHIFTLEDGER_DATA_DIR': 'test-data',
        'TIMEZONE': 'UTC',
        'DEFAULT_PAY_FREQUENCY': 'semi-monthly',
        'ENVIRONMENT': 'testing',
        'DEBUG': 'true',
        'LOG_LEVEL': 'DEBUG',
    }


@pytest.fixture
def mock_env(test_env_vars, monkeypatch):
    """Mock environment variables for testing."""
    for key, value in test_env_vars.items():
        monkeypatch.setenv(key, value)

    # Clear the global config to force reload with test values
    import shiftledger.config.settings
    shiftledger.config.settings._config = None

    yield test_env_vars

    # Clean up
    shiftledger.config.settings._config = None


@pytest.fixture
def test_config(mock_env) -> ShiftLedgerConfig:
    """Test configuration instance."""
    return reload_config()


@pytest.fixture
def sites() -> List[Site]:
    return [
        Site(id="site-harbor", name="Harbor Office", servicePrice=Decimal("120")),
        Site(
            id="site-lake",
            name="Lake Clinic",
            servicePrice=Decimal("200"),
            bonusType="hourly",
            bonusAmount=Decimal("3"),
        ),
        Site(
            id="site-mill",
            name="Mill Lofts",
            servicePrice=Decimal("90"),
            bonusType="flat",
            bonusAmount=Decimal("15"),
        ),
    ]


@pytest.fixture
def business_settings(sites) -> BusinessSettings:
    return BusinessSettings(
        weekStartsOn=1,
        mileageRate=Decimal("0.50"),
        defaultHourlyWage=Decimal("15"),
        sites=sites,
    )


@pytest.fixture
def employees() -> List[Employee]:
    return [
        Employee(id="emp-1", name="Ana Diaz", payRate=Decimal("20")),
        Employee(id="emp-2", name="Ben Okafor", payRate=Decimal("18")),
        Employee(id="emp-3", name="Cara Lund"),
    ]


@pytest.fixture
def sample_entry_documents() -> List[Dict[str, Any]]:
    """Entry documents as stored, deliberately out of order."""
    return [
        {"id": "e2", "employee": "Ana Diaz", "employeeId": "emp-1",
         "action": "out", "ts": JULY_1 + 9 * 60 * MINUTE, "site": "Harbor Office"},
        {"id": "e1", "employee": "Ana Diaz", "employeeId": "emp-1",
         "action": "in", "ts": JULY_1 + 8 * 60 * MINUTE, "site": "Harbor Office"},
        {"id": "e3", "employee": "Ben Okafor", "employeeId": "emp-2",
         "action": "in", "ts": JULY_1 + 10 * 60 * MINUTE, "site": "Lake Clinic"},
        {"id": "e4", "employee": "Ben Okafor", "employeeId": "emp-2",
         "action": "out", "ts": JULY_1 + 12 * 60 * MINUTE, "site": "Lake Clinic"},
        {"id": "e5", "employee": "Cara Lund", "employeeId": "emp-3",
         "action": "in", "ts": JULY_1 + 13 * 60 * MINUTE, "site": "Mill Lofts"},
        {"id": "e6", "employee": "Cara Lund", "employeeId": "emp-3",
         "action": "out", "ts": JULY_1 + 14 * 60 * MINUTE, "site": "Mill Lofts"},
    ]


@pytest.fixture
def data_dir(tmp_path, sample_entry_documents, sites, employees) -> Path:
    """A data directory with entries, employees and settings."""
    directory = tmp_path / "data"
    directory.mkdir()
    (directory / "entries.json").write_text(json.dumps(sample_entry_documents))
    (directory / "employees.json").write_text(
        json.dumps([e.to_document() for e in employees])
    )
    (directory / "settings.json").write_text(
        json.dumps(
            {
                "weekStartsOn": 1,
                "mileageRate": "0.50",
                "defaultHourlyWage": "15",
                "sites": [s.to_document() for s in sites],
            }
        )
    )
    return directory


@pytest.fixture(autouse=True)
def clean_logging():
    """Leave the root logger as it was found."""
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def cleanup_test_files():
    """Clean up any test files created during testing."""
    yield

    # Remove test coverage files in case they're created
    test_files = ['coverage.xml', '.coverage']
    for file in test_files:
        if os.path.exists(file):
            os.remove(file)


# Pytest configuration for different test types
def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers based on location."""
    for item in items:
        # Add unit marker for tests in tests/unit/
        if "tests/unit/" in str(item.fspath):
            item.add_marker(pytest.mark.unit)

        # Add integration marker for tests in tests/integration/
        elif "tests/integration/" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


@pytest.fixture
def entry_at():
    """Factory for entries placed a number of minutes after 2024-07-01 00:00 UTC."""
    return make_entry


@pytest.fixture
def july_1_ms() -> int:
    return JULY_1
