"""Fixtures for solarestimate tests."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
import pytz

from solarestimate.estimator import HourlyEnergyEstimator
from solarestimate.models import SystemStatusSnapshot

EASTERN = pytz.timezone("US/Eastern")

MOCK_STATUS_RESPONSE = {
    "success": True,
    "data": {
        "system_id": 698905,
        "current_power": 5000,
        "energy_lifetime": 24560000,
        "energy_today": 12000,
        "last_interval_end_at": 1718461800,
        "last_report_at": 1718461980,
        "modules": 24,
        "operational_at": 1590000000,
        "size_w": 10000,
        "status": "normal",
        "summary_date": "2024-06-15",
    },
    "tenantId": "tenant-1",
    "systemId": "698905",
}


def eastern(hour: int, minute: int = 0) -> datetime:
    """Return an aware instant on 2024-06-15 at the given US/Eastern wall time."""
    return EASTERN.localize(datetime(2024, 6, 15, hour, minute))


def make_snapshot(**overrides) -> SystemStatusSnapshot:
    """Create a snapshot with sensible defaults."""
    values = {
        "current_power_w": 5000.0,
        "energy_today_wh": 12000.0,
        "energy_lifetime_wh": 24560000.0,
        "system_size_w": 10000.0,
        "as_of": datetime(2024, 6, 15, 14, 30, tzinfo=timezone.utc),
        "timezone": "US/Eastern",
    }
    values.update(overrides)
    return SystemStatusSnapshot(**values)


@pytest.fixture
def estimator() -> HourlyEnergyEstimator:
    """Return an estimator with the default profile."""
    return HourlyEnergyEstimator()


@pytest.fixture
def snapshot() -> SystemStatusSnapshot:
    """Return the reference snapshot: 5 kW now, 12 kWh so far today."""
    return make_snapshot()
