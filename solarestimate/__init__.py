"""Hourly solar production estimation package.

This package reconstructs an hourly production and consumption chart from a
single monitoring system status snapshot.
"""

from .estimator import HourlyEnergyEstimator
from .models import (
    ChartRow,
    HourlyPoint,
    ProductionReport,
    RealIntervalReading,
    SystemStatusSnapshot
)
from .profile import (
    SolarProfile,
    BandedSolarProfile,
    TableSolarProfile
)
from .enphase import EnphasePayloadError, parse_readings, parse_status

__all__ = [
    'HourlyEnergyEstimator',
    'ChartRow',
    'HourlyPoint',
    'ProductionReport',
    'RealIntervalReading',
    'SystemStatusSnapshot',
    'SolarProfile',
    'BandedSolarProfile',
    'TableSolarProfile',
    'EnphasePayloadError',
    'parse_readings',
    'parse_status'
]
