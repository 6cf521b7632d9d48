"""Utility functions for time zones, hour labels and display formatting."""

import math
from datetime import timezone

import pytz

DEFAULT_TIMEZONE = "UTC"


def resolve_timezone(name, default=DEFAULT_TIMEZONE):
    """Resolve an IANA timezone name.

    Unknown or empty names resolve to the default zone instead of raising,
    so a bad value from the monitoring system only degrades accuracy.

    Args:
        name: IANA timezone name (e.g. "US/Eastern")
        default: Zone name to use when name cannot be resolved

    Returns:
        tuple: (pytz timezone, bool) where the bool is True if the fallback was used
    """
    if name:
        try:
            return pytz.timezone(name), False
        except pytz.UnknownTimeZoneError:
            pass
    return pytz.timezone(default), True


def ensure_aware(instant):
    """Treat naive datetimes as UTC."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant


def local_hour(instant, tz):
    """Get the hour of day (0-23) of an instant in the given timezone.

    Args:
        instant: datetime to convert, naive values are taken as UTC
        tz: pytz timezone

    Returns:
        int: Local hour of day
    """
    return ensure_aware(instant).astimezone(tz).hour


def hour_label(hour):
    """Format an hour of day as "HH:00"."""
    return f"{hour:02d}:00"


def parse_hour_label(label):
    """Get the hour of day from an "HH:00" label."""
    return int(label.split(":")[0])


def round_half_up(value):
    """Round to the nearest integer with halves going up.

    The built-in round() rounds halves to even, which would label 2.5 W as 2 W.
    """
    return int(math.floor(value + 0.5))


def round_kwh(value):
    """Round an energy value to watt-hour precision (3 decimals of kWh)."""
    return round(value, 3)


def format_power(watts):
    """Format a power value in W or kW."""
    if watts >= 1000:
        return f"{watts / 1000:.1f} kW"
    return f"{watts:.0f} W"


def format_energy(kwh):
    """Format an energy value in kWh or MWh."""
    if kwh >= 1000:
        return f"{kwh / 1000:.1f} MWh"
    return f"{kwh:.1f} kWh"
