"""Parse Enphase monitoring payloads into estimator inputs.

Only already-fetched JSON bodies are handled here. The bodies come either
straight from the Enphase v4 API or wrapped by a proxy as
{"success": true, "data": {...}}.
"""

from datetime import datetime, timezone

from .models import RealIntervalReading, SystemStatusSnapshot
from .utils import DEFAULT_TIMEZONE

STATUS_FIELDS = ("current_power", "energy_today", "energy_lifetime", "size_w")


class EnphasePayloadError(ValueError):
    """Payload does not have the expected shape."""


def _unwrap(payload):
    """Remove the proxy envelope if present."""
    if isinstance(payload, dict) and "data" in payload and "success" in payload:
        return payload["data"]
    return payload


def parse_status(payload, timezone_name=None, system_id=None):
    """Build a snapshot from a /systems/{id}/status body.

    Null or missing numbers are read as 0, like the vendor's own dashboard
    does.

    Args:
        payload: Decoded JSON body
        timezone_name: IANA timezone of the system, UTC if not given
        system_id: System ID to record when the body has none

    Returns:
        SystemStatusSnapshot: Snapshot of the system

    Raises:
        EnphasePayloadError: If the body is not an object or has no status fields
    """
    data = _unwrap(payload)
    if not isinstance(data, dict):
        raise EnphasePayloadError(f"Status payload must be an object, got {type(data).__name__}")
    if not any(name in data for name in STATUS_FIELDS):
        raise EnphasePayloadError("Status payload has none of: " + ", ".join(STATUS_FIELDS))

    try:
        current_power = float(data.get("current_power", 0) or 0)
        energy_today = float(data.get("energy_today", 0) or 0)
        energy_lifetime = float(data.get("energy_lifetime", 0) or 0)
        size_w = float(data.get("size_w", 0) or 0)
        modules = int(data.get("modules", 0) or 0)
        as_of = None
        last_report_at = data.get("last_report_at")
        if last_report_at:
            as_of = datetime.fromtimestamp(int(last_report_at), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError) as e:
        raise EnphasePayloadError(f"Invalid number in status payload: {e}") from e

    if data.get("system_id") is not None:
        system_id = str(data["system_id"])

    return SystemStatusSnapshot(
        current_power_w=current_power,
        energy_today_wh=energy_today,
        energy_lifetime_wh=energy_lifetime,
        system_size_w=size_w,
        as_of=as_of,
        timezone=timezone_name or data.get("timezone") or DEFAULT_TIMEZONE,
        status=data.get("status") or "normal",
        modules=modules,
        system_id=system_id
    )


def _optional_float(item, *names):
    for name in names:
        value = item.get(name)
        if value is not None:
            return float(value)
    return None


def parse_readings(payload):
    """Extract interval readings from a consumption telemetry body.

    Accepts a bare list of intervals, or an object holding them under
    "hourly", "readings" or "intervals". Intervals without a timestamp or
    without any energy or power value are skipped.

    Args:
        payload: Decoded JSON body

    Returns:
        list: RealIntervalReading objects in payload order
    """
    data = _unwrap(payload)
    if isinstance(data, dict):
        items = data.get("hourly") or data.get("readings") or data.get("intervals") or []
    elif isinstance(data, list):
        items = data
    else:
        items = []

    readings = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            timestamp = item.get("timestamp", item.get("end_at"))
            if timestamp is None:
                continue
            energy_wh = _optional_float(item, "energy_wh", "enwh")
            power_w = _optional_float(item, "power_w", "powr")
            if energy_wh is None and power_w is None:
                continue
            timestamp = int(timestamp)
            # Must be representable as a datetime
            datetime.fromtimestamp(timestamp, tz=timezone.utc)
            readings.append(RealIntervalReading(
                timestamp_seconds=timestamp,
                energy_wh=energy_wh,
                power_w=power_w
            ))
        except (TypeError, ValueError, OverflowError, OSError):
            continue
    return readings


def find_meter_power(telemetry, name, channel=1):
    """Get the power of a meter from a live telemetry body.

    Args:
        telemetry: Decoded JSON body with telemetry.devices.meters or devices.meters
        name: Meter name, "production" or "consumption"
        channel: Meter channel

    Returns:
        float: Power in watts, or None if the meter is not reported
    """
    data = _unwrap(telemetry)
    if not isinstance(data, dict):
        return None
    data = data.get("telemetry") or data
    if not isinstance(data, dict):
        return None
    devices = data.get("devices")
    if not isinstance(devices, dict):
        return None
    meters = devices.get("meters")
    if not isinstance(meters, list):
        return None
    for meter in meters:
        if not isinstance(meter, dict):
            continue
        if meter.get("name") == name and meter.get("channel") == channel:
            try:
                return _optional_float(meter, "power")
            except (TypeError, ValueError):
                return None
    return None
