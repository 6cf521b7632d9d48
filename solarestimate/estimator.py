"""Reconstruct an hourly production curve from a single status snapshot."""

from datetime import datetime, timezone

from .models import ChartRow, HourlyPoint, ProductionReport
from .profile import BandedSolarProfile
from .utils import (
    DEFAULT_TIMEZONE,
    hour_label,
    local_hour,
    resolve_timezone,
    round_half_up,
    round_kwh,
)

# Up to and including this local hour only elapsed hours are charted
FULL_DAY_AFTER_HOUR = 14
# Share of the average hourly energy credited to the hour in progress
CURRENT_HOUR_SHARE = 0.8
# Share of the current power assumed to hold for the rest of the day
FORWARD_SHARE = 0.7
# Consumption placeholder when there is no meter reading for an hour
SELF_CONSUMPTION_RATIO = 0.3
CHART_THRESHOLD_KWH = 0.001


class HourlyEnergyEstimator:
    """Estimates hourly production for charting.

    The estimator is stateless: every call works only on its arguments, so
    one instance can be shared between requests. It handles:
    - Resolving the current hour in the system's own timezone
    - Choosing between a partial-day and a full-day chart
    - Spreading today's energy over elapsed hours and projecting the rest
    - Merging consumption readings with the production curve
    """

    def __init__(self, profile=None, full_day_after_hour=FULL_DAY_AFTER_HOUR,
                 current_hour_share=CURRENT_HOUR_SHARE, forward_share=FORWARD_SHARE,
                 self_consumption_ratio=SELF_CONSUMPTION_RATIO, debug=False):
        """Initialize the estimator.

        Args:
            profile: SolarProfile giving the solar window and hourly weights
            full_day_after_hour: Last local hour that still gets a partial-day chart
            current_hour_share: Share of the average hour credited to the current hour
            forward_share: Share of current power projected onto future hours
            self_consumption_ratio: Consumption as a share of production when unmetered
            debug: Enable debug logging
        """
        self.profile = profile if profile is not None else BandedSolarProfile()
        self.full_day_after_hour = full_day_after_hour
        self.current_hour_share = current_hour_share
        self.forward_share = forward_share
        self.self_consumption_ratio = self_consumption_ratio
        self.debug_enabled = debug

    def debug(self, msg):
        """Log debug message if debug mode is enabled."""
        if self.debug_enabled:
            print(msg)

    def resolve_timezone(self, name):
        """Resolve the snapshot timezone, falling back to UTC when it is invalid."""
        tz, fallback = resolve_timezone(name)
        if fallback:
            self.debug(f"resolve_timezone: Unknown timezone {name!r}, using {DEFAULT_TIMEZONE}")
        return tz

    def current_local_hour(self, snapshot, current_instant=None):
        """Get the hour of day of current_instant in the snapshot's timezone."""
        if current_instant is None:
            current_instant = datetime.now(timezone.utc)
        return local_hour(current_instant, self.resolve_timezone(snapshot.timezone))

    def is_full_day(self, current_hour):
        """Check if the whole solar window should be charted."""
        return current_hour > self.full_day_after_hour

    def window(self, current_hour):
        """Get the range of hours to emit for the current local hour.

        Early in the day only elapsed hours are shown. Later there is enough
        of today's energy to draw the whole solar window.

        Args:
            current_hour: Local hour of day (0-23)

        Returns:
            range: Hours to emit, possibly empty before sunrise
        """
        if self.is_full_day(current_hour):
            return self.profile.hours()
        return range(self.profile.sunrise_hour, min(current_hour, self.profile.sunset_hour) + 1)

    def estimate_hourly_production(self, snapshot, current_instant=None):
        """Estimate production for each hour of the chart window.

        Args:
            snapshot: SystemStatusSnapshot for the system
            current_instant: datetime to treat as now, defaults to the wall clock

        Returns:
            list: HourlyPoint objects in increasing hour order
        """
        current_hour = self.current_local_hour(snapshot, current_instant)
        full_day = self.is_full_day(current_hour)
        sunrise = self.profile.sunrise_hour

        energy_today_kwh = max(0.0, snapshot.energy_today_wh) / 1000
        current_power_w = max(0.0, snapshot.current_power_w)

        points = []
        for hour in self.window(current_hour):
            if hour == current_hour:
                power_w = current_power_w
                energy_kwh = energy_today_kwh / max(1, current_hour - sunrise + 1) * self.current_hour_share
            elif hour < current_hour:
                # Spread today's energy over the elapsed hours, shaped by the profile
                avg_per_hour = energy_today_kwh / max(1, current_hour - sunrise)
                energy_kwh = avg_per_hour * self.profile.factor(hour)
                power_w = energy_kwh * 1000
            else:
                energy_kwh = current_power_w / 1000 * self.profile.factor(hour) * self.forward_share
                power_w = energy_kwh * 1000

            is_current_hour = hour == current_hour
            points.append(HourlyPoint(
                hour=hour_label(hour),
                power_w=round_half_up(max(0.0, power_w)),
                energy_kwh=round_kwh(max(0.0, energy_kwh)),
                is_current_hour=is_current_hour,
                is_real=is_current_hour or (full_day and hour < current_hour)
            ))

        self.debug(f"estimate_hourly_production: current_hour={current_hour} full_day={full_day} points={len(points)}")
        return points

    def merge_consumption(self, points, readings=None, timezone=None,
                          live_consumption_w=None, current_instant=None):
        """Pair each production point with a consumption value.

        A reading whose local hour matches the point is used when present.
        Otherwise the live consumption meter power stands in for the hour
        while the sun is up, and failing that consumption is taken as a fixed
        share of production.

        Args:
            points: HourlyPoint objects from estimate_hourly_production
            readings: Optional RealIntervalReading objects for the consumption meter
            timezone: Timezone name used to find the local hour of each reading
            live_consumption_w: Optional current consumption meter power in watts
            current_instant: datetime to treat as now, defaults to the wall clock

        Returns:
            list: ChartRow objects, one per point
        """
        tz = self.resolve_timezone(timezone)

        readings_by_hour = {}
        for reading in readings or []:
            if reading.energy_wh is None and reading.power_w is None:
                continue
            try:
                hour = datetime.fromtimestamp(reading.timestamp_seconds, tz=tz).hour
            except (TypeError, OverflowError, OSError, ValueError):
                self.debug(f"merge_consumption: Skipping reading with timestamp {reading.timestamp_seconds}")
                continue
            # First reading for an hour wins
            readings_by_hour.setdefault(hour, reading)

        live_consumption_kwh = None
        if live_consumption_w is not None:
            if current_instant is None:
                current_instant = datetime.now(tz)
            if self.profile.is_daylight(local_hour(current_instant, tz)):
                live_consumption_kwh = max(0.0, live_consumption_w) / 1000

        rows = []
        for point in points:
            reading = readings_by_hour.get(point.hour_of_day)
            if reading is not None:
                if reading.energy_wh is not None:
                    consumption_kwh = reading.energy_wh / 1000
                else:
                    # Constant power over one hour
                    consumption_kwh = reading.power_w / 1000
                consumption_is_real = True
            elif live_consumption_kwh is not None:
                consumption_kwh = live_consumption_kwh
                consumption_is_real = False
            else:
                consumption_kwh = point.energy_kwh * self.self_consumption_ratio
                consumption_is_real = False

            rows.append(ChartRow(
                label=point.hour,
                produced_kwh=point.energy_kwh,
                consumption_kwh=round_kwh(max(0.0, consumption_kwh)),
                is_current_hour=point.is_current_hour,
                is_real=point.is_real,
                consumption_is_real=consumption_is_real
            ))

        self.debug(f"merge_consumption: {len(readings_by_hour)} metered hours for {len(rows)} rows")
        return rows

    def filter_chart_rows(self, rows, threshold=CHART_THRESHOLD_KWH):
        """Drop rows where both production and consumption are negligible."""
        return [
            row for row in rows
            if row.produced_kwh >= threshold or row.consumption_kwh >= threshold
        ]

    def system_capacity_kw(self, snapshot):
        """Get the nameplate capacity in kW."""
        return snapshot.system_size_w / 1000

    def efficiency(self, snapshot):
        """Get current power as a percentage of nameplate capacity.

        Values above 100 are reported as they are. A system without a
        positive size reports 0.
        """
        if snapshot.system_size_w <= 0:
            self.debug(f"efficiency: System size is {snapshot.system_size_w}, reporting 0")
            return 0.0
        return snapshot.current_power_w / snapshot.system_size_w * 100

    def build_report(self, snapshot, current_instant=None):
        """Estimate production and package it with the system summaries.

        Args:
            snapshot: SystemStatusSnapshot for the system
            current_instant: datetime to treat as now, defaults to the wall clock

        Returns:
            ProductionReport: Hourly points and summary values
        """
        if current_instant is None:
            current_instant = datetime.now(timezone.utc)
        tz = self.resolve_timezone(snapshot.timezone)
        current_hour = local_hour(current_instant, tz)

        return ProductionReport(
            production=self.estimate_hourly_production(snapshot, current_instant),
            current_power_w=snapshot.current_power_w,
            energy_today_kwh=snapshot.energy_today_kwh,
            energy_lifetime_kwh=snapshot.energy_lifetime_kwh,
            system_capacity_kw=self.system_capacity_kw(snapshot),
            efficiency=self.efficiency(snapshot),
            generated_at=current_instant,
            current_hour=current_hour,
            timezone=tz.zone,
            full_day=self.is_full_day(current_hour),
            system_status=snapshot.status,
            system_modules=snapshot.modules
        )

    def build_chart(self, snapshot, readings=None, live_consumption_w=None,
                    current_instant=None, threshold=CHART_THRESHOLD_KWH):
        """Estimate production, merge consumption and drop empty rows."""
        if current_instant is None:
            current_instant = datetime.now(timezone.utc)
        points = self.estimate_hourly_production(snapshot, current_instant)
        rows = self.merge_consumption(
            points,
            readings,
            timezone=snapshot.timezone,
            live_consumption_w=live_consumption_w,
            current_instant=current_instant
        )
        return self.filter_chart_rows(rows, threshold)
