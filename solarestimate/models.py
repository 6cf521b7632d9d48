"""Data models for hourly solar estimation."""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import List, Optional

from .utils import parse_hour_label


@dataclass(frozen=True)
class SystemStatusSnapshot:
    """Point-in-time read of a monitored PV system.

    Power is in watts and energy in watt-hours, as reported by the vendor.
    """
    current_power_w: float
    energy_today_wh: float
    energy_lifetime_wh: float
    system_size_w: float
    as_of: Optional[datetime]
    timezone: str
    status: str = "normal"
    modules: int = 0
    system_id: Optional[str] = None

    def __post_init__(self):
        if self.status != "normal":
            object.__setattr__(self, "status", "warning")

    @property
    def energy_today_kwh(self):
        return self.energy_today_wh / 1000

    @property
    def energy_lifetime_kwh(self):
        return self.energy_lifetime_wh / 1000


@dataclass(frozen=True)
class HourlyPoint:
    """One hour of estimated production."""
    hour: str
    power_w: int
    energy_kwh: float
    is_current_hour: bool
    is_real: bool

    @property
    def hour_of_day(self):
        return parse_hour_label(self.hour)


@dataclass(frozen=True)
class RealIntervalReading:
    """Real meter reading for an interval ending at timestamp_seconds."""
    timestamp_seconds: int
    energy_wh: Optional[float] = None
    power_w: Optional[float] = None


@dataclass(frozen=True)
class ChartRow:
    """Production and consumption for one hour, ready for charting."""
    label: str
    produced_kwh: float
    consumption_kwh: float
    is_current_hour: bool
    is_real: bool
    consumption_is_real: bool = False


@dataclass(frozen=True)
class ProductionReport:
    """Hourly production estimate with the scalar summaries shown next to it."""
    production: List[HourlyPoint]
    current_power_w: float
    energy_today_kwh: float
    energy_lifetime_kwh: float
    system_capacity_kw: float
    efficiency: float
    generated_at: datetime
    current_hour: int
    timezone: str
    full_day: bool
    system_status: str = "normal"
    system_modules: int = 0
    period: str = field(default="hourly_today")

    def to_dict(self):
        """Return a JSON-serialisable representation of the report."""
        data = asdict(self)
        data["generated_at"] = self.generated_at.isoformat()
        return data
