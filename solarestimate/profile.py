"""Solar shaping profiles used to spread energy across the hours of a day."""

from abc import ABC, abstractmethod

DEFAULT_SUNRISE_HOUR = 6
DEFAULT_SUNSET_HOUR = 18

# Relative weights for the default banded curve
PEAK_FACTOR = 1.2
SHOULDER_FACTOR = 0.8
BASE_FACTOR = 0.3
PEAK_HOURS = (10, 14)
SHOULDER_HOURS = (8, 16)


def _check_hour(name, hour):
    if not isinstance(hour, int) or not 0 <= hour <= 23:
        raise ValueError(f"{name} must be an hour between 0 and 23, got {hour!r}")


class SolarProfile(ABC):
    """Abstract base class for hour-of-day production weights.

    A profile defines the solar window (sunrise to sunset, both inclusive)
    and a relative weight for every hour. The weights shape how today's
    energy is spread over past hours and how the current power is projected
    onto future hours. They are not derived from irradiance; a subclass
    backed by a real irradiance model can be dropped in without changing
    the estimator.
    """

    def __init__(self, sunrise_hour=DEFAULT_SUNRISE_HOUR, sunset_hour=DEFAULT_SUNSET_HOUR):
        """Initialize the profile.

        Args:
            sunrise_hour: First hour of the solar window
            sunset_hour: Last hour of the solar window

        Raises:
            ValueError: If the window is not a valid range of hours
        """
        _check_hour("sunrise_hour", sunrise_hour)
        _check_hour("sunset_hour", sunset_hour)
        if sunrise_hour > sunset_hour:
            raise ValueError(f"sunrise_hour ({sunrise_hour}) is after sunset_hour ({sunset_hour})")
        self.sunrise_hour = sunrise_hour
        self.sunset_hour = sunset_hour

    @abstractmethod
    def factor(self, hour):
        """Get the relative production weight for an hour of the day.

        Args:
            hour: Hour of day (0-23)

        Returns:
            float: Non-negative weight
        """
        pass

    def hours(self):
        """Iterate over the hours of the solar window."""
        return range(self.sunrise_hour, self.sunset_hour + 1)

    def is_daylight(self, hour):
        """Check if an hour falls inside the solar window."""
        return self.sunrise_hour <= hour <= self.sunset_hour


class BandedSolarProfile(SolarProfile):
    """Three-band curve: peak around midday, shoulders, and a low base."""

    def factor(self, hour):
        """Get the band weight for the hour."""
        if PEAK_HOURS[0] <= hour <= PEAK_HOURS[1]:
            return PEAK_FACTOR
        if SHOULDER_HOURS[0] <= hour <= SHOULDER_HOURS[1]:
            return SHOULDER_FACTOR
        return BASE_FACTOR


class TableSolarProfile(SolarProfile):
    """Profile backed by an explicit hour to weight table.

    Hours missing from the table get default_factor. Keys may be given as
    numeric strings so the table can be loaded straight from JSON.
    """

    def __init__(self, weights, sunrise_hour=DEFAULT_SUNRISE_HOUR,
                 sunset_hour=DEFAULT_SUNSET_HOUR, default_factor=BASE_FACTOR):
        super().__init__(sunrise_hour, sunset_hour)
        if default_factor < 0:
            raise ValueError(f"default_factor must not be negative, got {default_factor}")
        self.default_factor = float(default_factor)
        self.weights = {}
        for key, weight in weights.items():
            hour = int(key)
            _check_hour("weight hour", hour)
            weight = float(weight)
            if weight < 0:
                raise ValueError(f"Weight for hour {hour} must not be negative, got {weight}")
            self.weights[hour] = weight

    def factor(self, hour):
        """Get the table weight for the hour."""
        return self.weights.get(hour, self.default_factor)


def profile_from_config(config):
    """Build a profile from the "profile" section of the configuration.

    Args:
        config: Configuration dictionary, may be None or empty

    Returns:
        SolarProfile: TableSolarProfile if weights are configured,
            BandedSolarProfile otherwise
    """
    section = (config or {}).get("profile") or {}
    sunrise_hour = section.get("sunrise_hour", DEFAULT_SUNRISE_HOUR)
    sunset_hour = section.get("sunset_hour", DEFAULT_SUNSET_HOUR)
    weights = section.get("weights")
    if weights:
        return TableSolarProfile(
            weights,
            sunrise_hour=sunrise_hour,
            sunset_hour=sunset_hour,
            default_factor=section.get("default_factor", BASE_FACTOR)
        )
    return BandedSolarProfile(sunrise_hour, sunset_hour)
