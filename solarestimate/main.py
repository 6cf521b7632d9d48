"""Command-line interface for hourly solar estimation."""

import argparse
import json
import sys
from dataclasses import asdict
from datetime import datetime
from pathlib import Path

import appdirs

from .enphase import find_meter_power, parse_readings, parse_status
from .estimator import CHART_THRESHOLD_KWH, HourlyEnergyEstimator
from .profile import profile_from_config
from .utils import ensure_aware, format_energy, format_power

SOLARESTIMATE_CONFIG_DIR = appdirs.user_config_dir("solarestimate", "solarestimate")
SOLARESTIMATE_CONFIG_PATH = Path(SOLARESTIMATE_CONFIG_DIR, "solarestimate.json")

ESTIMATOR_SETTINGS = (
    "full_day_after_hour",
    "current_hour_share",
    "forward_share",
    "self_consumption_ratio",
)


def load_json(path):
    """Load a JSON document from a file."""
    with open(path) as fd:
        return json.load(fd)


def load_config(path=None):
    """Load configuration from solarestimate.json.

    The default file in the user config directory is optional. A file given
    explicitly must exist.

    Args:
        path: Optional path to a configuration file

    Returns:
        dict: Configuration, empty if the default file does not exist
    """
    if path:
        return load_json(path)
    if not SOLARESTIMATE_CONFIG_PATH.exists():
        return {}
    return load_json(SOLARESTIMATE_CONFIG_PATH)


def estimator_from_config(config, debug=False):
    """Create an estimator with the settings and profile from the configuration."""
    settings = {name: config[name] for name in ESTIMATOR_SETTINGS if name in config}
    return HourlyEnergyEstimator(profile=profile_from_config(config), debug=debug, **settings)


def parse_instant(value):
    """Parse an ISO 8601 timestamp; naive values are taken as UTC."""
    return ensure_aware(datetime.fromisoformat(value))


def print_chart(report, rows):
    """Print the chart rows and summary as a text table."""
    print(f"{'Hour':<6} {'Produced':>10} {'Consumed':>10}  Flags")
    for row in rows:
        flags = []
        if row.is_current_hour:
            flags.append("now")
        flags.append("real" if row.is_real else "estimated")
        if row.consumption_is_real:
            flags.append("metered")
        print(f"{row.label:<6} {row.produced_kwh:>10.3f} {row.consumption_kwh:>10.3f}  {', '.join(flags)}")

    print()
    print(f"Current power:   {format_power(report.current_power_w)}")
    print(f"Energy today:    {format_energy(report.energy_today_kwh)}")
    print(f"Energy lifetime: {format_energy(report.energy_lifetime_kwh)}")
    print(f"System capacity: {report.system_capacity_kw:.2f} kW")
    print(f"Efficiency:      {report.efficiency:.1f}%")
    print(f"Local hour:      {report.current_hour:02d} ({report.timezone})")


def run(args):
    """Build the report and chart for the command-line arguments.

    Returns:
        int: Exit status
    """
    config = load_config(args.config)
    estimator = estimator_from_config(config, args.debug)
    estimator.debug(f"run: config={config}")

    snapshot = parse_status(
        load_json(args.status),
        timezone_name=args.timezone or config.get("timezone")
    )
    readings = parse_readings(load_json(args.consumption)) if args.consumption else None
    live_consumption_w = None
    if args.telemetry:
        live_consumption_w = find_meter_power(load_json(args.telemetry), "consumption")
        estimator.debug(f"run: live consumption={live_consumption_w}")

    now = parse_instant(args.now) if args.now else None
    report = estimator.build_report(snapshot, now)
    threshold = 0.0 if args.all_rows else config.get("threshold", CHART_THRESHOLD_KWH)
    rows = estimator.build_chart(
        snapshot,
        readings,
        live_consumption_w=live_consumption_w,
        current_instant=report.generated_at,
        threshold=threshold
    )

    if args.json:
        output = report.to_dict()
        output["chart"] = [asdict(row) for row in rows]
        print(json.dumps(output, indent=2))
    else:
        print_chart(report, rows)
    return 0


def main(argv=None):
    """Main entry point."""
    # Make stdout line-buffered (i.e. each line will be automatically flushed):
    sys.stdout.reconfigure(line_buffering=True)

    parser = argparse.ArgumentParser(description='Hourly solar production estimate')
    parser.add_argument('status',
                        help='Path to a system status JSON payload')
    parser.add_argument('--consumption',
                        help='Path to a consumption meter telemetry JSON payload')
    parser.add_argument('--telemetry',
                        help='Path to a live telemetry JSON payload, used for current consumption')
    parser.add_argument('--timezone',
                        help='IANA timezone of the system (default from config, then UTC)')
    parser.add_argument('--now',
                        help='ISO 8601 timestamp to treat as the current time')
    parser.add_argument('--config',
                        help=f'Path to configuration file (default {SOLARESTIMATE_CONFIG_PATH})')
    parser.add_argument('--all-rows', action='store_true',
                        help='Keep rows with no production or consumption')
    parser.add_argument('--json', action='store_true',
                        help='Print the report as JSON')
    parser.add_argument('--debug', action='store_true',
                        help='Print debug messages')

    args = parser.parse_args(argv)
    try:
        return run(args)
    except (OSError, ValueError) as e:
        # json.JSONDecodeError is a ValueError
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
