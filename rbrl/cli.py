"""
Command-line interface for the league scheduler.
"""

import argparse
import logging
import os
import sys

import yaml
from pydantic import ValidationError

from .config import load_config
from .engine import IncompleteScheduleError, SchedulingEngine
from .export import write_excel
from .matchups import build_matchups, get_matchup_summary
from .metrics import format_metrics_table
from .slots import generate_blackout_slots, generate_overflow_slots, generate_slots, get_slot_summary
from .validator import validate


DEFAULT_CONFIG_FILE = "config.yaml"

CONFIG_TEMPLATE = """\
# League Season Configuration
# ===========================
# This file defines the parameters for generating a baseball schedule.

# Season defines the date range for the regular season.
season:
  start_date: "2026-04-25"
  end_date: "2026-05-31"

  # Optional fallback window after end_date. Only games that cannot fit in
  # the regular season are placed here.
  # overflow_end_date: "2026-06-07"

  # Blackout dates are full days where no games will be scheduled on any venue.
  blackout_dates:
    - date: "2026-05-10"
      reason: "Mother's Day"
    - date: "2026-05-23"
      reason: "Memorial Day Weekend"
    - date: "2026-05-24"
      reason: "Memorial Day Weekend"
    - date: "2026-05-25"
      reason: "Memorial Day"

# Divisions and their teams. Team names must be unique across all divisions.
divisions:
  - name: American
    teams: [Angels, Astros, Orioles, Mariners, Royals]
  - name: National
    teams: [Cubs, Padres, Phillies, Pirates, Rockies]

# Venues available for scheduling.
#
# Reservations block a venue for a single date or a date range.
# If 'times' is omitted or empty, the venue is blocked for the full day.
#
#   - date: "2026-05-04"
#     times: ["17:45"]
#     reason: "Freshman"
#
#   - start_date: "2026-04-25"
#     end_date: "2026-05-31"
#     reason: "Reserved"
venues:
  - name: Moscariello Ballpark
    reservations:
      - start_date: "2026-04-25"
        end_date: "2026-05-31"
        reason: "Reserved"
  - name: Symonds Field
    reservations:
      - date: "2026-05-04"
        reason: "Freshman"
      - date: "2026-05-05"
        reason: "Freshman"
      - date: "2026-05-06"
        reason: "Freshman"
      - date: "2026-05-13"
        reason: "Freshman"
      - date: "2026-05-22"
        reason: "Freshman"
  - name: Washington Park
    reservations:
      - date: "2026-04-29"
        reason: "JV"
      - date: "2026-05-01"
        reason: "JV"
      - date: "2026-05-11"
        reason: "JV"
      - date: "2026-05-12"
        reason: "JV"

# Start times per day type, 24-hour format. Quote them.
time_slots:
  weekday: ["17:45"]
  saturday: ["12:30", "14:45", "17:00"]
  sunday: ["17:00"]

  # Holidays use the Sunday times.
  holiday_dates:
    - "2026-05-25"

# "division_weighted" plays each intra-division opponent twice and each
# inter-division opponent once, with balanced home/away assignments.
strategy: division_weighted

# Rules are hard constraints. A schedule that violates these is invalid.
rules:
  max_games_per_day_per_team: 1
  max_consecutive_days: 2
  max_games_per_week: 3
  max_games_per_timeslot: 2       # limited by umpire crews
  max_3_in_4_days: false          # true makes 3 games in 4 days a hard rule

# Guidelines are soft constraints, reported as warnings.
guidelines:
  avoid_3_in_4_days: true
  min_days_between_same_matchup: 14
  balance_sunday_games: true
  balance_pace: true

# Search tuning.
search:
  attempts: 50
  seed: 42
  max_displacement_depth: 3
"""


def resolve_config_path(path):
    """Use the given path, or config.yaml in the current directory."""
    if path:
        return path
    if os.path.exists(DEFAULT_CONFIG_FILE):
        return DEFAULT_CONFIG_FILE
    raise FileNotFoundError(
        f"no config file found. Either create {DEFAULT_CONFIG_FILE} in the current "
        f"directory or pass the path as an argument"
    )


def print_input_summary(games, slots) -> None:
    """Print what the engine is about to work with."""
    matchups = get_matchup_summary(games)
    if matchups:
        print(f"Built {matchups['total_matchups']} matchups for {matchups['teams']} teams "
              f"({matchups['avg_games_per_team']:.1f} games per team)")

    stats = get_slot_summary(slots)
    if stats:
        print(f"Date range: {stats['date_range']['start']} to {stats['date_range']['end']} "
              f"({stats['dates']} playing days)")
        print(f"Weekday distribution: {stats['weekday_distribution']}")
        print(f"Venue distribution: {stats['venue_distribution']}")


def run_generate(args) -> int:
    """Generate a schedule workbook. Returns the exit status."""
    print("Loading configuration...")
    config = load_config(resolve_config_path(args.config))
    if args.seed is not None:
        config.search.seed = args.seed
    if args.attempts is not None:
        config.search.attempts = args.attempts

    games = build_matchups(config)
    slots = generate_slots(config)
    overflow_slots = generate_overflow_slots(config)
    blackouts = generate_blackout_slots(config)

    print_input_summary(games, slots)
    print(f"Scheduling {len(games)} games into {len(slots)} available slots...")
    if overflow_slots:
        print(f"  ({len(overflow_slots)} overflow slots held in reserve)")

    status = 0
    try:
        result = SchedulingEngine(config).run(slots, overflow_slots, games)
        print(f"All {result.placed} games scheduled")
    except IncompleteScheduleError as e:
        result = e.result
        print(f"ERROR: {e}")
        status = 1

    print("\nPer Team Metrics:")
    print(format_metrics_table(result.team_metrics))

    if result.warnings:
        print(f"\nGuideline violations ({len(result.warnings)}):")
        for warning in result.warnings:
            print(f"  - {warning}")
    else:
        print("\nNo guideline violations")

    write_excel(result, config, slots + overflow_slots, blackouts, args.output)
    print(f"\nSchedule saved to {args.output}")
    return status


def run_validate(args) -> int:
    """Validate a schedule workbook. Returns the exit status."""
    if args.schedule is None:
        config_path, schedule_path = resolve_config_path(None), args.first
    else:
        config_path, schedule_path = args.first, args.schedule

    config = load_config(config_path)
    violations = validate(config, schedule_path)

    errors = 0
    warnings = 0
    for v in violations:
        if v.is_error:
            errors += 1
            print(f"Rule violation: {v.message}")
        else:
            warnings += 1
            print(f"Guideline violation: {v.message}")

    print(f"\nValidation complete: {errors} rule violations, {warnings} guideline violations")
    return 1 if errors else 0


def run_init(args) -> int:
    """Write a starter configuration file."""
    if os.path.exists(args.output):
        print(f"ERROR: {args.output} already exists; remove it first or use -o to write elsewhere")
        return 1
    with open(args.output, 'w') as f:
        f.write(CONFIG_TEMPLATE)
    print(f"Created {args.output}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rbrl",
        description="League schedule generator"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate", help="Generate a schedule from a config file")
    generate.add_argument("config", nargs="?", help=f"Path to YAML configuration (default {DEFAULT_CONFIG_FILE})")
    generate.add_argument("--output", "-o", default="schedule.xlsx", help="Output Excel file path")
    generate.add_argument("--seed", type=int, help="Base random seed")
    generate.add_argument("--attempts", type=int, help="Number of restart attempts")
    generate.set_defaults(func=run_generate)

    validate_cmd = subparsers.add_parser("validate", help="Validate a schedule against config rules")
    validate_cmd.add_argument("first", metavar="config", help="Config file, or the schedule when only one path is given")
    validate_cmd.add_argument("schedule", nargs="?", help="Path to the schedule workbook")
    validate_cmd.set_defaults(func=run_validate)

    init = subparsers.add_parser("init", help="Create a starter config file")
    init.add_argument("--output", "-o", default=DEFAULT_CONFIG_FILE, help="Output path for the config file")
    init.set_defaults(func=run_init)

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        status = args.func(args)
    except FileNotFoundError as e:
        print(f"ERROR: File not found: {e}")
        sys.exit(1)
    except yaml.YAMLError as e:
        print(f"ERROR: Invalid YAML configuration: {e}")
        sys.exit(1)
    except ValidationError as e:
        print(f"ERROR: Invalid configuration: {e}")
        sys.exit(1)
    except Exception as e:
        print(f"ERROR: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)

    if status:
        sys.exit(status)


if __name__ == "__main__":
    main()
