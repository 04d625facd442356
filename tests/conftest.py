"""
Shared fixtures: the ten-team, two-division spring season used across tests.
"""

import copy
import sys
from pathlib import Path

import pytest

# Add the rbrl package to the path
sys.path.append(str(Path(__file__).parent.parent))

from rbrl.config import SchedulerConfig


LEAGUE_DATA = {
    "season": {
        "start_date": "2026-04-25",
        "end_date": "2026-05-31",
        "blackout_dates": [
            {"date": "2026-05-10", "reason": "Mother's Day"},
            {"date": "2026-05-23", "reason": "Memorial Day Weekend"},
            {"date": "2026-05-24", "reason": "Memorial Day Weekend"},
            {"date": "2026-05-25", "reason": "Memorial Day"},
        ],
    },
    "divisions": [
        {"name": "American", "teams": ["Angels", "Astros", "Orioles", "Mariners", "Royals"]},
        {"name": "National", "teams": ["Cubs", "Padres", "Phillies", "Pirates", "Rockies"]},
    ],
    "venues": [
        {"name": "Moscariello Ballpark"},
        {"name": "Symonds Field"},
        {"name": "Washington Park"},
    ],
    "time_slots": {
        "weekday": ["17:45"],
        "saturday": ["12:30", "14:45", "17:00"],
        "sunday": ["17:00"],
        "holiday_dates": ["2026-05-25"],
    },
    "strategy": "division_weighted",
    "rules": {
        "max_games_per_day_per_team": 1,
        "max_consecutive_days": 2,
        "max_games_per_week": 3,
        "max_games_per_timeslot": 2,
    },
    "guidelines": {
        "avoid_3_in_4_days": True,
        "min_days_between_same_matchup": 14,
        "balance_sunday_games": True,
        "balance_pace": True,
    },
    "search": {
        "attempts": 5,
        "seed": 42,
    },
}


@pytest.fixture
def league_data():
    """A fresh, mutable copy of the league configuration data."""
    return copy.deepcopy(LEAGUE_DATA)


@pytest.fixture
def league_config(league_data):
    return SchedulerConfig(**league_data)


@pytest.fixture
def small_config(league_data):
    """Four teams in one division over two weeks, for quick state tests."""
    league_data["season"] = {"start_date": "2026-04-25", "end_date": "2026-05-08"}
    league_data["divisions"] = [{"name": "Only", "teams": ["A", "B", "C", "D"]}]
    return SchedulerConfig(**league_data)


@pytest.fixture(scope="session")
def league_schedule():
    """One full run of the ten-team season, shared across test modules."""
    from rbrl.engine import schedule
    from rbrl.matchups import build_matchups
    from rbrl.slots import generate_slots

    config = SchedulerConfig(**copy.deepcopy(LEAGUE_DATA))
    config.search.attempts = 10
    return config, schedule(config, generate_slots(config), build_matchups(config))
