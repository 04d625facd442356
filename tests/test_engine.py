"""
Tests for the scheduling engine.
"""

from collections import Counter
from datetime import timedelta

import pytest

from rbrl import rules
from rbrl.config import SchedulerConfig
from rbrl.engine import IncompleteScheduleError, SchedulingEngine, league_teams, schedule
from rbrl.matchups import build_matchups
from rbrl.models import Game
from rbrl.slots import generate_overflow_slots, generate_slots


def test_all_games_scheduled(league_schedule):
    config, result = league_schedule
    assert result.complete
    assert result.placed == 65
    assert result.required == 65
    assert len({a.game.label for a in result.assignments}) == 65


def test_no_slot_used_twice(league_schedule):
    _, result = league_schedule
    slots = [a.slot for a in result.assignments]
    assert len(slots) == len(set(slots))


def test_one_game_per_team_per_day(league_schedule):
    _, result = league_schedule
    seen = Counter()
    for a in result.assignments:
        for team in a.game.teams:
            seen[(team, a.slot.date)] += 1
    assert max(seen.values()) == 1


def test_no_three_consecutive_days(league_schedule):
    _, result = league_schedule
    for team, dates in rules.team_dates(result.assignments).items():
        for i in range(2, len(dates)):
            assert dates[i] - dates[i - 2] > timedelta(days=2), team


def test_weekly_and_timeslot_caps(league_schedule):
    _, result = league_schedule
    for team, dates in rules.team_dates(result.assignments).items():
        weeks = Counter(rules.iso_week(d) for d in dates)
        assert max(weeks.values()) <= 3, team

    per_timeslot = Counter(a.slot.timeslot for a in result.assignments)
    assert max(per_timeslot.values()) <= 2


def test_only_season_slots_used(league_schedule):
    config, result = league_schedule
    blackouts = {b.date for b in config.season.blackout_dates}
    for a in result.assignments:
        assert config.season.start_date <= a.slot.date <= config.season.end_date
        assert a.slot.date not in blackouts


def test_no_hard_violations(league_schedule):
    config, result = league_schedule
    assert rules.hard_violations(result.assignments, config) == []


def test_metrics_attached(league_schedule):
    config, result = league_schedule
    assert list(result.team_metrics) == config.get_all_teams()
    assert all(m.games == 13 for m in result.team_metrics.values())
    assert sum(m.saturday for m in result.team_metrics.values()) == 2 * sum(
        1 for a in result.assignments if a.slot.is_saturday
    )


def test_same_seed_same_schedule(small_config):
    games = build_matchups(small_config)
    slots = generate_slots(small_config)
    small_config.search.attempts = 2

    engine = SchedulingEngine(small_config)
    teams = league_teams(small_config, games)
    first = engine.attempt(slots, [], games, teams, [], seed=3)
    second = engine.attempt(slots, [], games, teams, [], seed=3)

    assert first.state.assignments() == second.state.assignments()
    assert first.unplaced == second.unplaced
    assert first.score == second.score


def test_reserved_venue_gets_no_games(league_data):
    league_data["venues"][0]["reservations"] = [
        {"start_date": "2026-04-25", "end_date": "2026-05-31", "reason": "Reserved"},
    ]
    league_data["search"]["attempts"] = 10
    config = SchedulerConfig(**league_data)
    result = schedule(config, generate_slots(config), build_matchups(config))

    assert result.placed == 65
    assert not [a for a in result.assignments if a.slot.venue == "Moscariello Ballpark"]


def test_three_in_four_as_hard_rule(league_data):
    league_data["rules"]["max_3_in_4_days"] = True
    league_data["search"]["attempts"] = 10
    config = SchedulerConfig(**league_data)
    result = schedule(config, generate_slots(config), build_matchups(config))

    assert result.placed == 65
    assert rules.hard_violations(result.assignments, config) == []
    for team, dates in rules.team_dates(result.assignments).items():
        assert rules.three_in_four_runs(dates) == [], team
    assert not any("3 games in 4 days" in w for w in result.warnings)


def _one_week_config(league_data, overflow_end_date=None):
    league_data["season"] = {"start_date": "2026-04-27", "end_date": "2026-05-03"}
    if overflow_end_date:
        league_data["season"]["overflow_end_date"] = overflow_end_date
    league_data["search"] = {"attempts": 3, "seed": 1}
    return SchedulerConfig(**league_data)


def test_incomplete_schedule_raises(league_data):
    config = _one_week_config(league_data)
    games = build_matchups(config)

    with pytest.raises(IncompleteScheduleError) as excinfo:
        schedule(config, generate_slots(config), games)

    error = excinfo.value
    assert error.unplaced
    assert error.placed == error.result.placed
    assert error.required == 65
    assert error.placed + len(error.unplaced) == 65
    assert error.first_unplaced == error.unplaced[0]
    assert error.first_unplaced.label in str(error)
    assert f"placed {error.placed} of 65" in str(error)
    assert rules.hard_violations(error.result.assignments, config) == []


def test_overflow_used_only_when_needed(league_data):
    config = _one_week_config(league_data, overflow_end_date="2026-06-30")
    slots = generate_slots(config)
    overflow = generate_overflow_slots(config)
    games = build_matchups(config)

    result = schedule(config, slots, games, overflow_slots=overflow)

    assert result.complete
    in_season = [a for a in result.assignments if a.slot.date <= config.season.end_date]
    in_overflow = [a for a in result.assignments if config.is_overflow_date(a.slot.date)]
    assert in_season
    assert in_overflow
    assert any(w.startswith(f"{len(in_overflow)} game(s) scheduled in overflow period") for w in result.warnings)
    assert rules.hard_violations(result.assignments, config) == []


def test_best_attempt_kept(small_config):
    small_config.search.attempts = 3
    games = build_matchups(small_config)
    slots = generate_slots(small_config)
    engine = SchedulingEngine(small_config)
    teams = league_teams(small_config, games)
    saturdays = sorted({s.date for s in slots if s.is_saturday})

    outcomes = [
        engine.attempt(slots, [], games, teams, saturdays, small_config.search.seed + n)
        for n in range(3)
    ]
    best = min(outcomes, key=lambda o: o.rank)

    try:
        result = engine.run(slots, [], games)
    except IncompleteScheduleError as e:
        result = e.result
    assert result.seed == best.seed
    assert result.score == best.score


def test_league_teams_appends_unknown_teams(league_config):
    games = [Game(home="Angels", away="Expos", label="Game 1")]
    teams = league_teams(league_config, games)
    assert teams[:10] == league_config.get_all_teams()
    assert teams[10:] == ["Expos"]
