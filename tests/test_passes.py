"""
Tests for the scheduling passes.
"""

import random
from collections import Counter
from datetime import date, time

import pytest

from rbrl import rules
from rbrl.matchups import build_matchups
from rbrl.models import Game, Slot
from rbrl.passes import (
    balance_sundays,
    cover_saturdays,
    displace,
    fill_weekdays,
    find_perfect_matching,
    place_overflow,
)
from rbrl.slots import generate_slots
from rbrl.state import ScheduleState, SearchBudget


@pytest.fixture
def state(small_config):
    return ScheduleState(small_config, small_config.get_all_teams(), generate_slots(small_config))


@pytest.fixture
def games(small_config):
    return build_matchups(small_config)


def _slot(d, venue="Symonds Field", t=time(17, 45)):
    return Slot(date=d, time=t, venue=venue)


def test_find_perfect_matching():
    teams = ["A", "B", "C", "D"]
    games = [
        Game(home="A", away="B", label="Game 1"),
        Game(home="A", away="C", label="Game 2"),
        Game(home="C", away="D", label="Game 3"),
    ]
    matching = find_perfect_matching(teams, games, random.Random(1), SearchBudget(100))

    assert sorted(g.label for g in matching) == ["Game 1", "Game 3"]


def test_no_perfect_matching():
    games = [
        Game(home="A", away="B", label="Game 1"),
        Game(home="A", away="C", label="Game 2"),
    ]
    assert find_perfect_matching(["A", "B", "C", "D"], games, random.Random(1), SearchBudget(100)) is None


def test_matching_respects_budget():
    games = [Game(home="A", away="B", label="Game 1"), Game(home="C", away="D", label="Game 2")]
    assert find_perfect_matching(["A", "B", "C", "D"], games, random.Random(1), SearchBudget(0)) is None


def test_cover_saturdays(state, games, small_config):
    slots = generate_slots(small_config)
    remaining = cover_saturdays(state, games, slots, random.Random(7), 20000)

    assert len(remaining) == len(games) - 4
    for saturday in (date(2026, 4, 25), date(2026, 5, 2)):
        playing = Counter()
        for a in state.assignments():
            if a.slot.date == saturday:
                playing.update(a.game.teams)
        assert sorted(playing) == ["A", "B", "C", "D"]
        assert set(playing.values()) == {1}


def test_cover_saturdays_skips_odd_leagues(small_config):
    state = ScheduleState(small_config, ["A", "B", "C"])
    games = [Game(home="A", away="B", label="Game 1")]
    assert cover_saturdays(state, games, generate_slots(small_config), random.Random(1), 100) == games
    assert state.total_games == 0


def test_balance_sundays(state, games, small_config):
    slots = generate_slots(small_config)
    remaining = balance_sundays(state, games, slots)

    placed = state.assignments()
    assert len(remaining) == len(games) - len(placed)
    assert placed
    assert all(a.slot.is_sunday for a in placed)
    for sunday in (date(2026, 4, 26), date(2026, 5, 3)):
        assert state.games_on(sunday) <= 2

    counts = rules.sunday_counts(placed, state.teams)
    assert max(counts.values()) - min(counts.values()) <= 2


def test_fill_weekdays_never_breaks_rules(state, games, small_config):
    slots = generate_slots(small_config)
    stuck = fill_weekdays(state, games, slots)

    assert state.total_games + len(stuck) == len(games)
    assert not any(state.is_placed(g) for g in stuck)
    assert rules.hard_violations(state.assignments(), small_config) == []


def _displacement_setup(small_config):
    """A-B only fits on 04/27, which C-D holds; C-D can move to 04/28."""
    state = ScheduleState(small_config, small_config.get_all_teams())
    state.assign(Game(home="A", away="C", label="Game 1"), _slot(date(2026, 4, 29), "Washington Park"))
    state.assign(Game(home="A", away="D", label="Game 2"), _slot(date(2026, 4, 30), "Washington Park"))
    blocker = Game(home="C", away="D", label="Game 3")
    state.assign(blocker, _slot(date(2026, 4, 27)))
    return state, blocker


def test_displacement_reseats_occupant(small_config):
    state, blocker = _displacement_setup(small_config)
    stuck_game = Game(home="A", away="B", label="Game 4")
    slots = [_slot(date(2026, 4, 27)), _slot(date(2026, 4, 28))]

    assert state.best_slot(stuck_game, slots) is None
    assert fill_weekdays(state, [stuck_game], slots) == []
    assert state.placements[stuck_game] == _slot(date(2026, 4, 27))
    assert state.placements[blocker] == _slot(date(2026, 4, 28))


def test_failed_displacement_leaves_state_untouched(small_config):
    state, blocker = _displacement_setup(small_config)
    stuck_game = Game(home="A", away="B", label="Game 4")
    slots = [_slot(date(2026, 4, 27))]
    before = dict(state.placements)

    assert not displace(state, stuck_game, slots, 3, SearchBudget(400))
    assert state.placements == before
    assert fill_weekdays(state, [stuck_game], slots) == [stuck_game]
    assert state.placements == before


def test_place_overflow_first_fit(small_config):
    state = ScheduleState(small_config, small_config.get_all_teams())
    overflow = [_slot(date(2026, 5, 11)), _slot(date(2026, 5, 12))]
    g1 = Game(home="A", away="B", label="Game 1")
    g2 = Game(home="A", away="C", label="Game 2")
    g3 = Game(home="B", away="D", label="Game 3")

    assert place_overflow(state, [g1, g2, g3], overflow) == [g3]
    assert state.placements[g1] == overflow[0]
    assert state.placements[g2] == overflow[1]


def test_place_overflow_without_window(state):
    pending = [Game(home="A", away="B", label="Game 1")]
    assert place_overflow(state, pending, []) == pending
