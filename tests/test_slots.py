"""
Tests for slot generation.
"""

from datetime import date, time

from rbrl.config import SchedulerConfig
from rbrl.slots import (
    generate_blackout_slots,
    generate_overflow_slots,
    generate_slots,
    get_slot_summary,
    slot_capacity,
    slots_by_date,
)


def _on(slots, d):
    return [s for s in slots if s.date == d]


def test_slot_counts_by_day_type(league_config):
    slots = generate_slots(league_config)

    monday = _on(slots, date(2026, 4, 27))
    assert len(monday) == 3
    assert all(s.time == time(17, 45) for s in monday)

    assert len(_on(slots, date(2026, 4, 25))) == 9  # Saturday: 3 venues x 3 times
    sunday = _on(slots, date(2026, 4, 26))
    assert len(sunday) == 3
    assert all(s.time == time(17, 0) for s in sunday)


def test_blackout_dates_have_no_slots(league_config):
    slots = generate_slots(league_config)
    dates = {s.date for s in slots}
    for blackout in league_config.season.blackout_dates:
        assert blackout.date not in dates


def test_season_totals(league_config):
    slots = generate_slots(league_config)
    by_date = slots_by_date(slots)

    assert sum(1 for d in by_date if d.weekday() == 5) == 5
    assert sum(1 for d in by_date if d.weekday() == 6) == 4
    assert sum(1 for d in by_date if d.weekday() < 5) == 24
    assert len(slots) == 24 * 3 + 5 * 9 + 4 * 3
    assert slot_capacity(slots, 2) == 24 * 2 + 5 * 6 + 4 * 2


def test_slots_sorted(league_config):
    slots = generate_slots(league_config)
    assert slots == sorted(slots)
    assert slots[0].date == date(2026, 4, 25)
    assert slots[0].time == time(12, 30)
    assert slots[0].venue == "Moscariello Ballpark"


def test_holiday_uses_sunday_times(league_data):
    league_data["season"]["blackout_dates"] = []
    config = SchedulerConfig(**league_data)
    memorial_day = _on(generate_slots(config), date(2026, 5, 25))
    assert len(memorial_day) == 3
    assert all(s.time == time(17, 0) for s in memorial_day)
    assert not any(s.is_sunday for s in memorial_day)


def test_full_day_and_range_reservations(league_data):
    league_data["venues"] = [
        {"name": "Moscariello Ballpark", "reservations": [
            {"start_date": "2026-05-11", "end_date": "2026-05-15", "reason": "Varsity"},
        ]},
        {"name": "Symonds Field", "reservations": [
            {"date": "2026-05-02", "reason": "Freshman"},
        ]},
        {"name": "Washington Park"},
    ]
    config = SchedulerConfig(**league_data)
    slots = generate_slots(config)

    saturday = _on(slots, date(2026, 5, 2))
    assert not [s for s in saturday if s.venue == "Symonds Field"]
    assert len(saturday) == 6  # 2 venues x 3 Saturday times

    for day in range(11, 16):
        assert not [s for s in _on(slots, date(2026, 5, day)) if s.venue == "Moscariello Ballpark"]
    assert len(_on(slots, date(2026, 5, 15))) == 2


def test_timed_reservation_blocks_only_those_times(league_data):
    league_data["venues"][1]["reservations"] = [
        {"date": "2026-05-02", "times": ["12:30"], "reason": "Clinic"},
    ]
    config = SchedulerConfig(**league_data)
    symonds = [s for s in _on(generate_slots(config), date(2026, 5, 2)) if s.venue == "Symonds Field"]
    assert [s.time for s in symonds] == [time(14, 45), time(17, 0)]


def test_no_overflow_window(league_config):
    assert generate_overflow_slots(league_config) == []


def test_overflow_slots(league_data):
    league_data["season"]["overflow_end_date"] = "2026-06-07"
    config = SchedulerConfig(**league_data)
    overflow = generate_overflow_slots(config)

    assert overflow
    assert min(s.date for s in overflow) == date(2026, 6, 1)
    assert max(s.date for s in overflow) == date(2026, 6, 7)
    assert not set(overflow) & set(generate_slots(config))


def test_blackout_slots(league_data):
    league_data["venues"][0]["reservations"] = [
        {"start_date": "2026-05-11", "end_date": "2026-05-12", "reason": "Varsity"},
    ]
    config = SchedulerConfig(**league_data)
    blackouts = generate_blackout_slots(config)

    mothers_day = [b for b in blackouts if b.date == date(2026, 5, 10)]
    assert len(mothers_day) == 3
    assert all(b.reason == "Mother's Day" for b in mothers_day)

    varsity = [b for b in blackouts if b.reason == "Varsity"]
    assert len(varsity) == 2
    assert all(b.venue == "Moscariello Ballpark" for b in varsity)

    assert blackouts == sorted(blackouts, key=lambda b: (b.date, b.time, b.venue))


def test_slot_summary(league_config):
    summary = get_slot_summary(generate_slots(league_config))
    assert summary['total_slots'] == 129
    assert summary['dates'] == 33
    assert summary['weekday_distribution']['Sat'] == 45
    assert summary['venue_distribution']['Symonds Field'] == 43
    assert get_slot_summary([]) == {}
