"""
Slot availability for the league scheduler.

Turns the season calendar, blackout days, time lists and venue reservations
into the ordered (date, time, venue) slots the engine assigns games to.
"""

from collections import defaultdict
from datetime import date, time, timedelta
from typing import Dict, List, Set, Tuple

from .config import SchedulerConfig
from .models import BlackoutSlot, Slot


def _daterange(start: date, end: date):
    d = start
    while d <= end:
        yield d
        d += timedelta(days=1)


def _reservation_lookup(config: SchedulerConfig) -> Tuple[Set[Tuple[str, date]], Set[Tuple[str, date, time]]]:
    """Index reservations as full-day (venue, date) and timed (venue, date, time) keys."""
    full_day = set()
    timed = set()
    for venue in config.venues:
        for reservation in venue.reservations:
            for d in reservation.dates():
                if reservation.full_day:
                    full_day.add((venue.name, d))
                else:
                    for t in reservation.times:
                        timed.add((venue.name, d, t))
    return full_day, timed


def _slots_between(config: SchedulerConfig, start: date, end: date) -> List[Slot]:
    blackout_dates = {b.date for b in config.season.blackout_dates}
    full_day, timed = _reservation_lookup(config)

    slots = []
    for d in _daterange(start, end):
        if d in blackout_dates:
            continue
        for t in config.time_slots.times_for(d):
            for venue in config.venues:
                if (venue.name, d) in full_day:
                    continue
                if (venue.name, d, t) in timed:
                    continue
                slots.append(Slot(date=d, time=t, venue=venue.name))

    # Duplicate times in a day list would produce identical slots
    return sorted(set(slots))


def generate_slots(config: SchedulerConfig) -> List[Slot]:
    """
    Build every usable slot in the regular season.

    Args:
        config: Scheduler configuration

    Returns:
        List[Slot]: Slots sorted by date, then time, then venue name
    """
    return _slots_between(config, config.season.start_date, config.season.end_date)


def generate_overflow_slots(config: SchedulerConfig) -> List[Slot]:
    """
    Build usable slots for the overflow window (day after end_date through
    overflow_end_date). Returns an empty list if no window is configured.
    """
    if config.season.overflow_end_date is None:
        return []
    start = config.season.end_date + timedelta(days=1)
    return _slots_between(config, start, config.season.overflow_end_date)


def generate_blackout_slots(config: SchedulerConfig) -> List[BlackoutSlot]:
    """
    List every blacked-out or reserved slot with its reason, for display.

    Season-wide blackout days cover every venue at that day's times.
    Reservations are only listed inside the season (including overflow).
    """
    blackouts = []

    for b in config.season.blackout_dates:
        for t in config.time_slots.times_for(b.date):
            for venue in config.venues:
                blackouts.append(BlackoutSlot(date=b.date, time=t, venue=venue.name, reason=b.reason))

    effective_end = config.season.overflow_end_date or config.season.end_date
    for venue in config.venues:
        for reservation in venue.reservations:
            for d in reservation.dates():
                if d < config.season.start_date or d > effective_end:
                    continue
                times = reservation.times if reservation.times else config.time_slots.times_for(d)
                for t in times:
                    blackouts.append(BlackoutSlot(date=d, time=t, venue=venue.name, reason=reservation.reason))

    blackouts.sort(key=lambda b: (b.date, b.time, b.venue))
    return blackouts


def slots_by_date(slots: List[Slot]) -> Dict[date, List[Slot]]:
    """Group slots by date, preserving slot order within each date."""
    grouped = defaultdict(list)
    for slot in slots:
        grouped[slot.date].append(slot)
    return dict(grouped)


def slot_capacity(slots: List[Slot], max_per_timeslot: int) -> int:
    """
    Number of games a slot list can hold once the per-timeslot cap applies.
    """
    per_timeslot = defaultdict(int)
    for slot in slots:
        per_timeslot[slot.timeslot] += 1
    return sum(min(count, max_per_timeslot) for count in per_timeslot.values())


def get_slot_summary(slots: List[Slot]) -> Dict:
    """
    Get summary statistics for slots.

    Args:
        slots: List of slots

    Returns:
        Dict: Summary statistics
    """
    if not slots:
        return {}

    weekday_distribution = defaultdict(int)
    venue_distribution = defaultdict(int)
    for slot in slots:
        weekday_distribution[slot.weekday.value] += 1
        venue_distribution[slot.venue] += 1

    return {
        'total_slots': len(slots),
        'dates': len({s.date for s in slots}),
        'date_range': {
            'start': slots[0].date,
            'end': slots[-1].date,
        },
        'weekday_distribution': dict(weekday_distribution),
        'venue_distribution': dict(venue_distribution),
    }
