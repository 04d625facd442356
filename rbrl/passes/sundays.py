"""
Sunday balancing pass: spread the scarce Sunday games evenly across teams.
"""

import logging
from typing import List, Sequence

from ..models import Game, Slot
from ..slots import slot_capacity, slots_by_date
from ..state import SUNDAY_WEIGHT, ScheduleState

logger = logging.getLogger(__name__)


def balance_sundays(state: ScheduleState, pending: List[Game], slots: Sequence[Slot]) -> List[Game]:
    """
    Fill each Sunday up to its capacity, always picking the game/slot pair
    with the lowest ``10 x (Sunday counts of both teams) + slot score``.

    A team is never picked if it would end up more than two Sundays above
    the league minimum.

    Returns:
        List[Game]: Games still unscheduled
    """
    remaining = list(pending)
    by_date = slots_by_date(slots)
    cap = state.config.rules.max_games_per_timeslot

    for sunday in sorted(d for d in by_date if d.weekday() == 6):
        day_slots = by_date[sunday]
        capacity = slot_capacity(day_slots, cap) - state.games_on(sunday)

        picks = 0
        while picks < capacity:
            best = None
            for game in remaining:
                if not all(state.within_sunday_ceiling(team) for team in game.teams):
                    continue
                load = SUNDAY_WEIGHT * sum(state.team_sundays[team] for team in game.teams)
                for slot in day_slots:
                    if not state.can_place(game, slot):
                        continue
                    key = load + state.score_slot(game, slot)
                    if best is None or key < best[0]:
                        best = (key, game, slot)

            if best is None:
                break
            _, game, slot = best
            state.assign(game, slot)
            remaining.remove(game)
            picks += 1

        logger.debug("Sunday %s: placed %d game(s)", sunday, picks)

    return remaining
