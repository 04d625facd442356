"""
Weekday fill pass: place the remaining games, hardest first, evicting and
re-seating already placed games when a game has no legal slot left.
"""

import logging
from typing import List, Sequence

from ..models import Game, Slot
from ..state import ScheduleState, SearchBudget

logger = logging.getLogger(__name__)


def fill_weekdays(state: ScheduleState, pending: List[Game], slots: Sequence[Slot],
                  max_depth: int = 3, node_limit: int = 400) -> List[Game]:
    """
    Place every pending game into the regular season.

    Games are ordered by how many legal slots they have (fewest first). Each
    is placed greedily into its best slot; failing that, a bounded chain of
    displacements is tried. Games that still do not fit are returned rather
    than aborting the attempt.

    Args:
        state: Attempt state
        pending: Unscheduled games
        slots: Regular-season slots
        max_depth: Maximum eviction chain length
        node_limit: Evictions tried per stuck game

    Returns:
        List[Game]: Games that could not be placed, in the order they failed
    """
    order = sorted(pending, key=lambda g: len(state.legal_slots(g, slots)))

    stuck = []
    for game in order:
        slot = state.best_slot(game, slots)
        if slot is not None:
            state.assign(game, slot)
            continue

        budget = SearchBudget(node_limit)
        if displace(state, game, slots, max_depth, budget):
            logger.debug("Placed %s by displacement (%d nodes)", game, budget.used)
            continue

        logger.debug("Could not place %s", game)
        stuck.append(game)

    return stuck


def displace(state: ScheduleState, game: Game, slots: Sequence[Slot], depth: int,
             budget: SearchBudget) -> bool:
    """
    Try to free an occupied non-Sunday slot for ``game`` by evicting its
    occupant and re-seating the occupant elsewhere.

    Every tentative change is rolled back when a chain fails, so on a False
    return the state is exactly as it was on entry.
    """
    if depth <= 0:
        return False

    for slot in slots:
        if slot.is_sunday:
            continue
        occupant = state.owner(slot)
        if occupant is None:
            continue
        if not budget.spend():
            return False

        mark = state.mark()
        state.unassign(occupant)
        if state.can_place(game, slot):
            state.assign(game, slot)
            if reseat(state, occupant, slots, depth - 1, budget):
                return True
        state.rollback(mark)

    return False


def reseat(state: ScheduleState, game: Game, slots: Sequence[Slot], depth: int,
           budget: SearchBudget) -> bool:
    """Place an evicted game directly, or by a shallower displacement."""
    slot = state.best_slot(game, slots)
    if slot is not None:
        state.assign(game, slot)
        return True
    return displace(state, game, slots, depth, budget)
