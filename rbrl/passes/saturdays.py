"""
Saturday coverage pass: give every team a Saturday game each week.
"""

import logging
import random
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Set

from ..models import Game, Slot
from ..slots import slot_capacity, slots_by_date
from ..state import ScheduleState, SearchBudget

logger = logging.getLogger(__name__)


def cover_saturdays(state: ScheduleState, pending: List[Game], slots: Sequence[Slot],
                    rng: random.Random, node_limit: int) -> List[Game]:
    """
    For each Saturday, find a team-disjoint set of games covering every team
    exactly once and place each into its best legal slot that day.

    Saturdays without a perfect matching (or without the capacity for one)
    are skipped; their games stay pending for the later passes.

    Args:
        state: Attempt state
        pending: Unscheduled games
        slots: Regular-season slots
        rng: Attempt random source
        node_limit: Backtracking budget per Saturday

    Returns:
        List[Game]: Games still unscheduled
    """
    teams = state.teams
    if len(teams) < 2 or len(teams) % 2:
        logger.debug("Odd team count (%d); no Saturday can be fully covered", len(teams))
        return list(pending)

    remaining = list(pending)
    needed = len(teams) // 2
    by_date = slots_by_date(slots)

    for saturday in sorted(d for d in by_date if d.weekday() == 5):
        day_slots = by_date[saturday]
        if slot_capacity(day_slots, state.config.rules.max_games_per_timeslot) < needed:
            logger.debug("Saturday %s lacks capacity for %d games", saturday, needed)
            continue

        candidates = [g for g in remaining if any(state.can_place(g, s) for s in day_slots)]
        budget = SearchBudget(node_limit)
        matching = find_perfect_matching(teams, candidates, rng, budget)
        if matching is None:
            logger.debug("No perfect matching on %s (%d nodes)", saturday, budget.used)
            continue

        placed = 0
        for game in matching:
            slot = state.best_slot(game, day_slots)
            if slot is None:
                continue
            state.assign(game, slot)
            remaining.remove(game)
            placed += 1
        logger.debug("Saturday %s: placed %d of %d matched games", saturday, placed, len(matching))

    return remaining


def find_perfect_matching(teams: Sequence[str], games: Sequence[Game], rng: random.Random,
                          budget: SearchBudget) -> Optional[List[Game]]:
    """
    Randomised backtracking search for games covering every team exactly once.

    Returns:
        Optional[List[Game]]: The matching, or None if none exists or the
        budget ran out
    """
    by_team: Dict[str, List[Game]] = defaultdict(list)
    for game in games:
        if game.home == game.away:
            continue
        by_team[game.home].append(game)
        by_team[game.away].append(game)
    for team in teams:
        rng.shuffle(by_team[team])

    chosen: List[Game] = []
    if _extend_matching(list(teams), by_team, chosen, set(), budget):
        return chosen
    return None


def _open_games(team: str, by_team: Dict[str, List[Game]], covered: Set[str]) -> List[Game]:
    return [g for g in by_team[team] if g.home not in covered and g.away not in covered]


def _extend_matching(teams: List[str], by_team: Dict[str, List[Game]], chosen: List[Game],
                     covered: Set[str], budget: SearchBudget) -> bool:
    if len(covered) == len(teams):
        return True
    if not budget.spend():
        return False

    # Branch on the uncovered team with the fewest options
    uncovered = [t for t in teams if t not in covered]
    team = min(uncovered, key=lambda t: len(_open_games(t, by_team, covered)))

    for game in _open_games(team, by_team, covered):
        chosen.append(game)
        covered.update(game.teams)
        if _extend_matching(teams, by_team, chosen, covered, budget):
            return True
        chosen.pop()
        covered.difference_update(game.teams)
    return False
