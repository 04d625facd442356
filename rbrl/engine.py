"""
Core scheduling engine: best-of-N restarts over a four-pass assignment search.
"""

import logging
import random
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .config import SchedulerConfig
from .metrics import build_metrics
from .models import Game, Result, Slot
from .passes import balance_sundays, cover_saturdays, fill_weekdays, place_overflow
from .state import ScheduleState

logger = logging.getLogger(__name__)


class IncompleteScheduleError(Exception):
    """Raised when no attempt managed to place every game.

    The best partial schedule found is available as ``result``.
    """

    def __init__(self, result: Result):
        self.result = result
        self.placed = result.placed
        self.required = result.required
        self.first_unplaced = result.first_unplaced
        self.unplaced = list(result.unplaced)
        labels = ", ".join(g.label for g in self.unplaced)
        super().__init__(
            f"could not schedule all games: placed {self.placed} of {self.required}; "
            f"first unplaced: {self.first_unplaced}; unplaced: {labels}"
        )


@dataclass
class AttemptOutcome:
    """One finished restart attempt."""
    seed: int
    state: ScheduleState
    unplaced: List[Game]
    score: float

    @property
    def rank(self) -> Tuple[int, float]:
        """Fewest unplaced games first, then lowest soft score."""
        return (len(self.unplaced), self.score)


def league_teams(config: SchedulerConfig, games: Sequence[Game]) -> List[str]:
    """Config teams in config order, followed by any other team the games name."""
    teams = config.get_all_teams()
    known = set(teams)
    for game in games:
        for team in game.teams:
            if team not in known:
                known.add(team)
                teams.append(team)
    return teams


class SchedulingEngine:
    """Assigns games to slots with independent, seeded restart attempts."""

    def __init__(self, config: SchedulerConfig):
        self.config = config

    def run(self, slots: Sequence[Slot], overflow_slots: Sequence[Slot], games: Sequence[Game]) -> Result:
        """
        Main scheduling function.

        Args:
            slots: Regular-season slots, in slot order
            overflow_slots: Fallback slots after the season (may be empty)
            games: Games to schedule

        Returns:
            Result: The best complete schedule found

        Raises:
            IncompleteScheduleError: If no attempt placed every game
        """
        settings = self.config.search
        teams = league_teams(self.config, games)
        saturdays = sorted({s.date for s in slots if s.is_saturday})

        best: Optional[AttemptOutcome] = None
        for attempt in range(settings.attempts):
            outcome = self.attempt(slots, overflow_slots, games, teams, saturdays, settings.seed + attempt)
            logger.info(
                "Attempt %d/%d (seed %d): placed %d/%d, score %.1f",
                attempt + 1, settings.attempts, outcome.seed,
                len(games) - len(outcome.unplaced), len(games), outcome.score,
            )
            if best is None or outcome.rank < best.rank:
                best = outcome

        result = self._build_result(best, games, teams)
        if not result.complete:
            raise IncompleteScheduleError(result)
        return result

    def attempt(self, slots: Sequence[Slot], overflow_slots: Sequence[Slot], games: Sequence[Game],
                teams: Sequence[str], saturdays: Sequence, seed: int) -> AttemptOutcome:
        """Run all four passes once, with state and randomness owned by this attempt."""
        settings = self.config.search
        rng = random.Random(seed)

        pending = list(games)
        rng.shuffle(pending)

        state = ScheduleState(self.config, teams, list(slots) + list(overflow_slots))
        pending = cover_saturdays(state, pending, slots, rng, settings.matching_node_limit)
        pending = balance_sundays(state, pending, slots)
        stuck = fill_weekdays(
            state, pending, slots,
            max_depth=settings.max_displacement_depth,
            node_limit=settings.displacement_node_limit,
        )
        unplaced = place_overflow(state, stuck, overflow_slots)

        return AttemptOutcome(seed=seed, state=state, unplaced=unplaced, score=state.soft_score(saturdays))

    def _build_result(self, outcome: AttemptOutcome, games: Sequence[Game], teams: Sequence[str]) -> Result:
        assignments = outcome.state.assignments()
        warnings, team_metrics = build_metrics(assignments, self.config, teams)
        return Result(
            assignments=tuple(assignments),
            warnings=tuple(warnings),
            team_metrics=team_metrics,
            unplaced=tuple(outcome.unplaced),
            required=len(games),
            score=outcome.score,
            seed=outcome.seed,
        )


def schedule(config: SchedulerConfig, slots: Sequence[Slot], games: Sequence[Game],
             overflow_slots: Optional[Sequence[Slot]] = None) -> Result:
    """
    Convenience function to run the scheduler.

    Args:
        config: Scheduler configuration
        slots: Regular-season slots
        games: Games to schedule
        overflow_slots: Optional fallback slots after the season

    Returns:
        Result: Complete schedule

    Raises:
        IncompleteScheduleError: Carrying the best partial result
    """
    engine = SchedulingEngine(config)
    return engine.run(slots, overflow_slots or [], games)
