"""
Mutable search state for a single scheduling attempt.

Every assign/unassign is recorded in a journal so tentative placements made
while backtracking can be rolled back exactly.
"""

import bisect
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

from . import rules
from .config import SchedulerConfig
from .models import Assignment, Game, Slot


PACE_WEIGHT = 2.0
THREE_IN_FOUR_SLOT_PENALTY = 20.0
SUNDAY_WEIGHT = 10.0
SUNDAY_CEILING_PENALTY = 500.0
EARLY_DATE_WEIGHT = 0.1
LATE_TIME_WEIGHT = 0.05

# A team may not take a Sunday game that puts it more than this many
# Sundays above the league minimum.
SUNDAY_FAIRNESS_MARGIN = 2


@dataclass
class SearchBudget:
    """Iteration budget for one backtracking search."""
    limit: int
    used: int = 0

    def spend(self, n: int = 1) -> bool:
        """Consume ``n`` steps. Returns False once the budget is exceeded."""
        self.used += n
        return self.used <= self.limit

    @property
    def exhausted(self) -> bool:
        return self.used >= self.limit


class ScheduleState:
    """Placements plus the derived per-team and per-timeslot bookkeeping."""

    def __init__(self, config: SchedulerConfig, teams: Sequence[str], slots: Sequence[Slot] = ()):
        self.config = config
        self.teams = list(teams)

        self.placements: Dict[Game, Slot] = {}
        self.slot_owner: Dict[Slot, Game] = {}
        self.team_dates: Dict[str, List[date]] = defaultdict(list)
        self.team_games: Dict[str, int] = defaultdict(int)
        self.team_sundays: Dict[str, int] = defaultdict(int)
        self.team_timeslots: Dict[str, set] = defaultdict(set)
        self.timeslot_count: Dict[Tuple, int] = defaultdict(int)
        self.last_meeting: Dict[Tuple[str, str], date] = {}
        self.total_games = 0

        self._journal: List[Tuple[str, Game, Slot]] = []

        times_by_date = defaultdict(set)
        for slot in slots:
            times_by_date[slot.date].add(slot.time)
        self._times_by_date = {d: sorted(times) for d, times in times_by_date.items()}

    # Mutation

    def assign(self, game: Game, slot: Slot) -> None:
        """Place a game into a free slot."""
        self._apply_assign(game, slot)
        self._journal.append(("assign", game, slot))

    def unassign(self, game: Game) -> Slot:
        """Remove a game's placement. Returns the slot it occupied."""
        slot = self._apply_unassign(game)
        self._journal.append(("unassign", game, slot))
        return slot

    def mark(self) -> int:
        """A journal position to roll back to."""
        return len(self._journal)

    def rollback(self, mark: int) -> None:
        """Undo every assign/unassign made since ``mark``, newest first."""
        while len(self._journal) > mark:
            op, game, slot = self._journal.pop()
            if op == "assign":
                self._apply_unassign(game)
            else:
                self._apply_assign(game, slot)

    def _apply_assign(self, game: Game, slot: Slot) -> None:
        if slot in self.slot_owner:
            raise ValueError(f"slot {slot} is already occupied by {self.slot_owner[slot]}")
        if game in self.placements:
            raise ValueError(f"{game} is already placed at {self.placements[game]}")

        self.placements[game] = slot
        self.slot_owner[slot] = game
        self.timeslot_count[slot.timeslot] += 1
        for team in game.teams:
            bisect.insort(self.team_dates[team], slot.date)
            self.team_games[team] += 1
            self.team_timeslots[team].add(slot.timeslot)
            if slot.is_sunday:
                self.team_sundays[team] += 1
        self.total_games += 1

        pair = game.pair
        last = self.last_meeting.get(pair)
        if last is None or slot.date > last:
            self.last_meeting[pair] = slot.date

    def _apply_unassign(self, game: Game) -> Slot:
        slot = self.placements.pop(game)
        del self.slot_owner[slot]
        self.timeslot_count[slot.timeslot] -= 1
        for team in game.teams:
            dates = self.team_dates[team]
            del dates[bisect.bisect_left(dates, slot.date)]
            self.team_games[team] -= 1
            self.team_timeslots[team].discard(slot.timeslot)
            if slot.is_sunday:
                self.team_sundays[team] -= 1
        self.total_games -= 1

        pair = game.pair
        remaining = [s.date for g, s in self.placements.items() if g.pair == pair]
        if remaining:
            self.last_meeting[pair] = max(remaining)
        else:
            self.last_meeting.pop(pair, None)
        return slot

    # Queries

    def is_placed(self, game: Game) -> bool:
        return game in self.placements

    def owner(self, slot: Slot) -> Optional[Game]:
        return self.slot_owner.get(slot)

    def games_on(self, d: date) -> int:
        return sum(1 for slot in self.slot_owner if slot.date == d)

    def min_sundays(self) -> int:
        if not self.teams:
            return 0
        return min(self.team_sundays[team] for team in self.teams)

    def within_sunday_ceiling(self, team: str) -> bool:
        """Can ``team`` take one more Sunday game without breaking the fairness ceiling?"""
        return self.team_sundays[team] + 1 <= self.min_sundays() + SUNDAY_FAIRNESS_MARGIN

    def assignments(self) -> List[Assignment]:
        """Current placements in slot order."""
        return [
            Assignment(game, slot)
            for game, slot in sorted(self.placements.items(), key=lambda item: (item[1], item[0].label))
        ]

    # Constraints and scoring

    def can_place(self, game: Game, slot: Slot) -> bool:
        """Check every hard rule for placing ``game`` into ``slot``."""
        if slot in self.slot_owner:
            return False

        rules_cfg = self.config.rules
        if self.timeslot_count[slot.timeslot] >= rules_cfg.max_games_per_timeslot:
            return False

        for team in game.teams:
            dates = self.team_dates[team]
            same_day = bisect.bisect_right(dates, slot.date) - bisect.bisect_left(dates, slot.date)
            if same_day >= rules_cfg.max_games_per_day_per_team:
                return False
            if slot.timeslot in self.team_timeslots[team]:
                return False
            if rules.would_exceed_consecutive(dates, slot.date, rules_cfg.max_consecutive_days):
                return False
            if rules.games_in_week(dates, slot.date) >= rules_cfg.max_games_per_week:
                return False
            if rules_cfg.max_3_in_4_days and rules.would_make_three_in_four(dates, slot.date):
                return False

        return True

    def score_slot(self, game: Game, slot: Slot) -> float:
        """Calculate score for a game-slot combination (lower is better)."""
        guidelines = self.config.guidelines
        score = 0.0

        # 1. Pace: keep games played close to the league average
        if guidelines.balance_pace and self.teams:
            average = 2 * self.total_games / len(self.teams)
            for team in game.teams:
                score += abs(self.team_games[team] - average) * PACE_WEIGHT

        # 2. Rematch spacing
        min_days = guidelines.min_days_between_same_matchup
        last = self.last_meeting.get(game.pair)
        if last is not None and min_days > 0:
            days = abs((slot.date - last).days)
            if days < min_days:
                score += (min_days - days) * rules.REMATCH_DAY_PENALTY

        # 3. Three games in four days, when only a guideline
        if guidelines.avoid_3_in_4_days and not self.config.rules.max_3_in_4_days:
            for team in game.teams:
                if rules.would_make_three_in_four(self.team_dates[team], slot.date):
                    score += THREE_IN_FOUR_SLOT_PENALTY

        # 4. Sunday fairness
        if guidelines.balance_sunday_games and slot.is_sunday:
            for team in game.teams:
                score += self.team_sundays[team] * SUNDAY_WEIGHT
                if not self.within_sunday_ceiling(team):
                    score += SUNDAY_CEILING_PENALTY

        # 5. Earlier dates spread games across the season
        score += (slot.date - self.config.season.start_date).days * EARLY_DATE_WEIGHT

        # 6. Later start times on days with several
        times = self._times_by_date.get(slot.date, [])
        if len(times) > 1 and slot.time in times:
            score += (len(times) - 1 - times.index(slot.time)) * LATE_TIME_WEIGHT

        return score

    def legal_slots(self, game: Game, slots: Sequence[Slot]) -> List[Slot]:
        return [slot for slot in slots if self.can_place(game, slot)]

    def best_slot(self, game: Game, slots: Sequence[Slot]) -> Optional[Slot]:
        """The lowest-scoring legal slot, earliest slot winning ties."""
        best = None
        best_score = float('inf')
        for slot in slots:
            if not self.can_place(game, slot):
                continue
            score = self.score_slot(game, slot)
            if score < best_score:
                best_score = score
                best = slot
        return best

    def soft_score(self, saturdays: Sequence[date]) -> float:
        return rules.soft_score(self.assignments(), self.config, self.teams, saturdays)
