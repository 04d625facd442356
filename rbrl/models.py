"""
Data models for the league scheduler.
"""

from dataclasses import dataclass, field
from datetime import date, time
from enum import Enum
from typing import Dict, List, Optional, Tuple


class Weekday(Enum):
    """Weekday enumeration, in ``date.weekday()`` order."""
    MONDAY = "Mon"
    TUESDAY = "Tue"
    WEDNESDAY = "Wed"
    THURSDAY = "Thu"
    FRIDAY = "Fri"
    SATURDAY = "Sat"
    SUNDAY = "Sun"

    @classmethod
    def from_date(cls, d: date) -> "Weekday":
        return list(cls)[d.weekday()]


@dataclass(frozen=True, order=True)
class Slot:
    """A bookable (date, time, venue) unit.

    Ordering is by date, then time, then venue name, which is the order the
    availability calculator emits slots in.
    """
    date: date
    time: time
    venue: str

    @property
    def weekday(self) -> Weekday:
        return Weekday.from_date(self.date)

    @property
    def is_saturday(self) -> bool:
        return self.date.weekday() == 5

    @property
    def is_sunday(self) -> bool:
        return self.date.weekday() == 6

    @property
    def timeslot(self) -> Tuple[date, time]:
        """The (date, time) pair shared by simultaneous games."""
        return (self.date, self.time)

    def __str__(self) -> str:
        return f"{self.date.strftime('%m/%d')} {self.time.strftime('%H:%M')} {self.venue}"


@dataclass(frozen=True, order=True)
class BlackoutSlot:
    """A (date, time, venue) that cannot be used, with the reason why."""
    date: date
    time: time
    venue: str
    reason: str = ""


@dataclass(frozen=True)
class Game:
    """A required matchup between two teams."""
    home: str
    away: str
    label: str

    @property
    def teams(self) -> Tuple[str, str]:
        return (self.home, self.away)

    @property
    def pair(self) -> Tuple[str, str]:
        """The unordered team pair, normalised so (a, b) == (b, a)."""
        if self.home > self.away:
            return (self.away, self.home)
        return (self.home, self.away)

    def involves(self, team: str) -> bool:
        return team in (self.home, self.away)

    def __str__(self) -> str:
        return f"{self.label} ({self.away} @ {self.home})"


@dataclass(frozen=True)
class Assignment:
    """A game placed into a specific slot."""
    game: Game
    slot: Slot


@dataclass
class TeamMetrics:
    """Per-team counts derived from a finished assignment set."""
    games: int = 0
    saturday: int = 0
    sunday: int = 0
    violations: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Result:
    """The outcome of a scheduling run.

    ``assignments`` is the complete schedule when ``complete`` is true,
    otherwise the best partial schedule that was found.
    """
    assignments: Tuple[Assignment, ...]
    warnings: Tuple[str, ...]
    team_metrics: Dict[str, TeamMetrics]
    unplaced: Tuple[Game, ...] = ()
    required: int = 0
    score: float = 0.0
    seed: Optional[int] = None

    @property
    def placed(self) -> int:
        return len(self.assignments)

    @property
    def complete(self) -> bool:
        return not self.unplaced

    @property
    def first_unplaced(self) -> Optional[Game]:
        return self.unplaced[0] if self.unplaced else None

    def games_for_team(self, team: str) -> List[Assignment]:
        """Get all assignments for a specific team, in slot order."""
        return [a for a in self.assignments if a.game.involves(team)]
