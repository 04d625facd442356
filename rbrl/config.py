"""
Configuration management for the league scheduler.
"""

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


KNOWN_STRATEGIES = ["division_weighted"]


def _coerce_time(v):
    """Accept YAML sexagesimal integers (an unquoted 17:45 loads as 1065)."""
    if isinstance(v, int) and not isinstance(v, bool):
        return dt.time(v // 60, v % 60)
    return v


class BlackoutDate(BaseModel):
    """A whole day with no games on any venue."""
    date: dt.date
    reason: str = ""


class Season(BaseModel):
    """Season boundaries and league-wide blackout days."""
    start_date: dt.date
    end_date: dt.date
    overflow_end_date: Optional[dt.date] = Field(
        default=None, description="Last date of the fallback window after end_date"
    )
    blackout_dates: List[BlackoutDate] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date <= self.start_date:
            raise ValueError(
                f"end date {self.end_date} must be after start date {self.start_date}"
            )
        if self.overflow_end_date is not None and self.overflow_end_date <= self.end_date:
            raise ValueError(
                f"overflow end date {self.overflow_end_date} must be after end date {self.end_date}"
            )
        return self


class Reservation(BaseModel):
    """A venue booking on a single date or a date range.

    With no ``times`` the venue is blocked for the whole day.
    """
    date: Optional[dt.date] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    times: List[dt.time] = Field(default_factory=list)
    reason: str = ""

    @field_validator("times", mode="before")
    @classmethod
    def coerce_times(cls, v):
        if v is None:
            return []
        return [_coerce_time(t) for t in v]

    @model_validator(mode="after")
    def check_shape(self):
        has_date = self.date is not None
        has_range = self.start_date is not None or self.end_date is not None
        if not has_date and not has_range:
            raise ValueError("reservation must have either 'date' or 'start_date'/'end_date'")
        if has_date and has_range:
            raise ValueError("reservation cannot have both 'date' and 'start_date'/'end_date'")
        if has_range and (self.start_date is None or self.end_date is None):
            raise ValueError("reservation with date range must have both 'start_date' and 'end_date'")
        if has_range and self.end_date < self.start_date:
            raise ValueError("reservation end_date must be on or after start_date")
        return self

    def dates(self) -> List[dt.date]:
        """Get all dates covered by this reservation."""
        if self.start_date is not None and self.end_date is not None:
            days = (self.end_date - self.start_date).days
            return [self.start_date + dt.timedelta(days=i) for i in range(days + 1)]
        if self.date is not None:
            return [self.date]
        return []

    @property
    def full_day(self) -> bool:
        return not self.times


class Venue(BaseModel):
    """A field games can be played on."""
    name: str
    reservations: List[Reservation] = Field(default_factory=list)


class Division(BaseModel):
    """A division containing teams."""
    name: str
    teams: List[str]


class TimeSlots(BaseModel):
    """Start times per day type. Holiday dates use the Sunday list."""
    weekday: List[dt.time] = Field(default_factory=list)
    saturday: List[dt.time] = Field(default_factory=list)
    sunday: List[dt.time] = Field(default_factory=list)
    holiday_dates: List[dt.date] = Field(default_factory=list)

    @field_validator("weekday", "saturday", "sunday", mode="before")
    @classmethod
    def coerce_times(cls, v):
        if v is None:
            return []
        return [_coerce_time(t) for t in v]

    def times_for(self, d: dt.date) -> List[dt.time]:
        """Get the start times that apply on a given date."""
        if d in self.holiday_dates:
            return list(self.sunday)
        weekday = d.weekday()
        if weekday == 5:
            return list(self.saturday)
        if weekday == 6:
            return list(self.sunday)
        return list(self.weekday)


class Rules(BaseModel):
    """Hard constraints. A schedule violating these is invalid."""
    max_games_per_day_per_team: int = Field(default=1, ge=1)
    max_consecutive_days: int = Field(default=2, ge=1)
    max_games_per_week: int = Field(default=3, ge=1)
    max_games_per_timeslot: int = Field(default=2, ge=1, description="Simultaneous games (umpire crews)")
    max_3_in_4_days: bool = Field(default=False, description="Forbid 3 games in any 4-day window")


class Guidelines(BaseModel):
    """Soft constraints. Violations are reported as warnings."""
    avoid_3_in_4_days: bool = True
    min_days_between_same_matchup: int = Field(default=14, ge=0)
    balance_sunday_games: bool = True
    balance_pace: bool = True


class SearchSettings(BaseModel):
    """Tuning for the restart search."""
    attempts: int = Field(default=50, ge=1, description="Independent restart attempts")
    seed: int = Field(default=42, description="Base seed; attempt N uses seed + N")
    max_displacement_depth: int = Field(default=3, ge=0)
    matching_node_limit: int = Field(default=20000, ge=1, description="Backtracking budget per Saturday")
    displacement_node_limit: int = Field(default=400, ge=1, description="Eviction budget per stuck game")


class SchedulerConfig(BaseModel):
    """Main configuration for the league scheduler."""
    season: Season
    divisions: List[Division]
    venues: List[Venue]
    time_slots: TimeSlots = Field(default_factory=TimeSlots)
    strategy: str = Field(default="division_weighted", description="Matchup generator")
    rules: Rules = Field(default_factory=Rules)
    guidelines: Guidelines = Field(default_factory=Guidelines)
    search: SearchSettings = Field(default_factory=SearchSettings)

    @field_validator("divisions")
    @classmethod
    def validate_divisions(cls, v):
        if not v:
            raise ValueError("at least one division is required")
        seen = {}
        for division in v:
            if not division.teams:
                raise ValueError(f"division {division.name!r} has no teams")
            for team in division.teams:
                if team in seen:
                    raise ValueError(
                        f"team {team!r} appears in both {seen[team]!r} and {division.name!r} divisions"
                    )
                seen[team] = division.name
        return v

    @field_validator("venues")
    @classmethod
    def validate_venues(cls, v):
        if not v:
            raise ValueError("at least one venue is required")
        return v

    @field_validator("strategy")
    @classmethod
    def validate_strategy(cls, v):
        if v not in KNOWN_STRATEGIES:
            raise ValueError(f"Unknown strategy: {v}. Must be one of {KNOWN_STRATEGIES}")
        return v

    def get_all_teams(self) -> List[str]:
        """Get all teams from all divisions, in config order."""
        teams = []
        for division in self.divisions:
            teams.extend(division.teams)
        return teams

    def get_team_division(self, team: str) -> Optional[str]:
        """Get the division name for a given team."""
        for division in self.divisions:
            if team in division.teams:
                return division.name
        return None

    def venue_names(self) -> List[str]:
        return [v.name for v in self.venues]

    def is_overflow_date(self, d: dt.date) -> bool:
        return d > self.season.end_date


def load_config(config_path: str) -> SchedulerConfig:
    """Load configuration from YAML file."""
    import yaml

    with open(config_path, 'r') as f:
        config_data = yaml.safe_load(f)

    return SchedulerConfig(**config_data)


def save_config(config: SchedulerConfig, config_path: str) -> None:
    """Save configuration to YAML file."""
    import yaml

    with open(config_path, 'w') as f:
        yaml.dump(config.model_dump(mode="json"), f, default_flow_style=False, indent=2, sort_keys=False)
