"""
Scheduling rules shared by the engine, the metrics builder and the validator.

Every predicate that decides whether a schedule breaks a rule or a guideline
lives here so the three callers cannot drift apart.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .config import SchedulerConfig
from .models import Assignment


# Attempt-level penalties (lower total is better)
SATURDAY_MISS_PENALTY = 50.0
SUNDAY_SPREAD_LIMIT = 2
SUNDAY_SPREAD_PENALTY = 20.0
THREE_IN_FOUR_PENALTY = 10.0
REMATCH_DAY_PENALTY = 5.0
OVERFLOW_GAME_PENALTY = 1000.0

# Sunday counts may differ by this much before a warning is raised
SUNDAY_WARNING_TOLERANCE = 1


@dataclass(frozen=True)
class Violation:
    """A rule (error) or guideline (warning) violation."""
    kind: str  # "error" or "warning"
    message: str
    teams: Tuple[str, ...] = ()
    days: int = 0

    @property
    def is_error(self) -> bool:
        return self.kind == "error"


def fmt_date(d: date) -> str:
    return d.strftime("%m/%d")


def iso_week(d: date) -> Tuple[int, int]:
    """ISO (year, week) so weeks from different years never collide."""
    year, week, _ = d.isocalendar()
    return (year, week)


def longest_streak(dates: Iterable[date]) -> int:
    """Longest run of playing days separated by exactly one day."""
    unique = sorted(set(dates))
    if not unique:
        return 0
    best = run = 1
    for prev, cur in zip(unique, unique[1:]):
        if (cur - prev).days == 1:
            run += 1
            best = max(best, run)
        else:
            run = 1
    return best


def would_exceed_consecutive(dates: Sequence[date], new_date: date, max_consecutive: int) -> bool:
    """Would playing on ``new_date`` create a run longer than ``max_consecutive`` days?"""
    played = set(dates)
    run = 1
    d = new_date - timedelta(days=1)
    while d in played:
        run += 1
        d -= timedelta(days=1)
    d = new_date + timedelta(days=1)
    while d in played:
        run += 1
        d += timedelta(days=1)
    return run > max_consecutive


def games_in_week(dates: Sequence[date], d: date) -> int:
    week = iso_week(d)
    return sum(1 for other in dates if iso_week(other) == week)


def would_make_three_in_four(dates: Sequence[date], new_date: date) -> bool:
    """Would a game on ``new_date`` be the third inside any 4-day window?"""
    for offset in range(-3, 1):
        start = new_date + timedelta(days=offset)
        end = start + timedelta(days=3)
        if sum(1 for d in dates if start <= d <= end) >= 2:
            return True
    return False


def three_in_four_runs(dates: Sequence[date]) -> List[Tuple[date, date, date]]:
    """Every three consecutive games (sorted dates) that fit inside four days."""
    dates = sorted(dates)
    return [
        (dates[i - 2], dates[i - 1], dates[i])
        for i in range(2, len(dates))
        if (dates[i] - dates[i - 2]).days <= 3
    ]


def team_dates(assignments: Iterable[Assignment]) -> Dict[str, List[date]]:
    """Sorted game dates per team."""
    result = defaultdict(list)
    for a in assignments:
        result[a.game.home].append(a.slot.date)
        result[a.game.away].append(a.slot.date)
    return {team: sorted(dates) for team, dates in result.items()}


def _weekday_counts(assignments: Iterable[Assignment], teams: Sequence[str], weekday: int) -> Dict[str, int]:
    counts = {team: 0 for team in teams}
    for a in assignments:
        if a.slot.date.weekday() == weekday:
            for team in a.game.teams:
                counts[team] = counts.get(team, 0) + 1
    return counts


def saturday_counts(assignments: Iterable[Assignment], teams: Sequence[str]) -> Dict[str, int]:
    return _weekday_counts(assignments, teams, 5)


def sunday_counts(assignments: Iterable[Assignment], teams: Sequence[str]) -> Dict[str, int]:
    return _weekday_counts(assignments, teams, 6)


def rematch_gaps(assignments: Iterable[Assignment]) -> List[Tuple[Tuple[str, str], date, date, int]]:
    """(pair, earlier date, later date, days) for every successive meeting of a pair."""
    meetings = defaultdict(list)
    for a in assignments:
        meetings[a.game.pair].append(a.slot.date)
    gaps = []
    for pair in sorted(meetings):
        dates = sorted(meetings[pair])
        for prev, cur in zip(dates, dates[1:]):
            gaps.append((pair, prev, cur, (cur - prev).days))
    return gaps


# Hard rules

def check_double_booking(assignments: Sequence[Assignment]) -> List[Violation]:
    counts = defaultdict(int)
    for a in assignments:
        counts[a.slot] += 1
    return [
        Violation("error", f"{count} games booked at {slot}")
        for slot, count in sorted(counts.items())
        if count > 1
    ]


def check_games_per_day(assignments: Sequence[Assignment], max_per_day: int) -> List[Violation]:
    counts = defaultdict(int)
    for a in assignments:
        for team in a.game.teams:
            counts[(team, a.slot.date)] += 1
    return [
        Violation("error", f"{team} plays {count} games on {fmt_date(d)} (max {max_per_day})", (team,))
        for (team, d), count in sorted(counts.items())
        if count > max_per_day
    ]


def check_team_timeslot_conflicts(assignments: Sequence[Assignment]) -> List[Violation]:
    counts = defaultdict(int)
    for a in assignments:
        for team in a.game.teams:
            counts[(team, a.slot.timeslot)] += 1
    return [
        Violation("error", f"{team} plays {count} games at {fmt_date(ts[0])} {ts[1].strftime('%H:%M')}", (team,))
        for (team, ts), count in sorted(counts.items())
        if count > 1
    ]


def check_consecutive_days(assignments: Sequence[Assignment], max_consecutive: int) -> List[Violation]:
    violations = []
    for team, dates in sorted(team_dates(assignments).items()):
        unique = sorted(set(dates))
        run = 1
        for prev, cur in zip(unique, unique[1:]):
            if (cur - prev).days == 1:
                run += 1
                if run > max_consecutive:
                    violations.append(Violation(
                        "error", f"{team} plays {run} consecutive days ending {fmt_date(cur)}", (team,)
                    ))
            else:
                run = 1
    return violations


def check_games_per_week(assignments: Sequence[Assignment], max_per_week: int) -> List[Violation]:
    violations = []
    for team, dates in sorted(team_dates(assignments).items()):
        weeks = defaultdict(int)
        for d in dates:
            weeks[iso_week(d)] += 1
        for (year, week), count in sorted(weeks.items()):
            if count > max_per_week:
                violations.append(Violation(
                    "error", f"{team} plays {count} games in week {week} (max {max_per_week})", (team,)
                ))
    return violations


def check_games_per_timeslot(assignments: Sequence[Assignment], max_per_timeslot: int) -> List[Violation]:
    counts = defaultdict(int)
    for a in assignments:
        counts[a.slot.timeslot] += 1
    return [
        Violation("error", f"{count} games at {fmt_date(d)} {t.strftime('%H:%M')} (max {max_per_timeslot})")
        for (d, t), count in sorted(counts.items())
        if count > max_per_timeslot
    ]


def check_three_in_four(assignments: Sequence[Assignment], kind: str = "warning") -> List[Violation]:
    violations = []
    for team, dates in sorted(team_dates(assignments).items()):
        for first, second, third in three_in_four_runs(dates):
            violations.append(Violation(
                kind,
                f"{team} plays 3 games in 4 days: {fmt_date(first)}, {fmt_date(second)}, {fmt_date(third)}",
                (team,),
            ))
    return violations


# Guidelines

def check_rematch_spacing(assignments: Sequence[Assignment], min_days: int) -> List[Violation]:
    """Rematches closer than ``min_days``, worst (smallest gap) first."""
    if min_days <= 0:
        return []
    violations = [
        Violation(
            "warning",
            f"{a} vs {b} rematch after only {days} days (min {min_days}): {fmt_date(prev)} and {fmt_date(cur)}",
            (a, b),
            days,
        )
        for (a, b), prev, cur, days in rematch_gaps(assignments)
        if days < min_days
    ]
    violations.sort(key=lambda v: v.days)
    return violations


def check_sunday_balance(assignments: Sequence[Assignment], teams: Sequence[str],
                         tolerance: int = SUNDAY_WARNING_TOLERANCE) -> List[Violation]:
    counts = sunday_counts(assignments, teams)
    if not counts:
        return []
    low, high = min(counts.values()), max(counts.values())
    if high - low > tolerance:
        return [Violation("warning", f"Sunday game imbalance: min {low}, max {high} across teams")]
    return []


def check_overflow_usage(assignments: Sequence[Assignment], season_end: date) -> List[Violation]:
    overflow_dates = [a.slot.date for a in assignments if a.slot.date > season_end]
    if not overflow_dates:
        return []
    return [Violation(
        "warning",
        f"{len(overflow_dates)} game(s) scheduled in overflow period on "
        f"{len(set(overflow_dates))} day(s), latest {fmt_date(max(overflow_dates))}",
    )]


def hard_violations(assignments: Sequence[Assignment], config: SchedulerConfig) -> List[Violation]:
    """Every hard-rule violation in a finished assignment set."""
    rules = config.rules
    violations = []
    violations.extend(check_double_booking(assignments))
    violations.extend(check_games_per_day(assignments, rules.max_games_per_day_per_team))
    violations.extend(check_team_timeslot_conflicts(assignments))
    violations.extend(check_consecutive_days(assignments, rules.max_consecutive_days))
    violations.extend(check_games_per_week(assignments, rules.max_games_per_week))
    violations.extend(check_games_per_timeslot(assignments, rules.max_games_per_timeslot))
    if rules.max_3_in_4_days:
        violations.extend(check_three_in_four(assignments, kind="error"))
    return violations


def guideline_violations(assignments: Sequence[Assignment], config: SchedulerConfig,
                         teams: Optional[Sequence[str]] = None) -> List[Violation]:
    """Every guideline violation, in reporting order."""
    if teams is None:
        teams = config.get_all_teams()
    violations = []
    if not config.rules.max_3_in_4_days:
        violations.extend(check_three_in_four(assignments))
    violations.extend(check_rematch_spacing(assignments, config.guidelines.min_days_between_same_matchup))
    if config.guidelines.balance_sunday_games:
        violations.extend(check_sunday_balance(assignments, teams))
    violations.extend(check_overflow_usage(assignments, config.season.end_date))
    return violations


def soft_score(assignments: Sequence[Assignment], config: SchedulerConfig,
               teams: Sequence[str], saturdays: Sequence[date]) -> float:
    """
    Score a finished (or partial) schedule for ranking restart attempts.

    Args:
        assignments: Placed games
        config: Scheduler configuration
        teams: Every team in the league
        saturdays: Regular-season Saturdays every team should play on

    Returns:
        float: Penalty total (lower is better)
    """
    score = 0.0

    games = {team: 0 for team in teams}
    for a in assignments:
        for team in a.game.teams:
            games[team] = games.get(team, 0) + 1
    if config.guidelines.balance_pace and games:
        score += max(games.values()) - min(games.values())

    playing = defaultdict(set)
    for a in assignments:
        if a.slot.is_saturday:
            playing[a.slot.date].update(a.game.teams)
    for saturday in saturdays:
        missing = sum(1 for team in teams if team not in playing[saturday])
        score += missing * SATURDAY_MISS_PENALTY

    sundays = sunday_counts(assignments, teams)
    if sundays:
        spread = max(sundays.values()) - min(sundays.values())
        if spread > SUNDAY_SPREAD_LIMIT:
            score += (spread - SUNDAY_SPREAD_LIMIT) * SUNDAY_SPREAD_PENALTY

    for dates in team_dates(assignments).values():
        score += len(three_in_four_runs(dates)) * THREE_IN_FOUR_PENALTY

    min_days = config.guidelines.min_days_between_same_matchup
    for _, _, _, days in rematch_gaps(assignments):
        if days < min_days:
            score += (min_days - days) * REMATCH_DAY_PENALTY

    overflow = sum(1 for a in assignments if a.slot.date > config.season.end_date)
    score += overflow * OVERFLOW_GAME_PENALTY

    return score
