"""
Per-team metrics and guideline warnings for a finished schedule.
"""

from typing import Dict, List, Optional, Sequence, Tuple

from . import rules
from .config import SchedulerConfig
from .models import Assignment, TeamMetrics


def build_metrics(assignments: Sequence[Assignment], config: SchedulerConfig,
                  teams: Optional[Sequence[str]] = None) -> Tuple[List[str], Dict[str, TeamMetrics]]:
    """
    Derive warnings and per-team metrics from an assignment set.

    Warnings come out in a fixed order: 3-in-4-days runs, rematches (worst
    first), Sunday imbalance, overflow usage. Each team's ``violations`` are
    the warnings that name it.

    Args:
        assignments: Placed games
        config: Scheduler configuration
        teams: League teams (defaults to every team in the config)

    Returns:
        Tuple[List[str], Dict[str, TeamMetrics]]: warnings and metrics by team
    """
    if teams is None:
        teams = config.get_all_teams()

    violations = rules.guideline_violations(assignments, config, teams)
    warnings = [v.message for v in violations]

    metrics = {team: TeamMetrics() for team in teams}
    saturdays = rules.saturday_counts(assignments, teams)
    sundays = rules.sunday_counts(assignments, teams)
    for a in assignments:
        for team in a.game.teams:
            metrics.setdefault(team, TeamMetrics()).games += 1
    for team, m in metrics.items():
        m.saturday = saturdays.get(team, 0)
        m.sunday = sundays.get(team, 0)
        m.violations = [v.message for v in violations if team in v.teams]

    return warnings, metrics


def format_metrics_table(team_metrics: Dict[str, TeamMetrics]) -> str:
    """Render per-team metrics as a fixed-width table."""
    lines = [f"  {'Team':<15} {'Games':>6} {'Sat':>4} {'Sun':>4} Violations"]
    for team, m in team_metrics.items():
        lines.append(f"  {team:<15} {m.games:>6} {m.saturday:>4} {m.sunday:>4} {len(m.violations)}")
    return "\n".join(lines)
