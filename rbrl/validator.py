"""
Validation of a rendered (possibly hand-edited) schedule workbook.

Rebuilds assignments from the master grid and applies the same rule set the
engine schedules with.
"""

from datetime import datetime
from typing import List, Tuple

import pandas as pd

from . import rules
from .config import SchedulerConfig
from .export import DATE_FORMAT, GAME_SEPARATOR, GRID_COLUMNS, MASTER_SHEET, TIME_FORMAT, venue_columns
from .models import Assignment, Game, Slot
from .rules import Violation


def read_master_sheet(path: str) -> pd.DataFrame:
    """Load the master grid with every cell as text."""
    try:
        df = pd.read_excel(path, sheet_name=MASTER_SHEET, dtype=str)
    except ValueError as e:
        raise ValueError(f"reading {MASTER_SHEET}: {e}") from e
    if df.empty:
        raise ValueError(f"{MASTER_SHEET} is empty")
    return df.fillna("")


def parse_game_cell(cell: str) -> Tuple[str, str]:
    """
    Parse an "Away @ Home" cell.

    Returns:
        Tuple[str, str]: (away, home), or ("", "") for blackout text
    """
    if GAME_SEPARATOR not in cell:
        return "", ""
    away, home = cell.split(GAME_SEPARATOR, 1)
    return away.strip(), home.strip()


def read_assignments(df: pd.DataFrame, config: SchedulerConfig) -> List[Assignment]:
    """
    Rebuild assignments from the master grid.

    Venue columns are every column after Date/Day/Time; short headers are
    mapped back to configured venue names.
    """
    header_to_venue = {column: venue for venue, column in venue_columns(config).items()}
    venue_headers = [str(c) for c in df.columns[len(GRID_COLUMNS):]]

    assignments = []
    for index, row in df.iterrows():
        try:
            game_date = datetime.strptime(str(row['Date']).strip(), DATE_FORMAT).date()
            game_time = datetime.strptime(str(row['Time']).strip(), TIME_FORMAT).time()
        except ValueError:
            continue

        for header in venue_headers:
            away, home = parse_game_cell(str(row[header]))
            if not away or not home:
                continue
            sheet_row = index + 2
            assignments.append(Assignment(
                game=Game(home=home, away=away, label=f"Row {sheet_row}"),
                slot=Slot(date=game_date, time=game_time, venue=header_to_venue.get(header, header)),
            ))
    return assignments


def count_open_regular_cells(df: pd.DataFrame, config: SchedulerConfig) -> int:
    """Empty venue cells on or before the season end date."""
    open_cells = 0
    for _, row in df.iterrows():
        try:
            row_date = datetime.strptime(str(row['Date']).strip(), DATE_FORMAT).date()
        except ValueError:
            continue
        if row_date > config.season.end_date:
            continue
        open_cells += sum(1 for header in df.columns[len(GRID_COLUMNS):] if not str(row[header]).strip())
    return open_cells


def check_overflow_fit(df: pd.DataFrame, assignments: List[Assignment], config: SchedulerConfig) -> List[Violation]:
    """Warn when overflow games exist while regular-season cells are still open."""
    if config.season.overflow_end_date is None:
        return []
    overflow_games = sum(1 for a in assignments if config.is_overflow_date(a.slot.date))
    if not overflow_games:
        return []
    open_cells = count_open_regular_cells(df, config)
    if not open_cells:
        return []
    return [Violation(
        "warning",
        f"{overflow_games} game(s) in overflow period could potentially fit in "
        f"{open_cells} open regular-season slot(s)",
    )]


def check_completeness(assignments: List[Assignment], config: SchedulerConfig) -> List[Violation]:
    """Every configured team must have at least one game."""
    playing = set()
    for a in assignments:
        playing.update(a.game.teams)
    return [
        Violation("error", f"{team} has no games scheduled", (team,))
        for team in config.get_all_teams()
        if team not in playing
    ]


def validate(config: SchedulerConfig, path: str) -> List[Violation]:
    """
    Check a schedule workbook against the configured rules and guidelines.

    Args:
        config: Scheduler configuration
        path: Path to the schedule workbook

    Returns:
        List[Violation]: Errors (rule violations) and warnings (guidelines)
    """
    df = read_master_sheet(path)
    assignments = read_assignments(df, config)

    violations = []
    violations.extend(rules.hard_violations(assignments, config))
    violations.extend(rules.guideline_violations(assignments, config))
    violations.extend(check_overflow_fit(df, assignments, config))
    violations.extend(check_completeness(assignments, config))
    return violations
