"""
Export functionality for writing schedules to Excel.
"""

import re
from typing import Dict, Sequence

import pandas as pd

from .config import SchedulerConfig
from .models import BlackoutSlot, Result, Slot, Weekday


MASTER_SHEET = "Master Schedule"
SUMMARY_SHEET = "Summary"
GRID_COLUMNS = ["Date", "Day", "Time"]
TEAM_COLUMNS = ["Date", "Day", "Time", "Venue", "Opponent", "Home/Away", "Game"]
DATE_FORMAT = "%m/%d/%Y"
TIME_FORMAT = "%H:%M"
GAME_SEPARATOR = " @ "


def venue_column_name(name: str, all_names: Sequence[str]) -> str:
    """Short column header: the first word of the venue name when that is unique."""
    first = name.split(" ")[0]
    if sum(1 for n in all_names if n.split(" ")[0] == first) > 1:
        return name
    return first


def venue_columns(config: SchedulerConfig) -> Dict[str, str]:
    """Map venue name -> master sheet column header."""
    names = config.venue_names()
    return {name: venue_column_name(name, names) for name in names}


def format_game(away: str, home: str) -> str:
    return f"{away}{GAME_SEPARATOR}{home}"


def sheet_name(team: str) -> str:
    """Excel-safe sheet name (31 chars, no []:*?/\\)."""
    return re.sub(r"[\[\]:*?/\\]", "_", team)[:31]


def team_sheet_names(teams: Sequence[str]) -> Dict[str, str]:
    """
    Map each team to a distinct sheet name.

    Excel compares sheet names case-insensitively, so a team whose cleaned
    name matches the master or summary sheet, or an earlier team sheet, gets
    a numbered suffix that still fits in 31 characters.
    """
    taken = {MASTER_SHEET.lower(), SUMMARY_SHEET.lower()}
    names = {}
    for team in teams:
        base = sheet_name(team)
        name = base
        n = 2
        while name.lower() in taken:
            suffix = f" ({n})"
            name = base[:31 - len(suffix)] + suffix
            n += 1
        taken.add(name.lower())
        names[team] = name
    return names


def write_excel(result: Result, config: SchedulerConfig, slots: Sequence[Slot],
                blackouts: Sequence[BlackoutSlot], output_path: str) -> None:
    """
    Write schedule to Excel file with a master grid, one sheet per team and
    a summary sheet.

    Args:
        result: Scheduling result (complete or partial)
        config: Scheduler configuration
        slots: Every usable slot, regular and overflow
        blackouts: Blacked-out slots with reasons
        output_path: Path to output Excel file
    """
    with pd.ExcelWriter(output_path, engine='xlsxwriter') as writer:
        _write_master_schedule(result, config, slots, blackouts, writer)
        _write_team_sheets(result, config, writer)
        _write_summary(result, writer)


def master_dataframe(result: Result, config: SchedulerConfig, slots: Sequence[Slot],
                     blackouts: Sequence[BlackoutSlot]) -> pd.DataFrame:
    """One row per (date, time) with a game or blackout reason per venue column."""
    columns = venue_columns(config)

    games = {a.slot: format_game(a.game.away, a.game.home) for a in result.assignments}
    reasons = {(b.date, b.time, b.venue): b.reason for b in blackouts}

    timeslots = sorted({s.timeslot for s in slots} | {(b.date, b.time) for b in blackouts}
                       | {a.slot.timeslot for a in result.assignments})

    rows = []
    for d, t in timeslots:
        row = {
            'Date': d.strftime(DATE_FORMAT),
            'Day': Weekday.from_date(d).value,
            'Time': t.strftime(TIME_FORMAT),
        }
        for venue, column in columns.items():
            slot = Slot(date=d, time=t, venue=venue)
            if slot in games:
                row[column] = games[slot]
            else:
                row[column] = reasons.get((d, t, venue), "")
        rows.append(row)

    return pd.DataFrame(rows, columns=GRID_COLUMNS + list(columns.values()))


def _write_master_schedule(result: Result, config: SchedulerConfig, slots: Sequence[Slot],
                           blackouts: Sequence[BlackoutSlot], writer) -> None:
    """Write the main schedule grid."""
    df = master_dataframe(result, config, slots, blackouts)
    df.to_excel(writer, sheet_name=MASTER_SHEET, index=False)

    worksheet = writer.sheets[MASTER_SHEET]
    workbook = writer.book
    _format_header(worksheet, workbook, df)

    worksheet.set_column(0, 0, 14)
    worksheet.set_column(1, 1, 6)
    worksheet.set_column(2, 2, 8)
    worksheet.set_column(3, len(df.columns) - 1, 30)
    worksheet.freeze_panes(1, 3)

    # Shade non-game text (blackout and reservation reasons)
    if len(df) and len(df.columns) > 3:
        blocked_format = workbook.add_format({'bg_color': '#FFC7CE'})
        worksheet.conditional_format(1, 3, len(df), len(df.columns) - 1, {
            'type': 'formula',
            'criteria': f'=AND(D2<>"",ISERROR(FIND("{GAME_SEPARATOR}",D2)))',
            'format': blocked_format,
        })


def team_dataframe(result: Result, config: SchedulerConfig, team: str) -> pd.DataFrame:
    """A team's own schedule, in date order."""
    columns = venue_columns(config)
    rows = []
    for a in result.games_for_team(team):
        home = a.game.home == team
        rows.append({
            'Date': a.slot.date.strftime(DATE_FORMAT),
            'Day': a.slot.weekday.value,
            'Time': a.slot.time.strftime(TIME_FORMAT),
            'Venue': columns.get(a.slot.venue, a.slot.venue),
            'Opponent': a.game.away if home else a.game.home,
            'Home/Away': "Home" if home else "Away",
            'Game': a.game.label,
        })
    return pd.DataFrame(rows, columns=TEAM_COLUMNS)


def _write_team_sheets(result: Result, config: SchedulerConfig, writer) -> None:
    """Write one filtered sheet per team."""
    for team, name in team_sheet_names(list(result.team_metrics)).items():
        df = team_dataframe(result, config, team)
        df.to_excel(writer, sheet_name=name, index=False)

        worksheet = writer.sheets[name]
        _format_header(worksheet, writer.book, df)
        widths = [14, 6, 8, 28, 16, 12, 12]
        for i, width in enumerate(widths):
            worksheet.set_column(i, i, width)
        if df.empty:
            worksheet.write(1, 0, "No games scheduled")


def _write_summary(result: Result, writer) -> None:
    """Write per-team metrics followed by the warning list."""
    metrics = pd.DataFrame([
        {
            'Team': team,
            'Games': m.games,
            'Saturday': m.saturday,
            'Sunday': m.sunday,
            'Violations': len(m.violations),
        }
        for team, m in result.team_metrics.items()
    ], columns=['Team', 'Games', 'Saturday', 'Sunday', 'Violations'])
    metrics.to_excel(writer, sheet_name=SUMMARY_SHEET, index=False)

    worksheet = writer.sheets[SUMMARY_SHEET]
    _format_header(worksheet, writer.book, metrics)
    worksheet.set_column(0, 0, 18)

    row = len(metrics) + 2
    worksheet.write(row, 0, f"Placed {result.placed} of {result.required} games")
    if result.unplaced:
        row += 1
        worksheet.write(row, 0, "Unplaced: " + ", ".join(str(g) for g in result.unplaced))

    row += 2
    worksheet.write(row, 0, f"Guideline warnings ({len(result.warnings)})")
    for i, warning in enumerate(result.warnings, start=1):
        worksheet.write(row + i, 0, warning)


def _format_header(worksheet, workbook, df: pd.DataFrame) -> None:
    """Apply the header style used on every sheet."""
    header_format = workbook.add_format({
        'bold': True,
        'font_color': '#FFFFFF',
        'fg_color': '#4472C4',
        'align': 'center',
        'border': 1
    })
    for col_num, value in enumerate(df.columns.values):
        worksheet.write(0, col_num, value, header_format)

