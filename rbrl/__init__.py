"""
League Scheduler - assigns a season's games to dated, timed venue slots.
"""

__version__ = "0.1.0"

from .config import SchedulerConfig, load_config
from .models import Slot, Game, Assignment, Result
from .engine import schedule, IncompleteScheduleError
from .export import write_excel
from .validator import validate

__all__ = [
    "SchedulerConfig",
    "load_config",
    "Slot",
    "Game",
    "Assignment",
    "Result",
    "schedule",
    "IncompleteScheduleError",
    "write_excel",
    "validate",
]
