"""
Scheduling passes, run in order by the engine for every attempt.
"""

from .saturdays import cover_saturdays, find_perfect_matching
from .sundays import balance_sundays
from .weekdays import fill_weekdays, displace
from .overflow import place_overflow

__all__ = [
    "cover_saturdays",
    "find_perfect_matching",
    "balance_sundays",
    "fill_weekdays",
    "displace",
    "place_overflow",
]
