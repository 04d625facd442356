"""
Overflow pass: last-resort placement after the regular season ends.
"""

import logging
from typing import List, Sequence

from ..models import Game, Slot
from ..state import ScheduleState

logger = logging.getLogger(__name__)


def place_overflow(state: ScheduleState, pending: List[Game], overflow_slots: Sequence[Slot]) -> List[Game]:
    """
    Put each pending game into the earliest legal overflow slot.

    Returns:
        List[Game]: Games that still could not be placed
    """
    if not overflow_slots:
        return list(pending)

    unplaced = []
    for game in pending:
        for slot in overflow_slots:
            if state.can_place(game, slot):
                state.assign(game, slot)
                logger.debug("Placed %s in overflow slot %s", game, slot)
                break
        else:
            unplaced.append(game)
    return unplaced
