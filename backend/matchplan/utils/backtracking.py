"""
Backtracking repair for a match the greedy pass could not place.

For each already-placed match, most recent first:
1. Evict it (its participants become unconstrained)
2. Place the stuck match
3. Re-place the evicted match
4. Both placed → done
5. Otherwise undo the stuck match, put the evicted match back in its
   original slot, restore participant state, try the next-older match

Single swap only: at most one placed match moves per stuck match. The repair
never recurses, so depth stays at its default and MAX_BACKTRACK_DEPTH only
bites when a caller passes a deeper depth explicitly.
"""

import logging
from typing import List

from matchplan.services.scheduling_types import (
    MatchToSchedule,
    ScheduledMatch,
    SchedulingConstraints,
)
from matchplan.utils.auto_assign import place_match
from matchplan.utils.timeline import SchedulingSession

logger = logging.getLogger(__name__)

MAX_BACKTRACK_DEPTH = 5


def try_backtracking(
    current_match: MatchToSchedule,
    scheduled_matches: List[ScheduledMatch],
    session: SchedulingSession,
    constraints: SchedulingConstraints,
    depth: int = 0,
) -> bool:
    """
    Try to make room for current_match by moving one placed match.

    On success scheduled_matches gains current_match and the moved match
    is replaced in place with its new slot. On failure scheduled_matches
    and session are left exactly as they were.
    """
    if depth > MAX_BACKTRACK_DEPTH:
        logger.warning("Backtracking depth limit reached for match %s", current_match.id)
        return False

    for index in range(len(scheduled_matches) - 1, -1, -1):
        previous = scheduled_matches[index]
        rest_snapshot = session.rest_tracker.snapshot()

        session.evict(previous)

        placed_current = place_match(current_match, session, constraints)
        if placed_current is not None:
            placed_previous = place_match(previous.match, session, constraints)
            if placed_previous is not None:
                scheduled_matches[index] = placed_previous
                scheduled_matches.append(placed_current)
                logger.debug(
                    "Backtracking successful: moved match %s to make room for %s",
                    previous.id,
                    current_match.id,
                )
                return True

            session.release(placed_current.venue_id, placed_current.id)

        session.book(previous.venue_id, previous.scheduled_at, previous.end_time, previous.id)
        session.rest_tracker.restore(rest_snapshot)

    return False
