"""
Auto-Assign: greedy best-slot placement of one match

For each venue (caller order) the earliest feasible interval is found and
scored; the highest score wins. Ties go to the first venue encountered.
No randomness.
"""

import logging
from typing import Optional

from matchplan.services.scheduling_types import (
    MatchToSchedule,
    ScheduledMatch,
    SchedulingConstraints,
    SlotCandidate,
)
from matchplan.utils.rest_rules import earliest_allowed_start
from matchplan.utils.slot_scoring import calculate_slot_score
from matchplan.utils.timeline import SchedulingSession, find_next_available_slot

logger = logging.getLogger(__name__)


def find_best_time_slot(
    match: MatchToSchedule,
    session: SchedulingSession,
    constraints: SchedulingConstraints,
) -> Optional[SlotCandidate]:
    """
    Best candidate for a match across all venues, or None if no venue fits.

    The earliest allowed start is computed once per match and shared by
    every venue.
    """
    min_start = earliest_allowed_start(match, session.rest_tracker, constraints)

    best: Optional[SlotCandidate] = None
    for venue_id in session.venue_ids:
        interval = find_next_available_slot(
            session.timeline(venue_id),
            min_start,
            match.estimated_duration,
            constraints.end_time,
        )
        if interval is None:
            continue

        start, end = interval
        score = calculate_slot_score(start, end, match, venue_id, session)
        if best is None or score > best.score:
            best = SlotCandidate(venue_id=venue_id, start_time=start, end_time=end, score=score)

    return best


def place_match(
    match: MatchToSchedule,
    session: SchedulingSession,
    constraints: SchedulingConstraints,
) -> Optional[ScheduledMatch]:
    """Find the best slot and commit it to the session. None if nothing fits."""
    candidate = find_best_time_slot(match, session, constraints)
    if candidate is None:
        return None

    scheduled = ScheduledMatch.from_candidate(match, candidate)
    session.commit(scheduled)

    logger.debug(
        "Scheduled match %s at %s on venue %s (score=%s)",
        match.id,
        scheduled.scheduled_at.isoformat(),
        scheduled.venue_id,
        candidate.score,
    )
    return scheduled
