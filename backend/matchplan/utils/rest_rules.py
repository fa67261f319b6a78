"""
Rest Rules - Participant rest time enforcement for match placement

A participant's next match may not start before
    last_match_end + min_rest_time
Participants with no placed match impose no bound.

Only the end of the most recent match is tracked per participant, not a
full interval history.
"""

from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from matchplan.services.scheduling_types import MatchToSchedule, SchedulingConstraints

# ============================================================================
# Fatigue thresholds (used by slot scoring)
# ============================================================================

FATIGUE_HEAVY_HOURS = 2
FATIGUE_LIGHT_HOURS = 4
FATIGUE_HEAVY_LOAD = 3
FATIGUE_LIGHT_LOAD = 1


# ============================================================================
# Participant Rest State Tracking
# ============================================================================


class RestStateTracker:
    """Tracks the free-from instant of every participant during one run"""

    def __init__(self, participant_ids: Iterable[str] = ()):
        self.last_match_end: Dict[str, Optional[datetime]] = {}
        for participant_id in participant_ids:
            self.last_match_end.setdefault(participant_id, None)

    def get_last_match_end(self, participant_id: str) -> Optional[datetime]:
        return self.last_match_end.get(participant_id)

    def update(self, participant_ids: Iterable[str], end_time: datetime) -> None:
        """Move participants' free-from instant forward (never backward)"""
        for participant_id in participant_ids:
            current = self.last_match_end.get(participant_id)
            if current is None or end_time > current:
                self.last_match_end[participant_id] = end_time

    def reset(self, participant_ids: Iterable[str]) -> None:
        """Mark participants as unconstrained.

        This does not restore the state before their most recent match.
        """
        for participant_id in participant_ids:
            self.last_match_end[participant_id] = None

    def snapshot(self) -> Dict[str, Optional[datetime]]:
        return dict(self.last_match_end)

    def restore(self, snapshot: Dict[str, Optional[datetime]]) -> None:
        self.last_match_end = dict(snapshot)

    @property
    def participant_ids(self) -> List[str]:
        return list(self.last_match_end.keys())


# ============================================================================
# Rest Compatibility
# ============================================================================


def earliest_allowed_start(
    match: MatchToSchedule, rest_tracker: RestStateTracker, constraints: SchedulingConstraints
) -> datetime:
    """
    Earliest start for a match on any venue.

    Latest of:
    - the window start
    - last_match_end + min_rest_time for every participant with a prior match
    """
    earliest = constraints.start_time
    rest = timedelta(minutes=constraints.min_rest_time)

    for participant_id in match.participant_ids:
        last_end = rest_tracker.get_last_match_end(participant_id)
        if last_end is None:
            continue
        rest_end = last_end + rest
        if rest_end > earliest:
            earliest = rest_end

    return earliest


def participant_load_at(
    start_time: datetime, participant_ids: Iterable[str], rest_tracker: RestStateTracker
) -> int:
    """
    Fatigue load of a group of participants at start_time.

    Per participant: previous match ended < 2h ago -> 3, < 4h ago -> 1, else 0.
    """
    load = 0
    for participant_id in participant_ids:
        last_end = rest_tracker.get_last_match_end(participant_id)
        if last_end is None:
            continue
        hours_since = (start_time - last_end).total_seconds() / 3600
        if hours_since < FATIGUE_HEAVY_HOURS:
            load += FATIGUE_HEAVY_LOAD
        elif hours_since < FATIGUE_LIGHT_HOURS:
            load += FATIGUE_LIGHT_LOAD
    return load
