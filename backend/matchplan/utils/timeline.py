"""
Venue timelines and the per-run scheduling session.

Each venue owns a start-sorted list of pairwise non-overlapping TimelineSlots.
A SchedulingSession bundles every venue timeline with the participant rest
tracker; one is created per scheduling run and never shared.
"""

from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from matchplan.services.scheduling_types import (
    MatchToSchedule,
    ScheduledMatch,
    TimelineSlot,
    Venue,
)
from matchplan.utils.rest_rules import RestStateTracker


def _intervals_overlap(
    a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime
) -> bool:
    """Check if [a_start, a_end) overlaps [b_start, b_end)."""
    return a_start < b_end and b_start < a_end


def find_next_available_slot(
    timeline: List[TimelineSlot],
    earliest_start: datetime,
    duration_minutes: int,
    window_end: datetime,
) -> Optional[Tuple[datetime, datetime]]:
    """
    Earliest interval of duration_minutes on a venue, or None.

    Scan order (chronological):
    1. Empty timeline: fits iff it ends by window_end
    2. Before the first booking
    3. Between consecutive bookings
    4. After the last booking, bounded by window_end
    """
    duration = timedelta(minutes=duration_minutes)

    if not timeline:
        end = earliest_start + duration
        if end <= window_end:
            return earliest_start, end
        return None

    first = timeline[0]
    before_first_end = earliest_start + duration
    if before_first_end <= first.start_time:
        return earliest_start, before_first_end

    for current, following in zip(timeline, timeline[1:]):
        gap_start = max(current.end_time, earliest_start)
        if following.start_time - gap_start >= duration:
            return gap_start, gap_start + duration

    last = timeline[-1]
    after_last_start = max(last.end_time, earliest_start)
    after_last_end = after_last_start + duration
    if after_last_end <= window_end:
        return after_last_start, after_last_end

    return None


def is_filling_gap(start: datetime, end: datetime, timeline: List[TimelineSlot]) -> bool:
    """True if [start, end) lies inside a gap between two consecutive bookings."""
    for current, following in zip(timeline, timeline[1:]):
        if start >= current.end_time and end <= following.start_time:
            return True
    return False


class SchedulingSession:
    """Mutable timeline state owned by exactly one scheduling run"""

    def __init__(self, venues: List[Venue], matches: Iterable[MatchToSchedule]):
        # dict preserves caller venue order, which breaks score ties
        self.venue_timelines: Dict[str, List[TimelineSlot]] = {venue.id: [] for venue in venues}
        self.rest_tracker = RestStateTracker(
            participant_id for match in matches for participant_id in match.participant_ids
        )

    @property
    def venue_ids(self) -> List[str]:
        return list(self.venue_timelines.keys())

    def timeline(self, venue_id: str) -> List[TimelineSlot]:
        return self.venue_timelines[venue_id]

    def book(self, venue_id: str, start_time: datetime, end_time: datetime, match_id: str) -> None:
        timeline = self.venue_timelines[venue_id]
        for slot in timeline:
            if _intervals_overlap(start_time, end_time, slot.start_time, slot.end_time):
                raise ValueError(
                    f"Match {match_id} overlaps match {slot.match_id} on venue {venue_id}"
                )
        timeline.append(TimelineSlot(start_time=start_time, end_time=end_time, match_id=match_id))
        timeline.sort(key=lambda s: s.start_time)

    def release(self, venue_id: str, match_id: str) -> None:
        timeline = self.venue_timelines[venue_id]
        for index, slot in enumerate(timeline):
            if slot.match_id == match_id:
                del timeline[index]
                return

    def commit(self, scheduled: ScheduledMatch) -> None:
        """Book the venue interval and move participants' free-from forward"""
        self.book(scheduled.venue_id, scheduled.scheduled_at, scheduled.end_time, scheduled.id)
        self.rest_tracker.update(scheduled.participant_ids, scheduled.end_time)

    def evict(self, scheduled: ScheduledMatch) -> None:
        """Remove a placed match; its participants become unconstrained"""
        self.release(scheduled.venue_id, scheduled.id)
        self.rest_tracker.reset(scheduled.participant_ids)
