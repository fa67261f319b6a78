"""
Schedule metrics — aggregate quality of a completed schedule.

- Venue utilization: booked minutes / (venues × window minutes)
- Average rest: mean gap between consecutive matches of each participant
- Peak load time: start of the first scheduled match (simplification)
- Constraint violations: always 0 (a successful run cannot contain one)
- Quality score: 0.3 utilization + 0.3 rest adequacy + 0.2 + 0.2 compliance
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from matchplan.services.capacity_resolver import available_venue_minutes
from matchplan.services.scheduling_types import (
    ScheduledMatch,
    ScheduleMetrics,
    SchedulingConstraints,
    Venue,
)

UTILIZATION_WEIGHT = 0.3
REST_WEIGHT = 0.3
PEAK_LOAD_WEIGHT = 0.2  # fixed; peak load is not measured yet
COMPLIANCE_WEIGHT = 0.2


def _matches_by_participant(
    scheduled_matches: List[ScheduledMatch],
) -> Dict[str, List[ScheduledMatch]]:
    by_participant: Dict[str, List[ScheduledMatch]] = defaultdict(list)
    for scheduled in scheduled_matches:
        for participant_id in scheduled.participant_ids:
            by_participant[participant_id].append(scheduled)
    for matches in by_participant.values():
        matches.sort(key=lambda m: m.scheduled_at)
    return by_participant


def average_rest_time(
    scheduled_matches: List[ScheduledMatch],
    participant_ids: Optional[Iterable[str]] = None,
) -> float:
    """Mean rest in minutes; participants with fewer than two matches add nothing."""
    by_participant = _matches_by_participant(scheduled_matches)
    if participant_ids is None:
        participant_ids = by_participant.keys()

    total_rest = 0.0
    rest_count = 0
    for participant_id in participant_ids:
        matches = by_participant.get(participant_id, [])
        for current, following in zip(matches, matches[1:]):
            total_rest += (following.scheduled_at - current.end_time).total_seconds() / 60
            rest_count += 1

    return total_rest / rest_count if rest_count > 0 else 0.0


def evaluate_schedule_quality(
    scheduled_matches: List[ScheduledMatch],
    venues: List[Venue],
    constraints: SchedulingConstraints,
    participant_ids: Optional[Iterable[str]] = None,
) -> ScheduleMetrics:
    total_duration = sum(m.match.estimated_duration for m in scheduled_matches)
    capacity = available_venue_minutes(venues, constraints)
    venue_utilization = total_duration / capacity if capacity > 0 else 0.0

    avg_rest = average_rest_time(scheduled_matches, participant_ids)

    peak_load_time = scheduled_matches[0].scheduled_at if scheduled_matches else constraints.start_time

    constraint_violations = 0

    if constraints.min_rest_time > 0:
        rest_adequacy = min(avg_rest / constraints.min_rest_time, 1.0)
    else:
        rest_adequacy = 1.0

    quality_score = (
        venue_utilization * UTILIZATION_WEIGHT
        + rest_adequacy * REST_WEIGHT
        + PEAK_LOAD_WEIGHT
        + (1 - constraint_violations) * COMPLIANCE_WEIGHT
    )

    return ScheduleMetrics(
        venue_utilization=venue_utilization,
        average_rest_time=avg_rest,
        peak_load_time=peak_load_time,
        constraint_violations=constraint_violations,
        quality_score=quality_score,
    )
