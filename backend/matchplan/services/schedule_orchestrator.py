"""
Schedule Orchestrator Service - greedy placement with backtracking repair

Pipeline:
1. Validate inputs (fail fast, nothing mutated)
2. Open a fresh SchedulingSession (venue timelines + participant rest state)
3. Sort matches by priority
4. Greedy placement, falling back to backtracking repair per stuck match
5. Compute metrics

All-or-nothing: if one match cannot be placed the run raises
UnschedulableMatchError and no partial schedule is returned.

The orchestrator keeps no per-run state, so a single instance may serve
concurrent callers.
"""

import logging
from collections import Counter
from typing import List

from matchplan.services.capacity_resolver import resolve_capacity
from matchplan.services.schedule_metrics import evaluate_schedule_quality
from matchplan.services.scheduling_errors import (
    DuplicateMatchIdError,
    EmptyInputError,
    InvalidWindowError,
    NoVenuesError,
    UnschedulableMatchError,
)
from matchplan.services.scheduling_types import (
    MatchToSchedule,
    ScheduledMatch,
    SchedulingConstraints,
    SchedulingResult,
    Venue,
)
from matchplan.utils.auto_assign import place_match
from matchplan.utils.backtracking import try_backtracking
from matchplan.utils.match_priority import sort_matches_by_priority
from matchplan.utils.timeline import SchedulingSession

logger = logging.getLogger(__name__)


def validate_inputs(
    matches: List[MatchToSchedule], venues: List[Venue], constraints: SchedulingConstraints
) -> List[str]:
    """
    Hard checks raise; soft checks come back as warnings.

    Raises:
        EmptyInputError: no matches
        NoVenuesError: no venues
        InvalidWindowError: start_time >= end_time, or only one bound carries a timezone
        DuplicateMatchIdError: two matches share an id
    """
    if not matches:
        raise EmptyInputError()

    if not venues:
        raise NoVenuesError()

    if (constraints.start_time.tzinfo is None) != (constraints.end_time.tzinfo is None):
        raise InvalidWindowError(
            "Invalid time window: start_time and end_time must both be timezone-aware or both naive"
        )

    if constraints.start_time >= constraints.end_time:
        raise InvalidWindowError()

    id_counts = Counter(m.id for m in matches)
    duplicates = [match_id for match_id, count in id_counts.items() if count > 1]
    if duplicates:
        raise DuplicateMatchIdError(duplicates)

    warnings: List[str] = []
    capacity = resolve_capacity(matches, venues, constraints)
    if capacity.is_tight:
        logger.warning(capacity.warning())
        warnings.append(capacity.warning())

    return warnings


class MatchScheduler:
    """Greedy + backtracking match scheduler."""

    def schedule(
        self,
        matches: List[MatchToSchedule],
        venues: List[Venue],
        constraints: SchedulingConstraints,
    ) -> SchedulingResult:
        logger.info(
            "Starting scheduling for %s matches across %s venues",
            len(matches),
            len(venues),
        )

        warnings = validate_inputs(matches, venues, constraints)

        session = SchedulingSession(venues, matches)
        scheduled_matches: List[ScheduledMatch] = []

        for match in sort_matches_by_priority(matches):
            scheduled = place_match(match, session, constraints)
            if scheduled is not None:
                scheduled_matches.append(scheduled)
                continue

            logger.warning("No slot found for match %s, attempting backtracking...", match.id)
            if not try_backtracking(match, scheduled_matches, session, constraints):
                logger.error("Impossible to schedule match %s", match.id)
                raise UnschedulableMatchError(match.id)

        metrics = evaluate_schedule_quality(
            scheduled_matches, venues, constraints, session.rest_tracker.participant_ids
        )

        logger.info("Scheduling completed. Quality score: %.2f", metrics.quality_score)

        return SchedulingResult(
            scheduled_matches=scheduled_matches,
            metrics=metrics,
            warnings=warnings,
        )


def schedule_matches(
    matches: List[MatchToSchedule],
    venues: List[Venue],
    constraints: SchedulingConstraints,
) -> SchedulingResult:
    return MatchScheduler().schedule(matches, venues, constraints)
