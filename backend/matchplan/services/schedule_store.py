"""
Schedule Store — persists completed scheduling runs.

The engine never touches the database; this module writes a finished
SchedulingResult after the fact and rebuilds engine shapes from stored rows.
Timestamps are stored in UTC; the database may hand them back naive.
"""

import logging
from typing import List, Optional, Tuple

from sqlmodel import Session, select

from matchplan.models.schedule_run import ScheduleRun
from matchplan.models.scheduled_match_record import ScheduledMatchRecord
from matchplan.services.scheduling_types import (
    MatchToSchedule,
    Participant,
    ScheduledMatch,
    SchedulingConstraints,
    SchedulingResult,
    Venue,
    assume_utc,
    to_utc,
)

logger = logging.getLogger(__name__)


def save_schedule_run(
    session: Session,
    result: SchedulingResult,
    venues: List[Venue],
    constraints: SchedulingConstraints,
    tournament_id: Optional[str] = None,
    label: Optional[str] = None,
) -> ScheduleRun:
    """Store a run and its scheduled matches in one transaction."""
    metrics = result.metrics
    run = ScheduleRun(
        tournament_id=tournament_id,
        label=label,
        window_start=to_utc(constraints.start_time),
        window_end=to_utc(constraints.end_time),
        min_rest_time=constraints.min_rest_time,
        venue_ids=[v.id for v in venues],
        venue_utilization=metrics.venue_utilization,
        average_rest_time=metrics.average_rest_time,
        peak_load_time=to_utc(metrics.peak_load_time),
        constraint_violations=metrics.constraint_violations,
        quality_score=metrics.quality_score,
        warnings=list(result.warnings),
    )
    session.add(run)
    session.flush()

    for order, scheduled in enumerate(result.scheduled_matches):
        match = scheduled.match
        session.add(
            ScheduledMatchRecord(
                run_id=run.id,
                match_id=match.id,
                phase=match.phase,
                round=match.round,
                venue_id=scheduled.venue_id,
                scheduled_at=to_utc(scheduled.scheduled_at),
                end_time=to_utc(scheduled.end_time),
                estimated_duration=match.estimated_duration,
                preferred_venue_id=match.preferred_venue_id,
                priority=match.priority,
                placement_order=order,
                participants=[{"id": p.id, "name": p.name} for p in match.participants],
            )
        )

    session.commit()
    session.refresh(run)

    logger.info(
        "Stored schedule run %s: %s matches, quality %.2f",
        run.id,
        len(result.scheduled_matches),
        metrics.quality_score,
    )
    return run


def get_run_records(session: Session, run_id: int) -> List[ScheduledMatchRecord]:
    return list(
        session.exec(
            select(ScheduledMatchRecord)
            .where(ScheduledMatchRecord.run_id == run_id)
            .order_by(ScheduledMatchRecord.placement_order)
        ).all()
    )


def rebuild_schedule(
    run: ScheduleRun, records: List[ScheduledMatchRecord]
) -> Tuple[List[ScheduledMatch], List[Venue], SchedulingConstraints]:
    """Engine-shaped view of a stored run (for auditing)."""
    scheduled = [
        ScheduledMatch(
            match=MatchToSchedule(
                id=r.match_id,
                phase=r.phase,
                round=r.round,
                participants=[Participant(id=p["id"], name=p.get("name", "")) for p in r.participants],
                estimated_duration=r.estimated_duration,
                preferred_venue_id=r.preferred_venue_id,
                priority=r.priority,
            ),
            venue_id=r.venue_id,
            scheduled_at=assume_utc(r.scheduled_at),
            end_time=assume_utc(r.end_time),
        )
        for r in records
    ]
    venues = [Venue(id=venue_id, name=venue_id) for venue_id in run.venue_ids]
    constraints = SchedulingConstraints(
        min_rest_time=run.min_rest_time,
        start_time=assume_utc(run.window_start),
        end_time=assume_utc(run.window_end),
    )
    return scheduled, venues, constraints
