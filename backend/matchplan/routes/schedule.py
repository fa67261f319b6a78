"""
Schedule endpoints — run the match scheduler over HTTP.

  POST /schedule                          compute only, nothing stored
  POST /schedule-runs                     compute and store the run
  GET  /schedule-runs/{run_id}            stored run with its matches
  GET  /schedule-runs/{run_id}/quality-report
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from sqlmodel import Session

from matchplan.database import get_session
from matchplan.models.schedule_run import ScheduleRun
from matchplan.services.schedule_orchestrator import MatchScheduler
from matchplan.services.schedule_quality_report import generate_quality_report
from matchplan.services.schedule_store import get_run_records, rebuild_schedule, save_schedule_run
from matchplan.services.scheduling_errors import SchedulingValidationError, UnschedulableMatchError
from matchplan.services.scheduling_types import (
    MatchToSchedule,
    Participant,
    SchedulingConstraints,
    SchedulingResult,
    TimeWindow,
    Venue,
    assume_utc,
)

logger = logging.getLogger(__name__)

router = APIRouter()

scheduler = MatchScheduler()


# ============================================================================
# Request Models
# ============================================================================


class ParticipantIn(BaseModel):
    id: str
    name: str = ""


class VenueIn(BaseModel):
    id: str
    name: str
    capacity: Optional[int] = Field(default=None, ge=0)


class MatchIn(BaseModel):
    id: str
    phase: Optional[str] = None
    round: int = 1
    participants: List[ParticipantIn] = Field(..., min_length=1)
    estimated_duration: int = Field(..., gt=0, description="Minutes")
    dependencies: List[str] = Field(default_factory=list)
    preferred_venue_id: Optional[str] = None
    priority: Optional[int] = None


class TimeWindowIn(BaseModel):
    start_time: datetime
    end_time: datetime


class ConstraintsIn(BaseModel):
    min_rest_time: int = Field(..., ge=0, description="Minutes")
    start_time: datetime
    end_time: datetime
    participant_availability: Dict[str, List[TimeWindowIn]] = Field(default_factory=dict)


class ScheduleRequest(BaseModel):
    matches: List[MatchIn]
    venues: List[VenueIn]
    constraints: ConstraintsIn

    def to_engine(self) -> Tuple[List[MatchToSchedule], List[Venue], SchedulingConstraints]:
        """Engine inputs; naive timestamps are taken as UTC."""
        matches = [
            MatchToSchedule(
                id=m.id,
                phase=m.phase,
                round=m.round,
                participants=[Participant(id=p.id, name=p.name) for p in m.participants],
                estimated_duration=m.estimated_duration,
                dependencies=list(m.dependencies),
                preferred_venue_id=m.preferred_venue_id,
                priority=m.priority,
            )
            for m in self.matches
        ]
        venues = [Venue(id=v.id, name=v.name, capacity=v.capacity) for v in self.venues]
        c = self.constraints
        constraints = SchedulingConstraints(
            min_rest_time=c.min_rest_time,
            start_time=assume_utc(c.start_time),
            end_time=assume_utc(c.end_time),
            participant_availability={
                pid: [
                    TimeWindow(start_time=assume_utc(w.start_time), end_time=assume_utc(w.end_time))
                    for w in windows
                ]
                for pid, windows in c.participant_availability.items()
            },
        )
        return matches, venues, constraints


class ScheduleRunRequest(ScheduleRequest):
    tournament_id: Optional[str] = None
    label: Optional[str] = None


# ============================================================================
# Response Models
# ============================================================================


class ScheduledMatchOut(BaseModel):
    id: str
    phase: Optional[str]
    round: int
    participants: List[ParticipantIn]
    estimated_duration: int
    venue_id: str
    scheduled_at: datetime
    end_time: datetime
    preferred_venue_id: Optional[str] = None
    priority: Optional[int] = None


class MetricsOut(BaseModel):
    venue_utilization: float
    average_rest_time: float
    peak_load_time: datetime
    constraint_violations: int
    quality_score: float


class ScheduleResponse(BaseModel):
    scheduled_matches: List[ScheduledMatchOut]
    metrics: MetricsOut
    warnings: List[str]


class ScheduleRunResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tournament_id: Optional[str]
    label: Optional[str]
    created_at: datetime
    window_start: datetime
    window_end: datetime
    min_rest_time: int
    venue_ids: List[str]
    metrics: MetricsOut
    warnings: List[str]
    scheduled_matches: List[ScheduledMatchOut]


# ============================================================================
# Helpers
# ============================================================================


def _run_scheduler(
    request: ScheduleRequest,
) -> Tuple[SchedulingResult, List[Venue], SchedulingConstraints]:
    """Run the engine, translating scheduling errors to HTTP errors."""
    matches, venues, constraints = request.to_engine()
    try:
        result = scheduler.schedule(matches, venues, constraints)
    except SchedulingValidationError as e:
        raise HTTPException(status_code=400, detail=e.to_dict())
    except UnschedulableMatchError as e:
        raise HTTPException(status_code=422, detail=e.to_dict())
    return result, venues, constraints


def _build_schedule_response(result: SchedulingResult) -> ScheduleResponse:
    return ScheduleResponse(
        scheduled_matches=[ScheduledMatchOut(**m.to_dict()) for m in result.scheduled_matches],
        metrics=MetricsOut(**result.metrics.to_dict()),
        warnings=result.warnings,
    )


def _build_run_response(session: Session, run: ScheduleRun) -> ScheduleRunResponse:
    records = get_run_records(session, run.id)
    return ScheduleRunResponse(
        id=run.id,
        tournament_id=run.tournament_id,
        label=run.label,
        created_at=assume_utc(run.created_at),
        window_start=assume_utc(run.window_start),
        window_end=assume_utc(run.window_end),
        min_rest_time=run.min_rest_time,
        venue_ids=run.venue_ids,
        metrics=MetricsOut(
            venue_utilization=run.venue_utilization,
            average_rest_time=run.average_rest_time,
            peak_load_time=assume_utc(run.peak_load_time),
            constraint_violations=run.constraint_violations,
            quality_score=run.quality_score,
        ),
        warnings=run.warnings,
        scheduled_matches=[
            ScheduledMatchOut(
                id=r.match_id,
                phase=r.phase,
                round=r.round,
                participants=[ParticipantIn(**p) for p in r.participants],
                estimated_duration=r.estimated_duration,
                venue_id=r.venue_id,
                scheduled_at=assume_utc(r.scheduled_at),
                end_time=assume_utc(r.end_time),
                preferred_venue_id=r.preferred_venue_id,
                priority=r.priority,
            )
            for r in records
        ],
    )


def _get_run_or_404(session: Session, run_id: int) -> ScheduleRun:
    run = session.get(ScheduleRun, run_id)
    if not run:
        raise HTTPException(status_code=404, detail=f"Schedule run {run_id} not found")
    return run


# ============================================================================
# Endpoints
# ============================================================================


@router.post("/schedule", response_model=ScheduleResponse)
def compute_schedule(request: ScheduleRequest) -> ScheduleResponse:
    """Compute a schedule without storing it."""
    result, _, _ = _run_scheduler(request)
    return _build_schedule_response(result)


@router.post("/schedule-runs", response_model=ScheduleRunResponse, status_code=201)
def create_schedule_run(request: ScheduleRunRequest, session: Session = Depends(get_session)):
    """Compute a schedule and store it as a run. Nothing is stored on failure."""
    result, venues, constraints = _run_scheduler(request)
    run = save_schedule_run(
        session,
        result,
        venues,
        constraints,
        tournament_id=request.tournament_id,
        label=request.label,
    )
    return _build_run_response(session, run)


@router.get("/schedule-runs/{run_id}", response_model=ScheduleRunResponse)
def get_schedule_run(run_id: int, session: Session = Depends(get_session)):
    run = _get_run_or_404(session, run_id)
    return _build_run_response(session, run)


@router.get("/schedule-runs/{run_id}/quality-report")
def get_schedule_run_quality_report(run_id: int, session: Session = Depends(get_session)) -> Dict[str, Any]:
    """
    Audit a stored run: completeness, venue exclusivity, window containment
    and participant rest compliance.
    """
    run = _get_run_or_404(session, run_id)
    scheduled, venues, constraints = rebuild_schedule(run, get_run_records(session, run_id))
    report = generate_quality_report(scheduled, venues, constraints)

    logger.info(
        "QUALITY_REPORT: run_id=%s overall_passed=%s",
        run_id,
        report.overall_passed,
    )

    result = report.to_dict()
    result["run_id"] = run_id
    return result
