"""
Scheduling Types — input, working and output shapes of the match scheduler.

Inputs (caller-owned, never mutated):
- Venue, Participant, MatchToSchedule, SchedulingConstraints

Working state (one scheduling run only):
- TimelineSlot, SlotCandidate

Outputs:
- ScheduledMatch, ScheduleMetrics, SchedulingResult
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional


def assume_utc(value: datetime) -> datetime:
    """Naive timestamps are read as UTC; aware ones keep their offset."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_utc(value: datetime) -> datetime:
    return assume_utc(value).astimezone(timezone.utc)


@dataclass(frozen=True)
class Participant:
    id: str
    name: str = ""


@dataclass(frozen=True)
class Venue:
    """A bookable resource (arena, court, server) hosting one match at a time."""
    id: str
    name: str
    capacity: Optional[int] = None


@dataclass(frozen=True)
class TimeWindow:
    start_time: datetime
    end_time: datetime


@dataclass(frozen=True)
class MatchToSchedule:
    """A match waiting for a venue and a start time.

    dependencies are informational only: the scheduler does not order
    matches by them.
    """
    id: str
    round: int
    participants: List[Participant]
    estimated_duration: int  # minutes
    phase: Optional[str] = None
    dependencies: List[str] = field(default_factory=list)
    preferred_venue_id: Optional[str] = None
    priority: Optional[int] = None

    @property
    def participant_ids(self) -> List[str]:
        return [p.id for p in self.participants]


@dataclass(frozen=True)
class SchedulingConstraints:
    min_rest_time: int  # minutes
    start_time: datetime
    end_time: datetime
    # Accepted and carried through; not consulted by placement yet.
    participant_availability: Dict[str, List[TimeWindow]] = field(default_factory=dict)

    @property
    def window_minutes(self) -> float:
        return (self.end_time - self.start_time).total_seconds() / 60


@dataclass(frozen=True)
class TimelineSlot:
    """A booked [start_time, end_time) interval on one venue."""
    start_time: datetime
    end_time: datetime
    match_id: str


@dataclass(frozen=True)
class SlotCandidate:
    venue_id: str
    start_time: datetime
    end_time: datetime
    score: int


@dataclass(frozen=True)
class ScheduledMatch:
    match: MatchToSchedule
    venue_id: str
    scheduled_at: datetime
    end_time: datetime

    @classmethod
    def from_candidate(cls, match: MatchToSchedule, candidate: SlotCandidate) -> "ScheduledMatch":
        return cls(
            match=match,
            venue_id=candidate.venue_id,
            scheduled_at=candidate.start_time,
            end_time=candidate.start_time + timedelta(minutes=match.estimated_duration),
        )

    @property
    def id(self) -> str:
        return self.match.id

    @property
    def participant_ids(self) -> List[str]:
        return self.match.participant_ids

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.match.id,
            "phase": self.match.phase,
            "round": self.match.round,
            "participants": [{"id": p.id, "name": p.name} for p in self.match.participants],
            "estimated_duration": self.match.estimated_duration,
            "dependencies": list(self.match.dependencies),
            "preferred_venue_id": self.match.preferred_venue_id,
            "priority": self.match.priority,
            "venue_id": self.venue_id,
            "scheduled_at": self.scheduled_at.isoformat(),
            "end_time": self.end_time.isoformat(),
        }


@dataclass(frozen=True)
class ScheduleMetrics:
    venue_utilization: float  # 0-1
    average_rest_time: float  # minutes
    peak_load_time: datetime
    constraint_violations: int
    quality_score: float  # 0-1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "venue_utilization": self.venue_utilization,
            "average_rest_time": self.average_rest_time,
            "peak_load_time": self.peak_load_time.isoformat(),
            "constraint_violations": self.constraint_violations,
            "quality_score": self.quality_score,
        }


@dataclass
class SchedulingResult:
    scheduled_matches: List[ScheduledMatch]
    metrics: ScheduleMetrics
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scheduled_matches": [m.to_dict() for m in self.scheduled_matches],
            "metrics": self.metrics.to_dict(),
            "warnings": list(self.warnings),
        }
