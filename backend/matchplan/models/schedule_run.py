from datetime import datetime, timezone
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import JSON
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from matchplan.models.scheduled_match_record import ScheduledMatchRecord


class ScheduleRun(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: Optional[str] = Field(default=None, index=True)
    label: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Constraints the run was computed under
    window_start: datetime
    window_end: datetime
    min_rest_time: int
    venue_ids: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    # Metrics snapshot
    venue_utilization: float
    average_rest_time: float
    peak_load_time: datetime
    constraint_violations: int = Field(default=0)
    quality_score: float
    warnings: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    # Relationships
    matches: List["ScheduledMatchRecord"] = Relationship(back_populates="run")
