from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import JSON, UniqueConstraint as SAUniqueConstraint
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from matchplan.models.schedule_run import ScheduleRun


class ScheduledMatchRecord(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("run_id", "match_id", name="uq_scheduled_match_run_match"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    run_id: int = Field(foreign_key="schedulerun.id")
    match_id: str
    phase: Optional[str] = None
    round: int
    venue_id: str
    scheduled_at: datetime
    end_time: datetime
    estimated_duration: int  # minutes
    preferred_venue_id: Optional[str] = None
    priority: Optional[int] = None
    placement_order: int  # position in the engine's output list

    # [{"id": ..., "name": ...}, ...] in match order
    participants: List[dict] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    # Relationships
    run: "ScheduleRun" = Relationship(back_populates="matches")
