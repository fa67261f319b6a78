"""
Single source of truth for scheduling capacity (venue-minutes).

capacity = window minutes × venue count

A batch asking for more than 90% of that capacity is flagged as tight.
Tightness is a warning, never an error.
"""
from dataclasses import dataclass
from typing import List

from matchplan.services.scheduling_types import MatchToSchedule, SchedulingConstraints, Venue

TIGHT_CAPACITY_RATIO = 0.9


@dataclass
class ResolvedCapacity:
    total_venue_minutes: float
    requested_minutes: int

    @property
    def load_ratio(self) -> float:
        if self.total_venue_minutes <= 0:
            return 0.0
        return self.requested_minutes / self.total_venue_minutes

    @property
    def is_tight(self) -> bool:
        return self.requested_minutes > self.total_venue_minutes * TIGHT_CAPACITY_RATIO

    def warning(self) -> str:
        return (
            f"Tight schedule: {self.requested_minutes}min needed, "
            f"{self.total_venue_minutes:g}min available"
        )


def available_venue_minutes(venues: List[Venue], constraints: SchedulingConstraints) -> float:
    return constraints.window_minutes * len(venues)


def resolve_capacity(
    matches: List[MatchToSchedule], venues: List[Venue], constraints: SchedulingConstraints
) -> ResolvedCapacity:
    return ResolvedCapacity(
        total_venue_minutes=available_venue_minutes(venues, constraints),
        requested_minutes=sum(m.estimated_duration for m in matches),
    )
