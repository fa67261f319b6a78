"""
Match priority ordering for greedy placement.

Order: phase importance (desc) → round (desc) → explicit priority (desc)

Later rounds go first: they sit closest to the event's climax and are the
most constrained. The sort is stable, so equal keys keep input order.
"""

from typing import List, Optional, Tuple

from matchplan.services.scheduling_types import MatchToSchedule

# Phase importance (case-insensitive labels, unknown = 0)
PHASE_IMPORTANCE = {
    "finals": 100,
    "semi-finals": 90,
    "semis": 90,
    "quarter-finals": 80,
    "quarters": 80,
    "playoffs": 70,
    "group-stage": 50,
    "groups": 50,
    "qualifier": 30,
}

UNKNOWN_PHASE_IMPORTANCE = 0


def phase_importance(phase: Optional[str]) -> int:
    """Importance score of a phase label; higher is scheduled first."""
    if not phase:
        return UNKNOWN_PHASE_IMPORTANCE
    return PHASE_IMPORTANCE.get(phase.strip().lower(), UNKNOWN_PHASE_IMPORTANCE)


def get_match_sort_key(match: MatchToSchedule) -> Tuple[int, int, int]:
    return (
        -phase_importance(match.phase),
        -match.round,
        -(match.priority or 0),
    )


def sort_matches_by_priority(matches: List[MatchToSchedule]) -> List[MatchToSchedule]:
    return sorted(matches, key=get_match_sort_key)
