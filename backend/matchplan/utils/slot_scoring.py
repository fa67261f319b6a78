"""
Slot scoring heuristic.

Additive terms for a (venue, start, end) candidate:
- Peak hours: start hour 10-18 → +100, 8-20 → +50
- Gap filling: inside a gap between two bookings → +200
- Fatigue: minus the participants' load (3 if < 2h rest, 1 if < 4h)
- Preferred venue → +50
- Explicit priority → +10 × priority
"""

from datetime import datetime

from matchplan.services.scheduling_types import MatchToSchedule
from matchplan.utils.rest_rules import participant_load_at
from matchplan.utils.timeline import SchedulingSession, is_filling_gap

PEAK_HOURS = (10, 18)
SHOULDER_HOURS = (8, 20)

PEAK_HOUR_BONUS = 100
SHOULDER_HOUR_BONUS = 50
GAP_FILL_BONUS = 200
PREFERRED_VENUE_BONUS = 50
PRIORITY_WEIGHT = 10


def peak_hour_bonus(start_time: datetime) -> int:
    hour = start_time.hour
    if PEAK_HOURS[0] <= hour <= PEAK_HOURS[1]:
        return PEAK_HOUR_BONUS
    if SHOULDER_HOURS[0] <= hour <= SHOULDER_HOURS[1]:
        return SHOULDER_HOUR_BONUS
    return 0


def calculate_slot_score(
    start_time: datetime,
    end_time: datetime,
    match: MatchToSchedule,
    venue_id: str,
    session: SchedulingSession,
) -> int:
    score = peak_hour_bonus(start_time)

    if is_filling_gap(start_time, end_time, session.timeline(venue_id)):
        score += GAP_FILL_BONUS

    score -= participant_load_at(start_time, match.participant_ids, session.rest_tracker)

    if match.preferred_venue_id == venue_id:
        score += PREFERRED_VENUE_BONUS

    if match.priority:
        score += match.priority * PRIORITY_WEIGHT

    return score
