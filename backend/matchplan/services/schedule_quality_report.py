"""
Schedule Quality Report — audits a completed schedule against the hard rules.

Checks:
1. Completeness: every requested match appears exactly once
2. Venue exclusivity: no two matches overlap on the same venue
3. Window containment: every match inside [start_time, end_time]
4. Rest compliance: consecutive matches of a participant are >= min rest apart
5. Summary stats: matches per venue, utilization %
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from matchplan.services.capacity_resolver import available_venue_minutes
from matchplan.services.scheduling_types import ScheduledMatch, SchedulingConstraints, Venue

logger = logging.getLogger(__name__)


@dataclass
class CheckResult:
    """Result of a single quality check."""
    name: str
    passed: bool
    summary: str
    details: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "passed": self.passed,
            "summary": self.summary,
            "details": self.details[:20],  # Cap at 20 to avoid huge payloads
            "detail_count": len(self.details),
        }


@dataclass
class QualityReport:
    """Full schedule quality report."""
    overall_passed: bool
    checks: List[CheckResult]
    stats: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overall_passed": self.overall_passed,
            "checks": [c.to_dict() for c in self.checks],
            "stats": self.stats,
        }


def generate_quality_report(
    scheduled_matches: List[ScheduledMatch],
    venues: List[Venue],
    constraints: SchedulingConstraints,
    expected_match_ids: Optional[Iterable[str]] = None,
) -> QualityReport:
    """Audit a schedule. expected_match_ids defaults to the scheduled ids."""
    if expected_match_ids is None:
        expected_match_ids = [m.id for m in scheduled_matches]

    checks = [
        _check_completeness(scheduled_matches, list(expected_match_ids)),
        _check_venue_exclusivity(scheduled_matches),
        _check_window_containment(scheduled_matches, constraints),
        _check_rest_compliance(scheduled_matches, constraints),
    ]
    stats = _compute_stats(scheduled_matches, venues, constraints)

    overall = all(c.passed for c in checks)
    if not overall:
        failed = [c.name for c in checks if not c.passed]
        logger.warning("Schedule quality report failed checks: %s", ", ".join(failed))

    return QualityReport(overall_passed=overall, checks=checks, stats=stats)


# ============================================================================
# Individual Checks
# ============================================================================


def _check_completeness(scheduled_matches: List[ScheduledMatch], expected_ids: List[str]) -> CheckResult:
    """Every expected match scheduled exactly once, nothing extra."""
    counts = Counter(m.id for m in scheduled_matches)
    details = []

    for match_id in expected_ids:
        if counts[match_id] == 0:
            details.append(f"Match {match_id}: not scheduled")
        elif counts[match_id] > 1:
            details.append(f"Match {match_id}: scheduled {counts[match_id]} times")

    expected = set(expected_ids)
    for match_id in sorted(set(counts) - expected):
        details.append(f"Match {match_id}: scheduled but not requested")

    if not details:
        return CheckResult("completeness", True, f"All {len(expected_ids)} matches scheduled once")

    return CheckResult("completeness", False, f"{len(details)} completeness problems", details)


def _check_venue_exclusivity(scheduled_matches: List[ScheduledMatch]) -> CheckResult:
    """No overlapping intervals on any venue."""
    by_venue: Dict[str, List[ScheduledMatch]] = defaultdict(list)
    for m in scheduled_matches:
        by_venue[m.venue_id].append(m)

    violations = []
    for venue_id, matches in sorted(by_venue.items()):
        matches = sorted(matches, key=lambda m: m.scheduled_at)
        for prev, curr in zip(matches, matches[1:]):
            if curr.scheduled_at < prev.end_time:
                violations.append(
                    f"Venue {venue_id}: {prev.id} ({prev.scheduled_at:%H:%M}-{prev.end_time:%H:%M}) "
                    f"overlaps {curr.id} ({curr.scheduled_at:%H:%M}-{curr.end_time:%H:%M})"
                )

    if not violations:
        return CheckResult("venue_exclusivity", True, f"No double-booking across {len(by_venue)} venues")

    return CheckResult("venue_exclusivity", False, f"{len(violations)} double-bookings", violations)


def _check_window_containment(
    scheduled_matches: List[ScheduledMatch], constraints: SchedulingConstraints
) -> CheckResult:
    violations = [
        f"Match {m.id}: {m.scheduled_at.isoformat()} - {m.end_time.isoformat()} outside window"
        for m in scheduled_matches
        if m.scheduled_at < constraints.start_time or m.end_time > constraints.end_time
    ]

    if not violations:
        return CheckResult("window_containment", True, "All matches inside the time window")

    return CheckResult("window_containment", False, f"{len(violations)} matches outside window", violations)


def _check_rest_compliance(
    scheduled_matches: List[ScheduledMatch], constraints: SchedulingConstraints
) -> CheckResult:
    """Check that no participant plays twice within the required rest gap."""
    by_participant: Dict[str, List[ScheduledMatch]] = defaultdict(list)
    for m in scheduled_matches:
        for participant_id in m.participant_ids:
            by_participant[participant_id].append(m)

    violations = []
    for participant_id, matches in sorted(by_participant.items()):
        matches = sorted(matches, key=lambda m: m.scheduled_at)
        for prev, curr in zip(matches, matches[1:]):
            gap = (curr.scheduled_at - prev.end_time).total_seconds() / 60
            if gap < constraints.min_rest_time:
                violations.append(
                    f"Participant {participant_id}: {gap:g}min gap between {prev.id} and {curr.id} "
                    f"(required {constraints.min_rest_time}min)"
                )

    if not violations:
        return CheckResult(
            "rest_compliance", True, f"All rest gaps satisfied ({len(by_participant)} participants checked)"
        )

    return CheckResult("rest_compliance", False, f"{len(violations)} rest violations", violations)


# ============================================================================
# Stats
# ============================================================================


def _compute_stats(
    scheduled_matches: List[ScheduledMatch],
    venues: List[Venue],
    constraints: SchedulingConstraints,
) -> Dict[str, Any]:
    matches_per_venue: Dict[str, int] = {v.id: 0 for v in venues}
    for m in scheduled_matches:
        matches_per_venue[m.venue_id] = matches_per_venue.get(m.venue_id, 0) + 1

    booked = sum(m.match.estimated_duration for m in scheduled_matches)
    capacity = available_venue_minutes(venues, constraints)
    utilization = (booked / capacity * 100) if capacity > 0 else 0

    return {
        "total_matches": len(scheduled_matches),
        "total_venues": len(venues),
        "booked_minutes": booked,
        "utilization_pct": round(utilization, 1),
        "matches_per_venue": matches_per_venue,
    }
