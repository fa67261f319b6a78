"""
Tests for the schedule orchestrator (greedy placement + backtracking)

Tests:
- Input validation order and error kinds
- Reference scenarios (rest, parallel venues, capacity, preferred venue)
- Backtracking through the orchestrator
- Invariants over a round-robin batch (exclusivity, window, rest, completeness)
- Determinism and priority ordering
- One scheduler instance shared across threads
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from typing import List

import pytest

from matchplan.services.schedule_orchestrator import MatchScheduler, schedule_matches
from matchplan.services.schedule_quality_report import generate_quality_report
from matchplan.services.scheduling_errors import (
    DuplicateMatchIdError,
    EmptyInputError,
    InvalidWindowError,
    NoVenuesError,
    SchedulingValidationError,
    UnschedulableMatchError,
)
from matchplan.services.scheduling_types import (
    MatchToSchedule,
    Participant,
    SchedulingConstraints,
    Venue,
)

# ============================================================================
# Helpers
# ============================================================================


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 1, 15, hour, minute)


def _match(match_id, participants, duration=60, phase=None, round_number=1, **kwargs) -> MatchToSchedule:
    return MatchToSchedule(
        id=match_id,
        phase=phase,
        round=round_number,
        participants=[Participant(id=p, name=p.title()) for p in participants],
        estimated_duration=duration,
        **kwargs,
    )


def _venues(count: int) -> List[Venue]:
    return [Venue(id=f"v{i}", name=f"Venue {i}") for i in range(1, count + 1)]


def _round_robin(player_count: int, duration: int) -> List[MatchToSchedule]:
    """Circle-method round robin, listed round by round."""
    players = [f"p{i}" for i in range(1, player_count + 1)]
    matches = []
    for round_number in range(1, player_count):
        for i in range(player_count // 2):
            a, b = players[i], players[player_count - 1 - i]
            matches.append(_match(f"r{round_number}-{a}-{b}", [a, b], duration, "groups"))
        players = [players[0], players[-1]] + players[1:-1]
    return matches


# ============================================================================
# Validation
# ============================================================================


class TestValidation:
    def test_empty_matches(self):
        constraints = SchedulingConstraints(min_rest_time=30, start_time=_at(9), end_time=_at(12))
        with pytest.raises(EmptyInputError) as exc:
            schedule_matches([], _venues(1), constraints)
        assert exc.value.kind == "EmptyInput"

    def test_empty_matches_reported_before_missing_venues(self):
        constraints = SchedulingConstraints(min_rest_time=30, start_time=_at(9), end_time=_at(12))
        with pytest.raises(EmptyInputError):
            schedule_matches([], [], constraints)

    def test_no_venues(self):
        constraints = SchedulingConstraints(min_rest_time=30, start_time=_at(9), end_time=_at(12))
        with pytest.raises(NoVenuesError) as exc:
            schedule_matches([_match("m1", ["a", "b"])], [], constraints)
        assert exc.value.kind == "NoVenues"

    @pytest.mark.parametrize("end", [_at(9), _at(8)])
    def test_invalid_window(self, end):
        constraints = SchedulingConstraints(min_rest_time=30, start_time=_at(9), end_time=end)
        with pytest.raises(InvalidWindowError) as exc:
            schedule_matches([_match("m1", ["a", "b"])], _venues(1), constraints)
        assert exc.value.kind == "InvalidWindow"

    def test_validation_errors_share_a_base(self):
        assert issubclass(EmptyInputError, SchedulingValidationError)
        assert issubclass(NoVenuesError, SchedulingValidationError)
        assert issubclass(InvalidWindowError, SchedulingValidationError)
        assert issubclass(DuplicateMatchIdError, SchedulingValidationError)
        assert not issubclass(UnschedulableMatchError, SchedulingValidationError)

    def test_duplicate_match_ids(self):
        matches = [_match("m1", ["a", "b"]), _match("m1", ["c", "d"]), _match("m2", ["e", "f"])]
        constraints = SchedulingConstraints(min_rest_time=0, start_time=_at(9), end_time=_at(12))
        with pytest.raises(DuplicateMatchIdError) as exc:
            schedule_matches(matches, _venues(2), constraints)
        assert exc.value.kind == "DuplicateMatchId"
        assert exc.value.match_ids == ["m1"]
        assert exc.value.to_dict()["match_ids"] == ["m1"]

    def test_mixed_timezone_window(self):
        constraints = SchedulingConstraints(
            min_rest_time=0,
            start_time=_at(9).replace(tzinfo=timezone.utc),
            end_time=_at(12),
        )
        with pytest.raises(InvalidWindowError):
            schedule_matches([_match("m1", ["a", "b"])], _venues(1), constraints)

    def test_aware_window(self):
        constraints = SchedulingConstraints(
            min_rest_time=0,
            start_time=_at(9).replace(tzinfo=timezone.utc),
            end_time=_at(12).replace(tzinfo=timezone.utc),
        )
        result = schedule_matches([_match("m1", ["a", "b"])], _venues(1), constraints)
        assert result.scheduled_matches[0].scheduled_at == _at(9).replace(tzinfo=timezone.utc)


# ============================================================================
# Reference Scenarios
# ============================================================================


class TestScenarios:
    def test_rest_between_shared_participants(self):
        """1 venue, same two participants twice, 30 min rest."""
        matches = [_match("m1", ["a", "b"]), _match("m2", ["a", "b"])]
        constraints = SchedulingConstraints(min_rest_time=30, start_time=_at(9), end_time=_at(12))

        result = schedule_matches(matches, _venues(1), constraints)

        first, second = result.scheduled_matches
        assert first.scheduled_at == _at(9)
        assert second.scheduled_at >= first.end_time + timedelta(minutes=30)
        assert second.scheduled_at == _at(10, 30)
        assert second.end_time <= constraints.end_time
        assert result.warnings == []

    def test_disjoint_matches_use_both_venues(self):
        """2 venues, disjoint participants, one hour window."""
        matches = [_match("m1", ["a", "b"]), _match("m2", ["c", "d"])]
        constraints = SchedulingConstraints(min_rest_time=30, start_time=_at(9), end_time=_at(10))

        result = schedule_matches(matches, _venues(2), constraints)

        assert [m.scheduled_at for m in result.scheduled_matches] == [_at(9), _at(9)]
        assert {m.venue_id for m in result.scheduled_matches} == {"v1", "v2"}
        assert result.warnings == ["Tight schedule: 120min needed, 120min available"]

    def test_capacity_cannot_be_created(self):
        """1 venue, 3 x 60 min into a 120 minute window."""
        matches = [_match("m1", ["a", "b"]), _match("m2", ["c", "d"]), _match("m3", ["e", "f"])]
        constraints = SchedulingConstraints(min_rest_time=0, start_time=_at(9), end_time=_at(11))

        with pytest.raises(UnschedulableMatchError) as exc:
            schedule_matches(matches, _venues(1), constraints)

        assert exc.value.match_id == "m3"
        assert exc.value.kind == "UnschedulableMatch"
        assert "m3" in str(exc.value)

    def test_preferred_venue_wins_equal_scores(self):
        matches = [_match("m1", ["a", "b"], preferred_venue_id="v2")]
        constraints = SchedulingConstraints(min_rest_time=0, start_time=_at(12), end_time=_at(14))

        result = schedule_matches(matches, _venues(2), constraints)

        assert result.scheduled_matches[0].venue_id == "v2"
        assert result.scheduled_matches[0].scheduled_at == _at(12)

    def test_empty_input(self):
        constraints = SchedulingConstraints(min_rest_time=0, start_time=_at(9), end_time=_at(10))
        with pytest.raises(EmptyInputError):
            MatchScheduler().schedule([], _venues(2), constraints)


class TestBacktrackingThroughOrchestrator:
    def test_repair_places_every_match(self):
        matches = [
            _match("C", ["p4", "p5"], 90, "groups"),
            _match("B", ["p1", "p3"], 30, "semis"),
            _match("A", ["p1", "p2"], 60, "finals"),
        ]
        constraints = SchedulingConstraints(min_rest_time=60, start_time=_at(9), end_time=_at(12))

        result = schedule_matches(matches, _venues(1), constraints)

        starts = {m.id: m.scheduled_at for m in result.scheduled_matches}
        assert [m.id for m in result.scheduled_matches] == ["A", "B", "C"]
        assert starts == {"A": _at(9), "C": _at(10), "B": _at(11, 30)}
        assert result.metrics.venue_utilization == pytest.approx(1.0)
        assert result.metrics.average_rest_time == pytest.approx(90.0)
        assert result.metrics.quality_score == pytest.approx(1.0)


# ============================================================================
# Invariants
# ============================================================================


class TestInvariants:
    def setup_method(self):
        self.matches = _round_robin(6, 45)
        self.venues = _venues(4)
        self.constraints = SchedulingConstraints(
            min_rest_time=30,
            start_time=_at(8),
            end_time=_at(8) + timedelta(days=2),
        )
        self.result = schedule_matches(self.matches, self.venues, self.constraints)

    def test_every_match_exactly_once(self):
        ids = [m.id for m in self.result.scheduled_matches]
        assert sorted(ids) == sorted(m.id for m in self.matches)

    def test_quality_report_passes(self):
        report = generate_quality_report(
            self.result.scheduled_matches,
            self.venues,
            self.constraints,
            expected_match_ids=[m.id for m in self.matches],
        )
        assert report.overall_passed, report.to_dict()

    def test_no_double_booking(self):
        for venue in self.venues:
            booked = sorted(
                (m for m in self.result.scheduled_matches if m.venue_id == venue.id),
                key=lambda m: m.scheduled_at,
            )
            for prev, curr in zip(booked, booked[1:]):
                assert curr.scheduled_at >= prev.end_time

    def test_rest_between_consecutive_matches(self):
        rest = timedelta(minutes=self.constraints.min_rest_time)
        for participant_id in {p for m in self.matches for p in m.participant_ids}:
            played = sorted(
                (m for m in self.result.scheduled_matches if participant_id in m.participant_ids),
                key=lambda m: m.scheduled_at,
            )
            for prev, curr in zip(played, played[1:]):
                assert curr.scheduled_at - prev.end_time >= rest

    def test_end_is_start_plus_duration(self):
        for m in self.result.scheduled_matches:
            assert m.end_time - m.scheduled_at == timedelta(minutes=m.match.estimated_duration)

    def test_no_constraint_violations(self):
        assert self.result.metrics.constraint_violations == 0
        assert 0.0 <= self.result.metrics.venue_utilization <= 1.0
        assert 0.0 <= self.result.metrics.quality_score <= 1.0


class TestDeterminism:
    def test_identical_inputs_identical_output(self):
        matches = _round_robin(6, 45)
        constraints = SchedulingConstraints(min_rest_time=30, start_time=_at(8), end_time=_at(8) + timedelta(days=2))

        first = schedule_matches(matches, _venues(3), constraints)
        second = schedule_matches(matches, _venues(3), constraints)

        assert first.to_dict() == second.to_dict()

    def test_inputs_are_not_mutated(self):
        matches = [_match("m2", ["a", "b"], phase="groups"), _match("m1", ["c", "d"], phase="finals")]
        constraints = SchedulingConstraints(min_rest_time=0, start_time=_at(9), end_time=_at(12))
        schedule_matches(matches, _venues(1), constraints)
        assert [m.id for m in matches] == ["m2", "m1"]


class TestPriorityOrdering:
    def test_more_important_matches_start_earlier(self):
        matches = [
            _match("g", ["g1", "g2"], phase="groups"),
            _match("q", ["q1", "q2"], phase="qualifier"),
            _match("f", ["f1", "f2"], phase="finals"),
            _match("s1", ["s1a", "s1b"], phase="semis", round_number=1),
            _match("s2", ["s2a", "s2b"], phase="semis", round_number=2),
            _match("s3", ["s3a", "s3b"], phase="semis", round_number=1, priority=3),
        ]
        constraints = SchedulingConstraints(min_rest_time=0, start_time=_at(9), end_time=_at(20))

        result = schedule_matches(matches, _venues(1), constraints)

        by_start = sorted(result.scheduled_matches, key=lambda m: m.scheduled_at)
        assert [m.id for m in by_start] == ["f", "s2", "s3", "s1", "g", "q"]
        assert [m.scheduled_at for m in by_start] == [_at(h) for h in range(9, 15)]

    def test_dependencies_do_not_order_placement(self):
        matches = [
            _match("semi", ["a", "b"], phase="semis"),
            _match("final", ["c", "d"], phase="finals", dependencies=["semi"]),
        ]
        constraints = SchedulingConstraints(min_rest_time=0, start_time=_at(9), end_time=_at(12))

        result = schedule_matches(matches, _venues(1), constraints)

        starts = {m.id: m.scheduled_at for m in result.scheduled_matches}
        assert starts["final"] < starts["semi"]


class TestConcurrentRuns:
    def test_shared_scheduler_across_threads(self):
        scheduler = MatchScheduler()
        long_window = SchedulingConstraints(min_rest_time=30, start_time=_at(8), end_time=_at(8) + timedelta(days=2))
        short_window = SchedulingConstraints(min_rest_time=30, start_time=_at(9), end_time=_at(12))
        jobs = [
            (_round_robin(6, 45), _venues(4), long_window),
            ([_match("m1", ["a", "b"]), _match("m2", ["a", "b"])], _venues(1), short_window),
        ] * 4

        expected = [scheduler.schedule(*job).to_dict() for job in jobs]
        with ThreadPoolExecutor(max_workers=4) as pool:
            actual = list(pool.map(lambda job: scheduler.schedule(*job).to_dict(), jobs))

        assert actual == expected
