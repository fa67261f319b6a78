"""
Scheduling errors.

Validation errors are raised before any timeline is touched.
UnschedulableMatchError aborts the whole run; no partial schedule is returned.
"""

from typing import Any, Dict, List


class SchedulingError(Exception):
    """Base exception for scheduling errors"""

    kind = "SchedulingError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.kind, "message": self.message}


class SchedulingValidationError(SchedulingError):
    """Input validation failed before placement"""

    pass


class EmptyInputError(SchedulingValidationError):
    kind = "EmptyInput"

    def __init__(self, message: str = "No matches to schedule"):
        super().__init__(message)


class NoVenuesError(SchedulingValidationError):
    kind = "NoVenues"

    def __init__(self, message: str = "No venues available"):
        super().__init__(message)


class InvalidWindowError(SchedulingValidationError):
    kind = "InvalidWindow"

    def __init__(self, message: str = "Invalid time window: start_time must be before end_time"):
        super().__init__(message)


class DuplicateMatchIdError(SchedulingValidationError):
    kind = "DuplicateMatchId"

    def __init__(self, match_ids: List[str]):
        super().__init__(f"Duplicate match ids: {', '.join(match_ids)}")
        self.match_ids = match_ids

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["match_ids"] = self.match_ids
        return result


class UnschedulableMatchError(SchedulingError):
    """Greedy placement and backtracking both failed for one match"""

    kind = "UnschedulableMatch"

    def __init__(self, match_id: str):
        super().__init__(f"Impossible to schedule match {match_id}")
        self.match_id = match_id

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["match_id"] = self.match_id
        return result
