from matchplan.models.schedule_run import ScheduleRun
from matchplan.models.scheduled_match_record import ScheduledMatchRecord

__all__ = [
    "ScheduleRun",
    "ScheduledMatchRecord",
]
