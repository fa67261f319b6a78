# Force SQLModel table registration at test discovery time
from matchplan.models.schedule_run import ScheduleRun  # noqa: F401
from matchplan.models.scheduled_match_record import ScheduledMatchRecord  # noqa: F401
