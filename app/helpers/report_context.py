from datetime import datetime, timedelta, timezone, tzinfo

from pydantic import BaseModel, ConfigDict, Field

from app.config import ACTIVITY_FEED_LIMIT, DEADLINE_REMINDER_DAYS, RECENT_ACTIVITY_DAYS
from app.helpers.normalizer import school_timezone


class ReportContext(BaseModel):
    """
    Everything a report needs besides the snapshot itself. One instance per
    request, passed explicitly to every operation.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    now: datetime
    tz: tzinfo = Field(default_factory=school_timezone)
    feed_limit: int = ACTIVITY_FEED_LIMIT
    recent_window: timedelta = timedelta(days=RECENT_ACTIVITY_DAYS)
    reminder_window: timedelta = timedelta(days=DEADLINE_REMINDER_DAYS)


def get_report_context() -> ReportContext:
    return ReportContext(now=datetime.now(timezone.utc))
