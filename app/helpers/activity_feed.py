import math
from datetime import datetime, timedelta
from typing import Optional

from app.config import ACTIVITY_FEED_LIMIT, DEADLINE_REMINDER_DAYS, RECENT_ACTIVITY_DAYS
from app.helpers.joins import JoinedView
from app.helpers.progress_calculator import ensure_aware
from app.models import ActivityKind, Submission, User
from app.schemas.activity import ActivityEvent

ONE_DAY = timedelta(days=1)

# secondary ordering for events sharing a timestamp
_KIND_ORDER = {
    ActivityKind.SUBMISSION: 0,
    ActivityKind.NEW_STUDENT: 1,
    ActivityKind.NEW_TASK: 2,
    ActivityKind.DEADLINE_REMINDER: 3,
}


def display_name(student: Optional[User], submission: Optional[Submission] = None) -> str:
    if student is not None and student.name:
        return student.name
    if submission is not None and submission.student_name:
        return submission.student_name
    if student is not None and student.email:
        return student.email.split("@")[0]
    return "Unknown Student"


def submission_events(view: JoinedView) -> list[ActivityEvent]:
    events = []
    for submission in view.submissions:
        if submission.submitted_at is None:
            continue
        student = view.student(submission.student_id)
        task = view.task(submission.task_id)
        events.append(
            ActivityEvent(
                id=submission.id,
                kind=ActivityKind.SUBMISSION,
                timestamp=submission.submitted_at,
                student_name=display_name(student, submission),
                class_name=view.class_name(student.class_id) if student else None,
                task_title=task.title if task else None,
                has_grade=submission.grade is not None,
                grade=submission.grade,
            )
        )
    return events


def new_student_events(view: JoinedView, now: datetime, window: timedelta) -> list[ActivityEvent]:
    events = []
    for student in view.students:
        created = student.created_at
        if created is None or not (now - window <= created <= now):
            continue
        events.append(
            ActivityEvent(
                id=student.uid,
                kind=ActivityKind.NEW_STUDENT,
                timestamp=created,
                student_name=display_name(student),
                class_name=view.class_name(student.class_id),
            )
        )
    return events


def deadline_events(view: JoinedView, now: datetime, window: timedelta) -> list[ActivityEvent]:
    events = []
    for task in view.tasks:
        deadline = task.deadline
        if deadline is None or not (now < deadline <= now + window):
            continue
        events.append(
            ActivityEvent(
                id=task.id,
                kind=ActivityKind.DEADLINE_REMINDER,
                timestamp=deadline,
                task_title=task.title,
                days_until_deadline=math.ceil((deadline - now) / ONE_DAY),
            )
        )
    return events


def new_task_events(view: JoinedView, now: datetime, window: timedelta) -> list[ActivityEvent]:
    events = []
    for task in view.tasks:
        created = task.created_at
        if created is None or not (now - window <= created <= now):
            continue
        events.append(
            ActivityEvent(
                id=task.id,
                kind=ActivityKind.NEW_TASK,
                timestamp=created,
                task_title=task.title,
            )
        )
    return events


def build_activity_feed(
    view: JoinedView,
    now: datetime,
    limit: int = ACTIVITY_FEED_LIMIT,
    recent_window: timedelta = timedelta(days=RECENT_ACTIVITY_DAYS),
    reminder_window: timedelta = timedelta(days=DEADLINE_REMINDER_DAYS),
) -> list[ActivityEvent]:
    """
    Merge submissions, new students, upcoming deadlines and new tasks into
    one feed, newest first, capped at `limit` entries.
    """
    ensure_aware(now)
    if limit < 0:
        raise ValueError("limit must not be negative")

    events = (
        submission_events(view)
        + new_student_events(view, now, recent_window)
        + deadline_events(view, now, reminder_window)
        + new_task_events(view, now, recent_window)
    )

    # stable order for equal timestamps, so rebuilding gives the same feed
    events.sort(key=lambda e: (_KIND_ORDER[e.kind], e.id))
    events.sort(key=lambda e: e.timestamp, reverse=True)
    return events[:limit]
