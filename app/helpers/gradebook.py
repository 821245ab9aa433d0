from datetime import datetime, timezone
from typing import Optional

from app.helpers.joins import EPOCH, JoinedView
from app.helpers.progress_calculator import (
    class_metrics,
    student_metrics,
    summarize_students,
    task_status,
)
from app.models import Task, TaskStatus, User
from app.schemas.gradebook import (
    Gradebook,
    GradebookCell,
    GradebookColumn,
    GradebookRow,
    StudentTaskReport,
    StudentTaskRow,
)

_FAR_FUTURE = datetime.max.replace(tzinfo=timezone.utc)

STATUS_ORDER = {
    TaskStatus.GRADED: 1,
    TaskStatus.SUBMITTED: 2,
    TaskStatus.PENDING: 3,
    TaskStatus.OVERDUE: 4,
}

SORT_KEYS = {
    "title": lambda row: row.title.lower(),
    "deadline": lambda row: row.deadline or _FAR_FUTURE,
    "status": lambda row: STATUS_ORDER[row.status],
}


def order_tasks(tasks: list[Task]) -> list[Task]:
    """Gradebook column order: earliest deadline first, unknown deadlines last."""
    return sorted(tasks, key=lambda t: (t.deadline is None, t.deadline or EPOCH, t.title.lower()))


def filter_students(
    students: list[User],
    class_id: Optional[str] = None,
    search: Optional[str] = None,
) -> list[User]:
    needle = (search or "").strip().lower()
    return [
        s for s in students
        if (not class_id or s.class_id == class_id)
        and (not needle or needle in s.name.lower())
    ]


def build_gradebook(
    view: JoinedView,
    now: datetime,
    class_id: Optional[str] = None,
    search: Optional[str] = None,
) -> Gradebook:
    """
    Students x tasks matrix.

    Rows are ordered by most recent submission, then by name. Tasks that are
    not assigned to a student's class still get a cell, with status pending.
    """
    students = filter_students(view.students, class_id, search)
    tasks = order_tasks(view.tasks_for_class(class_id) if class_id else view.tasks)

    rows = []
    for student in students:
        applicable = {t.id for t in view.tasks_for_student(student)}
        cells = []
        for task in tasks:
            submission = view.submission_for(student.uid, task.id)
            if task.id in applicable or submission is not None:
                status = task_status(task, submission, now)
            else:
                status = TaskStatus.PENDING
            cells.append(
                GradebookCell(
                    task_id=task.id,
                    status=status,
                    grade=submission.grade if submission else None,
                    submission_id=submission.id if submission else None,
                )
            )
        rows.append(
            GradebookRow(
                student_id=student.uid,
                name=student.name,
                class_id=student.class_id,
                class_name=view.class_name(student.class_id),
                metrics=student_metrics(view, student, now),
                cells=cells,
            )
        )

    rows.sort(key=lambda r: r.name.lower())
    rows.sort(key=lambda r: r.metrics.last_submission_at or EPOCH, reverse=True)

    if class_id:
        stats = class_metrics(view, class_id, now)
    else:
        stats = summarize_students(view, students, now, task_count=len(tasks))

    return Gradebook(
        class_id=class_id,
        stats=stats,
        columns=[GradebookColumn(task_id=t.id, title=t.title, deadline=t.deadline) for t in tasks],
        rows=rows,
    )


def student_task_rows(
    view: JoinedView,
    student: User,
    now: datetime,
    sort_by: Optional[str] = None,
    order: str = "asc",
) -> StudentTaskReport:
    if sort_by is not None and sort_by not in SORT_KEYS:
        raise ValueError(f"Unknown sort key {sort_by!r}, expected one of {sorted(SORT_KEYS)}")
    if order not in ("asc", "desc"):
        raise ValueError(f"Unknown sort order {order!r}, expected 'asc' or 'desc'")

    rows = []
    for task in view.tasks_for_student(student):
        submission = view.submission_for(student.uid, task.id)
        rows.append(
            StudentTaskRow(
                task_id=task.id,
                title=task.title,
                deadline=task.deadline,
                status=task_status(task, submission, now),
                submission_id=submission.id if submission else None,
                submitted_at=submission.submitted_at if submission else None,
                grade=submission.grade if submission else None,
                teacher_comment=submission.teacher_comment if submission else None,
            )
        )

    if sort_by:
        rows.sort(key=SORT_KEYS[sort_by], reverse=order == "desc")

    return StudentTaskReport(metrics=student_metrics(view, student, now), tasks=rows)
