import math
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Iterable, Optional

from app.helpers.joins import EPOCH, JoinedView
from app.models import Submission, Task, TaskStatus, User
from app.schemas.metrics import (
    ClassMetrics,
    GradeEntry,
    StudentGrades,
    StudentMetrics,
    StudentOverviewStats,
    TaskMetrics,
    TeacherOverviewStats,
)

def round_half_up(value: float, places: int = 1) -> float:
    """Round like a report card does: 66.65 -> 66.7, not banker's rounding."""
    if not math.isfinite(value):
        return value
    quantum = Decimal(1).scaleb(-places)
    with localcontext() as ctx:
        # enough digits for any finite float
        ctx.prec = 400
        return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def percentage(part: int, whole: int) -> float:
    if not whole:
        return 0
    return round_half_up(part / whole * 100)


def mean(values: Iterable[float]) -> float:
    values = list(values)
    if not values:
        return 0
    try:
        result = sum(values) / len(values)
    except OverflowError:
        result = math.inf
    if math.isfinite(result):
        return result
    # the plain sum left the float range; scale each value down first
    return sum(v / len(values) for v in values)


def ensure_aware(now: datetime) -> datetime:
    if not isinstance(now, datetime):
        raise TypeError(f"now must be a datetime, got {type(now).__name__}")
    if now.tzinfo is None:
        raise ValueError("now must be timezone-aware")
    return now


# ---------------------------
# Status of one task for one student
# ---------------------------
def task_status(task: Task, submission: Optional[Submission], now: datetime) -> TaskStatus:
    """
    graded    -> a submission with a grade (even if it came in late)
    submitted -> a submission without a grade
    overdue   -> no submission and the deadline has passed
    pending   -> no submission and the deadline has not passed (or is unknown)
    """
    ensure_aware(now)

    if submission is not None:
        if submission.grade is not None:
            return TaskStatus.GRADED
        return TaskStatus.SUBMITTED

    if task.deadline is not None and now > task.deadline:
        return TaskStatus.OVERDUE
    return TaskStatus.PENDING


def _student_grade_values(view: JoinedView, student: User) -> list[float]:
    grades = []
    for task in view.tasks_for_student(student):
        submission = view.submission_for(student.uid, task.id)
        if submission is not None and submission.grade is not None:
            grades.append(submission.grade)
    return grades


# ---------------------------
# Per-student
# ---------------------------
def student_metrics(view: JoinedView, student: User, now: datetime) -> StudentMetrics:
    ensure_aware(now)
    tasks = view.tasks_for_student(student)

    counts = {status: 0 for status in TaskStatus}
    for task in tasks:
        status = task_status(task, view.submission_for(student.uid, task.id), now)
        counts[status] += 1

    submitted = counts[TaskStatus.SUBMITTED] + counts[TaskStatus.GRADED]
    submitted_times = [
        s.submitted_at for s in view.submissions_of(student.uid) if s.submitted_at is not None
    ]

    return StudentMetrics(
        student_id=student.uid,
        name=student.name,
        class_id=student.class_id,
        applicable_task_count=len(tasks),
        submitted_count=submitted,
        graded_count=counts[TaskStatus.GRADED],
        pending_count=counts[TaskStatus.PENDING],
        overdue_count=counts[TaskStatus.OVERDUE],
        average_grade=round_half_up(mean(_student_grade_values(view, student))),
        completion_rate=percentage(submitted, len(tasks)),
        last_submission_at=max(submitted_times) if submitted_times else None,
    )


def summarize_students(
    view: JoinedView,
    students: list[User],
    now: datetime,
    task_count: int,
    class_id: Optional[str] = None,
) -> ClassMetrics:
    """
    Roll student metrics up into one summary.

    The average is the mean of per-student averages over the students with
    at least one graded submission.
    """
    per_student = [student_metrics(view, s, now) for s in students]
    submitted = sum(m.submitted_count for m in per_student)
    applicable = sum(m.applicable_task_count for m in per_student)

    student_averages = []
    for student in students:
        grades = _student_grade_values(view, student)
        if grades:
            student_averages.append(mean(grades))

    return ClassMetrics(
        class_id=class_id,
        name=view.class_name(class_id),
        student_count=len(students),
        task_count=task_count,
        total_submissions=submitted,
        graded_count=sum(m.graded_count for m in per_student),
        average_grade=round_half_up(mean(student_averages)),
        completion_rate=percentage(submitted, applicable),
    )


# ---------------------------
# Per-class
# ---------------------------
def class_metrics(view: JoinedView, class_id: str, now: datetime) -> ClassMetrics:
    """completion_rate = total_submissions / (student_count * task_count)"""
    students = view.students_in_class(class_id)
    tasks = view.tasks_for_class(class_id)
    return summarize_students(view, students, now, task_count=len(tasks), class_id=class_id)


# ---------------------------
# Per-task
# ---------------------------
def task_metrics(view: JoinedView, task_id: str) -> Optional[TaskMetrics]:
    task = view.task(task_id)
    if task is None:
        return None

    assigned = set(task.assigned_classes)
    students = [s for s in view.students if s.class_id in assigned]
    submissions = view.submissions_for_task(task_id)
    grades = [s.grade for s in submissions if s.grade is not None]

    late = 0
    if task.deadline is not None:
        late = sum(
            1 for s in submissions
            if s.submitted_at is not None and s.submitted_at > task.deadline
        )

    return TaskMetrics(
        task_id=task.id,
        title=task.title,
        deadline=task.deadline,
        assigned_class_count=len(task.assigned_classes),
        student_count=len(students),
        submitted_count=len(submissions),
        graded_count=len(grades),
        late_count=late,
        average_grade=round_half_up(mean(grades)),
    )


# ---------------------------
# Dashboard counters
# ---------------------------
def teacher_overview_stats(view: JoinedView, now: datetime) -> TeacherOverviewStats:
    ensure_aware(now)
    return TeacherOverviewStats(
        total_students=len(view.students),
        total_classes=len(view.classes),
        active_tasks=sum(1 for t in view.tasks if t.deadline is not None and t.deadline > now),
        needs_grading=sum(1 for s in view.submissions if s.grade is None),
    )


def student_overview_stats(view: JoinedView, student: User, now: datetime) -> StudentOverviewStats:
    metrics = student_metrics(view, student, now)
    return StudentOverviewStats(
        total_tasks=metrics.applicable_task_count,
        completed=metrics.submitted_count,
        pending=metrics.pending_count,
        overdue=metrics.overdue_count,
    )


def student_grades(view: JoinedView, student: User) -> StudentGrades:
    entries = []
    for submission in view.submissions_of(student.uid):
        if submission.grade is None:
            continue
        task = view.task(submission.task_id)
        entries.append(
            GradeEntry(
                submission_id=submission.id,
                task_id=submission.task_id,
                task_title=task.title if task else "",
                grade=submission.grade,
                teacher_comment=submission.teacher_comment,
                submitted_at=submission.submitted_at,
                graded_at=submission.graded_at,
            )
        )

    entries.sort(key=lambda e: e.submitted_at or EPOCH, reverse=True)

    return StudentGrades(
        student_id=student.uid,
        average_grade=round_half_up(mean(e.grade for e in entries)),
        grades=entries,
    )
