import logging
from collections import defaultdict
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Optional

from app.models import SchoolClass, Snapshot, Submission, Task, User, UserRole

logger = logging.getLogger(__name__)

EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _submission_time(submission: Submission) -> datetime:
    return submission.submitted_at or EPOCH


def _newer(candidate: Submission, current: Submission) -> bool:
    """
    Tie-break for duplicate (student, task) submissions: most recent wins.
    Unknown times lose to known ones; on equal times the later record wins.
    """
    if candidate.submitted_at is None and current.submitted_at is not None:
        return False
    if current.submitted_at is None and candidate.submitted_at is not None:
        return True
    return _submission_time(candidate) >= _submission_time(current)


def submissions_by_student(submissions: Iterable[Submission]) -> dict[str, list[Submission]]:
    grouped: dict[str, list[Submission]] = defaultdict(list)
    for submission in submissions:
        grouped[submission.student_id].append(submission)
    return dict(grouped)


def submissions_by_task(submissions: Iterable[Submission]) -> dict[str, dict[str, Submission]]:
    """task id -> student id -> the one submission that counts."""
    lookup: dict[str, dict[str, Submission]] = defaultdict(dict)
    for submission in submissions:
        per_task = lookup[submission.task_id]
        current = per_task.get(submission.student_id)
        if current is None or _newer(submission, current):
            if current is not None:
                logger.debug(
                    "Duplicate submission for student %s on task %s, keeping %s",
                    submission.student_id, submission.task_id, submission.id,
                )
            per_task[submission.student_id] = submission
    return dict(lookup)


def tasks_for_class(tasks: Iterable[Task], class_id: Optional[str]) -> list[Task]:
    if not class_id:
        return []
    return [task for task in tasks if class_id in task.assigned_classes]


def students_in_class(users: Iterable[User], class_id: Optional[str]) -> list[User]:
    if not class_id:
        return []
    return [u for u in users if u.role == UserRole.STUDENT and u.class_id == class_id]


class JoinedView:
    """
    Denormalized, read-only view over one snapshot.

    Submissions whose task or student is not in the snapshot are left out
    of every lookup; `excluded_submissions` counts them.
    """

    def __init__(self, snapshot: Snapshot):
        if not isinstance(snapshot, Snapshot):
            raise TypeError(f"JoinedView expects a Snapshot, got {type(snapshot).__name__}")

        self.snapshot = snapshot
        self.users: list[User] = list(snapshot.users)
        self.students: list[User] = [u for u in self.users if u.role == UserRole.STUDENT]
        self.classes: list[SchoolClass] = list(snapshot.classes)
        self.tasks: list[Task] = list(snapshot.tasks)

        self.classes_by_id: dict[str, SchoolClass] = {c.id: c for c in self.classes}
        self.tasks_by_id: dict[str, Task] = {t.id: t for t in self.tasks}
        self.students_by_id: dict[str, User] = {s.uid: s for s in self.students}

        joined = []
        for submission in snapshot.submissions:
            if submission.task_id in self.tasks_by_id and submission.student_id in self.students_by_id:
                joined.append(submission)
        self.excluded_submissions = len(snapshot.submissions) - len(joined)
        if self.excluded_submissions:
            logger.debug("Excluded %d submissions with missing references", self.excluded_submissions)

        # keep only the submission that counts for each (student, task) pair
        self.by_task = submissions_by_task(joined)
        self.submissions: list[Submission] = [
            s for per_task in self.by_task.values() for s in per_task.values()
        ]
        self.by_student = submissions_by_student(self.submissions)

    # ---------------------------
    # Lookups
    # ---------------------------
    def student(self, student_id: str) -> Optional[User]:
        student = self.students_by_id.get(student_id)
        if student is not None:
            return student
        # fall back to the document id
        for candidate in self.students:
            if candidate.id == student_id:
                return candidate
        return None

    def task(self, task_id: str) -> Optional[Task]:
        return self.tasks_by_id.get(task_id)

    def school_class(self, class_id: Optional[str]) -> Optional[SchoolClass]:
        if not class_id:
            return None
        return self.classes_by_id.get(class_id)

    def class_name(self, class_id: Optional[str]) -> Optional[str]:
        school_class = self.school_class(class_id)
        return school_class.name if school_class else None

    def submission_for(self, student_id: str, task_id: str) -> Optional[Submission]:
        return self.by_task.get(task_id, {}).get(student_id)

    def submissions_of(self, student_id: str) -> list[Submission]:
        return list(self.by_student.get(student_id, []))

    def submissions_for_task(self, task_id: str) -> list[Submission]:
        return list(self.by_task.get(task_id, {}).values())

    def tasks_for_class(self, class_id: Optional[str]) -> list[Task]:
        return tasks_for_class(self.tasks, class_id)

    def tasks_for_student(self, student: User) -> list[Task]:
        return self.tasks_for_class(student.class_id)

    def students_in_class(self, class_id: Optional[str]) -> list[User]:
        return students_in_class(self.students, class_id)

    # ---------------------------
    # Scoping
    # ---------------------------
    def scoped_to_teacher(self, teacher_id: str) -> "JoinedView":
        """
        Restrict the view to the classes and tasks created by `teacher_id`
        and the students enrolled in those classes.
        """
        classes = [c for c in self.classes if c.created_by == teacher_id]
        class_ids = {c.id for c in classes}
        tasks = [t for t in self.tasks if t.created_by == teacher_id]
        task_ids = {t.id for t in tasks}
        students = [s for s in self.students if s.class_id in class_ids]
        student_ids = {s.uid for s in students}
        submissions = [
            s for s in self.snapshot.submissions
            if s.task_id in task_ids and s.student_id in student_ids
        ]
        non_students = [u for u in self.users if u.role != UserRole.STUDENT]

        return JoinedView(
            Snapshot(
                users=non_students + students,
                classes=classes,
                tasks=tasks,
                submissions=submissions,
            )
        )
