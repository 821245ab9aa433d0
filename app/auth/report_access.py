import logging
from fastapi import HTTPException, status

from app.auth.dependencies import CurrentUser
from app.helpers.joins import JoinedView
from app.helpers.normalizer import normalize_snapshot
from app.helpers.report_context import ReportContext
from app.models import SchoolClass, Task, User, UserRole
from app.schemas.snapshot import SnapshotPayload

logger = logging.getLogger(__name__)


def load_view(payload: SnapshotPayload, context: ReportContext) -> JoinedView:
    """Normalize the posted snapshot and join it."""
    snapshot = normalize_snapshot(payload.model_dump(), tz=context.tz)
    view = JoinedView(snapshot)
    logger.info(
        "Loaded snapshot: %d users, %d classes, %d tasks, %d submissions (%d excluded)",
        len(snapshot.users), len(snapshot.classes), len(snapshot.tasks),
        len(snapshot.submissions), view.excluded_submissions,
    )
    return view


def teacher_view(view: JoinedView, current_user: CurrentUser) -> JoinedView:
    """Admins see everything; teachers only their own classes and tasks."""
    if current_user.role == UserRole.ADMIN:
        return view
    return view.scoped_to_teacher(current_user.id)


def get_class_or_404(view: JoinedView, class_id: str, current_user: CurrentUser) -> SchoolClass:
    school_class = view.school_class(class_id)
    if not school_class:
        raise HTTPException(404, "Class not found")

    if current_user.role != UserRole.ADMIN and school_class.created_by != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have access to this class."
        )
    return school_class


def get_task_or_404(view: JoinedView, task_id: str, current_user: CurrentUser) -> Task:
    task = view.task(task_id)
    if not task:
        raise HTTPException(404, "Task not found")

    if current_user.role != UserRole.ADMIN and task.created_by != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have access to this task."
        )
    return task


def get_student_or_404(view: JoinedView, student_id: str) -> User:
    student = view.student(student_id)
    if not student:
        raise HTTPException(404, "Student not found")
    return student
