import logging
from typing import Literal, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Response

from app.auth.dependencies import CurrentUser, is_teacher
from app.auth.report_access import get_student_or_404, load_view, teacher_view
from app.helpers.csv_export import export_filename, export_gradebook_csv
from app.helpers.gradebook import build_gradebook, filter_students, order_tasks, student_task_rows
from app.helpers.report_context import ReportContext, get_report_context
from app.schemas.gradebook import Gradebook, StudentTaskReport
from app.schemas.snapshot import SnapshotPayload

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/teacher/reports",
    tags=["Teacher Gradebook Endpoints"]
)


# ---------------------------
# Gradebook matrix
# ---------------------------
@router.post("/gradebook", response_model=Gradebook)
async def gradebook(
    payload: SnapshotPayload,
    class_id: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    current_user: CurrentUser = Depends(is_teacher),
    context: ReportContext = Depends(get_report_context),
):
    view = teacher_view(load_view(payload, context), current_user)

    if class_id and not view.school_class(class_id):
        raise HTTPException(404, "Class not found")

    return build_gradebook(view, context.now, class_id=class_id, search=search)


# ---------------------------
# CSV export
# ---------------------------
@router.post("/gradebook/export")
async def export_gradebook(
    payload: SnapshotPayload,
    class_id: Optional[str] = Query(None),
    current_user: CurrentUser = Depends(is_teacher),
    context: ReportContext = Depends(get_report_context),
):
    view = teacher_view(load_view(payload, context), current_user)

    if class_id and not view.school_class(class_id):
        raise HTTPException(404, "Class not found")

    students = sorted(filter_students(view.students, class_id), key=lambda s: s.name.lower())
    tasks = order_tasks(view.tasks_for_class(class_id) if class_id else view.tasks)
    class_names = {c.id: c.name for c in view.classes}

    body = export_gradebook_csv(students, tasks, view.by_task, class_names)
    filename = export_filename(context.now.astimezone(context.tz).date())
    logger.info("Exported gradebook %s: %d students x %d tasks", filename, len(students), len(tasks))

    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ---------------------------
# One student's tasks
# ---------------------------
@router.post("/students/{student_id}/tasks", response_model=StudentTaskReport)
async def student_tasks(
    student_id: str,
    payload: SnapshotPayload,
    sort_by: Optional[Literal["title", "deadline", "status"]] = Query(None),
    order: Literal["asc", "desc"] = Query("asc"),
    current_user: CurrentUser = Depends(is_teacher),
    context: ReportContext = Depends(get_report_context),
):
    view = teacher_view(load_view(payload, context), current_user)
    student = get_student_or_404(view, student_id)

    return student_task_rows(view, student, context.now, sort_by=sort_by, order=order)
