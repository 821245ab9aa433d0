from fastapi import APIRouter, Depends

from app.auth.dependencies import CurrentUser, is_teacher
from app.auth.report_access import get_class_or_404, get_task_or_404, load_view
from app.helpers.progress_calculator import class_metrics, student_metrics, task_metrics
from app.helpers.report_context import ReportContext, get_report_context
from app.schemas.gradebook import ClassReport
from app.schemas.metrics import TaskMetrics
from app.schemas.snapshot import SnapshotPayload

router = APIRouter(
    prefix="/teacher/reports",
    tags=["Teacher Class & Task Report Endpoints"]
)


@router.post("/classes/{class_id}", response_model=ClassReport)
async def class_report(
    class_id: str,
    payload: SnapshotPayload,
    current_user: CurrentUser = Depends(is_teacher),
    context: ReportContext = Depends(get_report_context),
):
    view = load_view(payload, context)
    get_class_or_404(view, class_id, current_user)

    students = sorted(view.students_in_class(class_id), key=lambda s: s.name.lower())
    return ClassReport(
        metrics=class_metrics(view, class_id, context.now),
        students=[student_metrics(view, s, context.now) for s in students],
    )


@router.post("/tasks/{task_id}", response_model=TaskMetrics)
async def task_report(
    task_id: str,
    payload: SnapshotPayload,
    current_user: CurrentUser = Depends(is_teacher),
    context: ReportContext = Depends(get_report_context),
):
    view = load_view(payload, context)
    get_task_or_404(view, task_id, current_user)

    return task_metrics(view, task_id)
