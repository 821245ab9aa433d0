from fastapi import APIRouter, Depends

from app.auth.dependencies import CurrentUser, is_student
from app.auth.report_access import get_student_or_404, load_view
from app.helpers.gradebook import student_task_rows
from app.helpers.progress_calculator import student_overview_stats
from app.helpers.report_context import ReportContext, get_report_context
from app.models import TaskStatus
from app.schemas.snapshot import SnapshotPayload
from app.schemas.student_overview import StudentOverview

UPCOMING_LIMIT = 5

router = APIRouter(
    prefix="/student/reports",
    tags=["Student Report Endpoints"]
)


@router.post("/overview", response_model=StudentOverview)
async def student_overview(
    payload: SnapshotPayload,
    current_user: CurrentUser = Depends(is_student),
    context: ReportContext = Depends(get_report_context),
):
    view = load_view(payload, context)
    student = get_student_or_404(view, current_user.id)

    report = student_task_rows(view, student, context.now, sort_by="deadline")
    upcoming = [row for row in report.tasks if row.status == TaskStatus.PENDING]

    return StudentOverview(
        stats=student_overview_stats(view, student, context.now),
        metrics=report.metrics,
        upcoming=upcoming[:UPCOMING_LIMIT],
    )
