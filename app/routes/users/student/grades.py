from fastapi import APIRouter, Depends

from app.auth.dependencies import CurrentUser, is_student
from app.auth.report_access import get_student_or_404, load_view
from app.helpers.progress_calculator import student_grades
from app.helpers.report_context import ReportContext, get_report_context
from app.schemas.metrics import StudentGrades
from app.schemas.snapshot import SnapshotPayload

router = APIRouter(
    prefix="/student/reports",
    tags=["Student Grade Endpoints"]
)


# ---------------------------
# My graded submissions
# ---------------------------
@router.post("/grades", response_model=StudentGrades)
async def my_grades(
    payload: SnapshotPayload,
    current_user: CurrentUser = Depends(is_student),
    context: ReportContext = Depends(get_report_context),
):
    view = load_view(payload, context)
    student = get_student_or_404(view, current_user.id)

    return student_grades(view, student)
