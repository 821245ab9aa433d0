import logging
from fastapi import APIRouter, Depends

from app.auth.dependencies import CurrentUser, is_teacher
from app.auth.report_access import load_view
from app.helpers.activity_feed import build_activity_feed
from app.helpers.progress_calculator import teacher_overview_stats
from app.helpers.report_context import ReportContext, get_report_context
from app.schemas.activity import TeacherOverview
from app.schemas.snapshot import SnapshotPayload

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/teacher/reports",
    tags=["Teacher Report Endpoints"]
)


# ---------------------------
# Dashboard counters + activity feed
# ---------------------------
@router.post("/overview", response_model=TeacherOverview)
async def teacher_overview(
    payload: SnapshotPayload,
    current_user: CurrentUser = Depends(is_teacher),
    context: ReportContext = Depends(get_report_context),
):
    view = load_view(payload, context)

    activities = build_activity_feed(
        view,
        context.now,
        limit=context.feed_limit,
        recent_window=context.recent_window,
        reminder_window=context.reminder_window,
    )
    logger.info("Built overview for %s with %d activities", current_user.id, len(activities))

    return TeacherOverview(
        stats=teacher_overview_stats(view, context.now),
        activities=activities,
    )
