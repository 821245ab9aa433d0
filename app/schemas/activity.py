from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from app.models import ActivityKind
from app.schemas.metrics import TeacherOverviewStats


class ActivityEvent(BaseModel):
    id: str
    kind: ActivityKind
    timestamp: datetime

    student_name: Optional[str] = None
    class_name: Optional[str] = None
    task_title: Optional[str] = None
    has_grade: Optional[bool] = None
    grade: Optional[int | float] = None
    days_until_deadline: Optional[int] = None


class TeacherOverview(BaseModel):
    stats: TeacherOverviewStats
    activities: list[ActivityEvent] = Field(default_factory=list)
