from pydantic import BaseModel, Field

from app.schemas.gradebook import StudentTaskRow
from app.schemas.metrics import StudentMetrics, StudentOverviewStats


class StudentOverview(BaseModel):
    stats: StudentOverviewStats
    metrics: StudentMetrics
    # nearest open deadlines first
    upcoming: list[StudentTaskRow] = Field(default_factory=list)
