from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from app.models import TaskStatus
from app.schemas.metrics import ClassMetrics, StudentMetrics


class GradebookColumn(BaseModel):
    task_id: str
    title: str
    deadline: Optional[datetime] = None


class GradebookCell(BaseModel):
    task_id: str
    status: TaskStatus
    grade: Optional[int | float] = None
    submission_id: Optional[str] = None


class GradebookRow(BaseModel):
    student_id: str
    name: str
    class_id: Optional[str] = None
    class_name: Optional[str] = None
    metrics: StudentMetrics
    cells: list[GradebookCell] = Field(default_factory=list)


class Gradebook(BaseModel):
    class_id: Optional[str] = None
    stats: ClassMetrics
    columns: list[GradebookColumn] = Field(default_factory=list)
    rows: list[GradebookRow] = Field(default_factory=list)


class StudentTaskRow(BaseModel):
    task_id: str
    title: str
    deadline: Optional[datetime] = None
    status: TaskStatus
    submission_id: Optional[str] = None
    submitted_at: Optional[datetime] = None
    grade: Optional[int | float] = None
    teacher_comment: Optional[str] = None


class StudentTaskReport(BaseModel):
    metrics: StudentMetrics
    tasks: list[StudentTaskRow] = Field(default_factory=list)


class ClassReport(BaseModel):
    metrics: ClassMetrics
    students: list[StudentMetrics] = Field(default_factory=list)
