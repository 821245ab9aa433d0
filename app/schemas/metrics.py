from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class StudentMetrics(BaseModel):
    student_id: str
    name: str
    class_id: Optional[str] = None
    applicable_task_count: int = 0
    submitted_count: int = 0
    graded_count: int = 0
    pending_count: int = 0
    overdue_count: int = 0
    average_grade: float = 0
    completion_rate: float = 0
    last_submission_at: Optional[datetime] = None


class ClassMetrics(BaseModel):
    class_id: Optional[str] = None
    name: Optional[str] = None
    student_count: int = 0
    task_count: int = 0
    total_submissions: int = 0
    graded_count: int = 0
    average_grade: float = 0
    completion_rate: float = 0


class TaskMetrics(BaseModel):
    task_id: str
    title: str
    deadline: Optional[datetime] = None
    assigned_class_count: int = 0
    student_count: int = 0
    submitted_count: int = 0
    graded_count: int = 0
    late_count: int = 0
    average_grade: float = 0


#for teachers
class TeacherOverviewStats(BaseModel):
    total_students: int = 0
    total_classes: int = 0
    active_tasks: int = 0
    needs_grading: int = 0


#for students
class StudentOverviewStats(BaseModel):
    total_tasks: int = 0
    completed: int = 0
    pending: int = 0
    overdue: int = 0


class GradeEntry(BaseModel):
    submission_id: str
    task_id: str
    task_title: str
    grade: int | float
    teacher_comment: Optional[str] = None
    submitted_at: Optional[datetime] = None
    graded_at: Optional[datetime] = None


class StudentGrades(BaseModel):
    student_id: str
    average_grade: float = 0
    grades: list[GradeEntry] = Field(default_factory=list)
