import enum
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


# ---------------------------
# Enums
# ---------------------------
class UserRole(str, enum.Enum):
    ADMIN = "admin"
    STUDENT = "student"
    TEACHER = "teacher"


class UserStatus(str, enum.Enum):
    ACTIVE = "active"
    BANNED = "banned"


class TaskStatus(str, enum.Enum):
    GRADED = "graded"
    SUBMITTED = "submitted"
    OVERDUE = "overdue"
    PENDING = "pending"


class ActivityKind(str, enum.Enum):
    SUBMISSION = "submission"
    NEW_STUDENT = "new_student"
    DEADLINE_REMINDER = "deadline_reminder"
    NEW_TASK = "new_task"


# ---------------------------
# User
# ---------------------------
class User(BaseModel):
    id: str
    # canonical identifier: uid when the record has one, otherwise id
    uid: str
    name: str = ""
    email: Optional[str] = None
    role: UserRole = UserRole.STUDENT
    class_id: Optional[str] = None
    status: UserStatus = UserStatus.ACTIVE
    created_at: Optional[datetime] = None


# ---------------------------
# Class
# ---------------------------
class SchoolClass(BaseModel):
    id: str
    name: str = ""
    subject: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None


# ---------------------------
# Task
# ---------------------------
class Task(BaseModel):
    id: str
    title: str = ""
    description: Optional[str] = None
    deadline: Optional[datetime] = None
    assigned_classes: list[str] = Field(default_factory=list)
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None


# ---------------------------
# Submission
# ---------------------------
class Submission(BaseModel):
    id: str
    task_id: str
    student_id: str
    student_name: Optional[str] = None
    content: Optional[str] = None
    submitted_at: Optional[datetime] = None
    grade: Optional[int | float] = None
    teacher_comment: Optional[str] = None
    graded_at: Optional[datetime] = None


# ---------------------------
# Snapshot of all four collections
# ---------------------------
class Snapshot(BaseModel):
    users: list[User] = Field(default_factory=list)
    classes: list[SchoolClass] = Field(default_factory=list)
    tasks: list[Task] = Field(default_factory=list)
    submissions: list[Submission] = Field(default_factory=list)
