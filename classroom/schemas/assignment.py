from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


def _to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    # due dates are stored as naive UTC
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class AssignmentCreate(BaseModel):
    class_id: int
    title: str = Field(min_length=1)
    description: Optional[str] = None
    due_date: datetime
    points: int = Field(default=100, gt=0)

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, value):
        return _to_naive_utc(value)


class AssignmentUpdate(BaseModel):
    class_id: Optional[int] = None
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    points: Optional[int] = Field(default=None, gt=0)

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, value):
        return _to_naive_utc(value)


class AttachmentOut(BaseModel):
    id: int
    file_name: str
    content_type: Optional[str] = None
    file_url: str
    uploaded_at: str


class SubmissionOut(BaseModel):
    id: int
    assignment_id: int
    student_id: int
    student_name: str
    comment: Optional[str] = None
    file_name: Optional[str] = None
    file_url: Optional[str] = None
    is_late: bool
    submitted_at: str
    status: str
    grade: Optional[float] = None
    feedback: Optional[str] = None
    graded_at: Optional[str] = None


class AssignmentOut(BaseModel):
    id: int
    class_id: int
    class_name: str
    title: str
    description: Optional[str] = None
    due_date: str
    points: int
    is_overdue: bool
    attachments: List[AttachmentOut]
    created_at: str


class TeacherAssignmentOut(AssignmentOut):
    submission_count: int
    graded_count: int


class StudentAssignmentOut(AssignmentOut):
    submitted: bool
    submission: Optional[SubmissionOut] = None


class GradeRequest(BaseModel):
    grade: float = Field(ge=0, le=100)
    feedback: str = Field(min_length=1)


class GradedItem(BaseModel):
    submission_id: int
    assignment_id: int
    assignment_title: str
    class_name: str
    points: int
    grade: float
    feedback: Optional[str] = None
    is_late: bool
    submitted_at: str
    graded_at: str


class GradedAssignmentsResponse(BaseModel):
    average_grade: float
    items: List[GradedItem]
