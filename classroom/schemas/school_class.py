from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class StudentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    full_name: str


class ClassCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    subject: Optional[str] = None
    schedule: Optional[str] = None
    max_students: Optional[int] = Field(default=None, ge=1)


class ClassUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    subject: Optional[str] = None
    schedule: Optional[str] = None
    max_students: Optional[int] = Field(default=None, ge=1)


class ClassOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    teacher_id: int
    name: str
    description: Optional[str] = None
    subject: Optional[str] = None
    schedule: Optional[str] = None
    class_code: str
    max_students: Optional[int] = None
    student_ids: List[int]
    created_at: Optional[datetime] = None


class TeacherClassOut(ClassOut):
    students: List[StudentOut]


class StudentClassOut(ClassOut):
    teacher_name: str


class AddStudentRequest(BaseModel):
    email: EmailStr


class JoinClassRequest(BaseModel):
    class_code: str = Field(min_length=1, max_length=32)
