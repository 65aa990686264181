from typing import List

from pydantic import BaseModel

from classroom.schemas.assignment import AssignmentOut, StudentAssignmentOut
from classroom.schemas.school_class import ClassOut


class TeacherDashboardOut(BaseModel):
    total_classes: int
    total_assignments: int
    total_students: int
    recent_classes: List[ClassOut]
    upcoming_assignments: List[AssignmentOut]


class StudentDashboardOut(BaseModel):
    enrolled_classes: int
    pending_assignments: int
    completed_assignments: int
    graded_assignments: int
    average_grade: float
    upcoming_assignments: List[StudentAssignmentOut]
