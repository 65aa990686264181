from classroom.models.user import User, UserRole, UserSession, PasswordResetToken
from classroom.models.school_class import SchoolClass, Enrollment
from classroom.models.assignment import Assignment, AssignmentAttachment, Submission

__all__ = [
    "User",
    "UserRole",
    "UserSession",
    "PasswordResetToken",
    "SchoolClass",
    "Enrollment",
    "Assignment",
    "AssignmentAttachment",
    "Submission",
]
