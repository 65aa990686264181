from classroom.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    LoginResponse,
    TokenResponse,
    RefreshTokenRequest,
    LogoutRequest,
    PasswordResetRequest,
    PasswordResetRequestResponse,
    PasswordReset,
    ProfileUpdate,
    PasswordChange,
    OkResponse,
    UserOut,
)
from classroom.schemas.school_class import (
    StudentOut,
    ClassCreate,
    ClassUpdate,
    ClassOut,
    TeacherClassOut,
    StudentClassOut,
    AddStudentRequest,
    JoinClassRequest,
)
from classroom.schemas.assignment import (
    AssignmentCreate,
    AssignmentUpdate,
    AttachmentOut,
    SubmissionOut,
    AssignmentOut,
    TeacherAssignmentOut,
    StudentAssignmentOut,
    GradeRequest,
    GradedItem,
    GradedAssignmentsResponse,
)
from classroom.schemas.dashboard import TeacherDashboardOut, StudentDashboardOut

__all__ = [
    "RegisterRequest",
    "LoginRequest",
    "LoginResponse",
    "TokenResponse",
    "RefreshTokenRequest",
    "LogoutRequest",
    "PasswordResetRequest",
    "PasswordResetRequestResponse",
    "PasswordReset",
    "ProfileUpdate",
    "PasswordChange",
    "OkResponse",
    "UserOut",
    "StudentOut",
    "ClassCreate",
    "ClassUpdate",
    "ClassOut",
    "TeacherClassOut",
    "StudentClassOut",
    "AddStudentRequest",
    "JoinClassRequest",
    "AssignmentCreate",
    "AssignmentUpdate",
    "AttachmentOut",
    "SubmissionOut",
    "AssignmentOut",
    "TeacherAssignmentOut",
    "StudentAssignmentOut",
    "GradeRequest",
    "GradedItem",
    "GradedAssignmentsResponse",
    "TeacherDashboardOut",
    "StudentDashboardOut",
]
