from typing import Optional

from fastapi import status


class ServiceError(Exception):
    """Base error raised by the service layer.

    Carries the HTTP status the API answers with; the message becomes the
    ``detail`` of the response body.
    """

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Request could not be processed"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class ConflictError(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict"


class AuthenticationError(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Invalid credentials"


# accounts

class EmailAlreadyRegisteredError(ServiceError):
    default_detail = "Email already registered"


class InvalidCredentialsError(AuthenticationError):
    pass


class InvalidRefreshTokenError(AuthenticationError):
    default_detail = "Invalid or expired refresh token"


class SessionNotFoundError(NotFoundError):
    default_detail = "Session not found"


class InvalidResetTokenError(ServiceError):
    default_detail = "Invalid or expired password reset token"


class WrongPasswordError(ServiceError):
    default_detail = "Current password is incorrect"


# classes and enrollment

class ClassNotFoundError(NotFoundError):
    default_detail = "Class not found"


class StudentNotFoundError(NotFoundError):
    default_detail = "No user found with this email"


class NotAStudentError(ServiceError):
    default_detail = "Only students can be enrolled in a class"


class NotEnrolledError(NotFoundError):
    default_detail = "Student is not enrolled in this class"


class AlreadyEnrolledError(ConflictError):
    default_detail = "Student is already enrolled in this class"


class ClassFullError(ConflictError):
    default_detail = "Class is full"


class InvalidClassCodeError(NotFoundError):
    default_detail = "Invalid class code"


class CapacityBelowEnrollmentError(ServiceError):
    default_detail = "max_students cannot be lower than the number of enrolled students"


class ClassCodeExhaustedError(ServiceError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Could not allocate a unique class code"


# assignments and submissions

class AssignmentNotFoundError(NotFoundError):
    default_detail = "Assignment not found"


class SubmissionNotFoundError(NotFoundError):
    default_detail = "Submission not found"


class EmptySubmissionError(ServiceError):
    default_detail = "A submission needs a comment or a file"


class AlreadyGradedError(ConflictError):
    default_detail = "Submission already graded"


class AssignmentHasSubmissionsError(ConflictError):
    default_detail = "Cannot move an assignment that already has submissions"


class DuplicateSubmissionError(ConflictError):
    default_detail = "Submission already exists"


# files

class InvalidUploadError(ServiceError):
    default_detail = "Uploaded file has no name"


class FileTooLargeError(ServiceError):
    status_code = 413
    default_detail = "File is too large"
