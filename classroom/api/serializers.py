from typing import Optional

from classroom.models import Assignment, AssignmentAttachment, SchoolClass, Submission
from classroom.schemas.assignment import (
    AssignmentOut,
    AttachmentOut,
    StudentAssignmentOut,
    SubmissionOut,
    TeacherAssignmentOut,
)
from classroom.schemas.school_class import ClassOut, StudentClassOut, StudentOut, TeacherClassOut


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def attachment_out(attachment: AssignmentAttachment) -> AttachmentOut:
    return AttachmentOut(
        id=attachment.id,
        file_name=attachment.file_name,
        content_type=attachment.content_type,
        file_url=f"/files/attachments/{attachment.id}",
        uploaded_at=_iso(attachment.uploaded_at) or "",
    )


def submission_out(submission: Submission) -> SubmissionOut:
    return SubmissionOut(
        id=submission.id,
        assignment_id=submission.assignment_id,
        student_id=submission.student_id,
        student_name=submission.student.full_name,
        comment=submission.comment,
        file_name=submission.file_name,
        file_url=f"/files/submissions/{submission.id}" if submission.file_path else None,
        is_late=submission.is_late,
        submitted_at=_iso(submission.submitted_at) or "",
        status="graded" if submission.is_graded else "pending",
        grade=submission.grade,
        feedback=submission.feedback,
        graded_at=_iso(submission.graded_at),
    )


def _assignment_fields(assignment: Assignment) -> dict:
    return {
        "id": assignment.id,
        "class_id": assignment.class_id,
        "class_name": assignment.school_class.name,
        "title": assignment.title,
        "description": assignment.description,
        "due_date": assignment.due_date.isoformat(),
        "points": assignment.points,
        "is_overdue": assignment.is_overdue,
        "attachments": [attachment_out(a) for a in assignment.attachments],
        "created_at": _iso(assignment.created_at) or "",
    }


def assignment_out(assignment: Assignment) -> AssignmentOut:
    return AssignmentOut(**_assignment_fields(assignment))


def teacher_assignment_out(assignment: Assignment) -> TeacherAssignmentOut:
    return TeacherAssignmentOut(
        **_assignment_fields(assignment),
        submission_count=len(assignment.submissions),
        graded_count=sum(1 for s in assignment.submissions if s.is_graded),
    )


def student_assignment_out(assignment: Assignment, submission: Optional[Submission]) -> StudentAssignmentOut:
    return StudentAssignmentOut(
        **_assignment_fields(assignment),
        submitted=submission is not None,
        submission=submission_out(submission) if submission else None,
    )


def teacher_class_out(school_class: SchoolClass) -> TeacherClassOut:
    return TeacherClassOut(
        **ClassOut.model_validate(school_class).model_dump(),
        students=[StudentOut.model_validate(s) for s in school_class.students],
    )


def student_class_out(school_class: SchoolClass) -> StudentClassOut:
    return StudentClassOut(
        **ClassOut.model_validate(school_class).model_dump(),
        teacher_name=school_class.teacher.full_name,
    )
