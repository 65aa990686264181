import logging
from datetime import datetime
from typing import List, Optional, Tuple

from fastapi import UploadFile
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from classroom.models import Assignment, Submission, User
from classroom.services import storage
from classroom.services.errors import (
    AlreadyGradedError,
    DuplicateSubmissionError,
    EmptySubmissionError,
)

logger = logging.getLogger(__name__)


def get_student_submission(db: Session, assignment_id: int, student_id: int) -> Optional[Submission]:
    return (
        db.query(Submission)
        .filter(Submission.assignment_id == assignment_id, Submission.student_id == student_id)
        .first()
    )


def submit_assignment(
    db: Session,
    assignment: Assignment,
    student: User,
    comment: Optional[str] = None,
    upload: Optional[UploadFile] = None,
) -> Submission:
    """Store the student's work for an assignment.

    A student holds one submission per assignment. Submitting again replaces
    the previous work as long as it has not been graded.
    """
    comment = comment.strip() if comment else None
    if upload is not None and not upload.filename:
        upload = None
    if not comment and upload is None:
        raise EmptySubmissionError()

    existing = get_student_submission(db, assignment.id, student.id)
    if existing and existing.is_graded:
        raise AlreadyGradedError()

    stored = None
    if upload is not None:
        stored = storage.save_upload(upload, f"submissions/{assignment.id}/{student.id}")

    now = datetime.utcnow()
    previous_file = None
    if existing:
        submission = existing
        previous_file = existing.file_path
    else:
        submission = Submission(assignment_id=assignment.id, student_id=student.id)
        db.add(submission)

    submission.comment = comment
    submission.file_name = stored.file_name if stored else None
    submission.file_path = stored.file_path if stored else None
    submission.submitted_at = now
    submission.is_late = now > assignment.due_date

    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if stored:
            storage.delete_file(stored.file_path)
        raise DuplicateSubmissionError() from exc
    db.refresh(submission)

    if previous_file and previous_file != submission.file_path:
        storage.delete_file(previous_file)

    logger.info(
        "Student %s %s assignment %s%s",
        student.id,
        "resubmitted" if existing else "submitted",
        assignment.id,
        " (late)" if submission.is_late else "",
    )
    return submission


def grade_submission(db: Session, submission: Submission, grader: User, grade: float, feedback: str) -> Submission:
    submission.grade = grade
    submission.feedback = feedback
    submission.graded_by = grader.id
    submission.graded_at = datetime.utcnow()
    db.commit()
    db.refresh(submission)
    logger.info("Teacher %s graded submission %s with %s", grader.id, submission.id, grade)
    return submission


def list_assignment_submissions(db: Session, assignment_id: int) -> List[Submission]:
    return (
        db.query(Submission)
        .filter(Submission.assignment_id == assignment_id)
        .order_by(Submission.submitted_at.desc(), Submission.id.desc())
        .all()
    )


def graded_submissions(db: Session, student: User) -> Tuple[float, List[Submission]]:
    submissions = (
        db.query(Submission)
        .filter(Submission.student_id == student.id, Submission.grade.isnot(None))
        .order_by(Submission.graded_at.desc(), Submission.id.desc())
        .all()
    )
    if submissions:
        average = sum(s.grade for s in submissions) / len(submissions)
    else:
        average = 0.0
    return round(average, 2), submissions
