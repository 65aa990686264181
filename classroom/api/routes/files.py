import os
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from classroom.api.deps import get_db, get_current_user
from classroom.models import AssignmentAttachment, Submission, User, UserRole
from classroom.services.classes import is_enrolled

router = APIRouter()


def _file_response(file_path: str, file_name: str, media_type: Optional[str] = None) -> FileResponse:
    if not os.path.exists(file_path):
        raise HTTPException(status_code=404, detail="File missing on disk")
    return FileResponse(file_path, filename=file_name, media_type=media_type)


@router.get("/files/attachments/{attachment_id}")
def get_attachment_file(
    attachment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    attachment = db.query(AssignmentAttachment).filter(AssignmentAttachment.id == attachment_id).first()
    if not attachment:
        raise HTTPException(status_code=404, detail="File not found")

    school_class = attachment.assignment.school_class
    if current_user.role == UserRole.teacher:
        allowed = school_class.teacher_id == current_user.id
    else:
        allowed = is_enrolled(db, school_class.id, current_user.id)
    if not allowed:
        raise HTTPException(status_code=404, detail="File not found")

    return _file_response(attachment.file_path, attachment.file_name, attachment.content_type)


@router.get("/files/submissions/{submission_id}")
def get_submission_file(
    submission_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    submission = db.query(Submission).filter(Submission.id == submission_id).first()
    if not submission or not submission.file_path:
        raise HTTPException(status_code=404, detail="File not found")

    allowed = (
        submission.student_id == current_user.id
        or submission.assignment.school_class.teacher_id == current_user.id
    )
    if not allowed:
        raise HTTPException(status_code=404, detail="File not found")

    return _file_response(submission.file_path, submission.file_name)
