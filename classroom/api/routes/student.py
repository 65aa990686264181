from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session

from classroom.api.deps import get_db, get_current_student
from classroom.api.serializers import student_assignment_out, student_class_out, submission_out
from classroom.models import Assignment, Enrollment, Submission, User
from classroom.schemas.assignment import (
    GradedAssignmentsResponse,
    GradedItem,
    StudentAssignmentOut,
    SubmissionOut,
)
from classroom.schemas.dashboard import StudentDashboardOut
from classroom.schemas.school_class import JoinClassRequest, StudentClassOut
from classroom.services import classes as class_service
from classroom.services.dashboard import student_overview
from classroom.services.errors import AssignmentNotFoundError, ClassNotFoundError
from classroom.services.submissions import get_student_submission, graded_submissions, submit_assignment

router = APIRouter()


def get_student_assignment(db: Session, student: User, assignment_id: int) -> Assignment:
    assignment = (
        db.query(Assignment)
        .join(Enrollment, Enrollment.class_id == Assignment.class_id)
        .filter(Assignment.id == assignment_id, Enrollment.student_id == student.id)
        .first()
    )
    if not assignment:
        raise AssignmentNotFoundError()
    return assignment


def submissions_by_assignment(db: Session, student: User) -> dict:
    submissions = db.query(Submission).filter(Submission.student_id == student.id).all()
    return {s.assignment_id: s for s in submissions}


@router.get("/dashboard", response_model=StudentDashboardOut)
def student_dashboard(
    db: Session = Depends(get_db),
    current_student: User = Depends(get_current_student),
):
    overview = student_overview(db, current_student)
    return StudentDashboardOut(
        enrolled_classes=overview["enrolled_classes"],
        pending_assignments=overview["pending_assignments"],
        completed_assignments=overview["completed_assignments"],
        graded_assignments=overview["graded_assignments"],
        average_grade=overview["average_grade"],
        upcoming_assignments=[student_assignment_out(a, None) for a in overview["upcoming_assignments"]],
    )


@router.get("/classes", response_model=list[StudentClassOut])
def student_classes(
    db: Session = Depends(get_db),
    current_student: User = Depends(get_current_student),
):
    return [student_class_out(c) for c in class_service.list_student_classes(db, current_student)]


@router.post("/classes/join", response_model=StudentClassOut)
def join_class(
    payload: JoinClassRequest,
    db: Session = Depends(get_db),
    current_student: User = Depends(get_current_student),
):
    school_class = class_service.join_class_by_code(db, current_student, payload.class_code)
    return student_class_out(school_class)


@router.get("/assignments", response_model=list[StudentAssignmentOut])
def student_assignments(
    class_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_student: User = Depends(get_current_student),
):
    class_ids = [c.id for c in class_service.list_student_classes(db, current_student)]
    if class_id is not None:
        if class_id not in class_ids:
            raise ClassNotFoundError()
        class_ids = [class_id]

    submissions = submissions_by_assignment(db, current_student)
    return [
        student_assignment_out(a, submissions.get(a.id))
        for a in class_service.list_class_assignments(db, class_ids)
    ]


@router.get("/assignments/{assignment_id}", response_model=StudentAssignmentOut)
def student_assignment_detail(
    assignment_id: int,
    db: Session = Depends(get_db),
    current_student: User = Depends(get_current_student),
):
    assignment = get_student_assignment(db, current_student, assignment_id)
    submission = get_student_submission(db, assignment.id, current_student.id)
    return student_assignment_out(assignment, submission)


@router.post("/assignments/{assignment_id}/submit", response_model=SubmissionOut, status_code=201)
def submit(
    assignment_id: int,
    comment: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_student: User = Depends(get_current_student),
):
    assignment = get_student_assignment(db, current_student, assignment_id)
    submission = submit_assignment(db, assignment, current_student, comment=comment, upload=file)
    return submission_out(submission)


@router.get("/grades", response_model=GradedAssignmentsResponse)
def student_grades(
    db: Session = Depends(get_db),
    current_student: User = Depends(get_current_student),
):
    average, submissions = graded_submissions(db, current_student)
    items = []
    for submission in submissions:
        assignment = submission.assignment
        items.append(
            GradedItem(
                submission_id=submission.id,
                assignment_id=assignment.id,
                assignment_title=assignment.title,
                class_name=assignment.school_class.name,
                points=assignment.points,
                grade=submission.grade,
                feedback=submission.feedback,
                is_late=submission.is_late,
                submitted_at=submission.submitted_at.isoformat(),
                graded_at=submission.graded_at.isoformat(),
            )
        )
    return GradedAssignmentsResponse(average_grade=average, items=items)
