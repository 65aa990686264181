from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from sqlalchemy.orm import Session

from classroom.api.deps import get_db, get_current_teacher
from classroom.api.serializers import (
    assignment_out,
    attachment_out,
    submission_out,
    teacher_assignment_out,
    teacher_class_out,
)
from classroom.models import Assignment, AssignmentAttachment, Submission, User
from classroom.schemas.assignment import (
    AssignmentCreate,
    AssignmentUpdate,
    AttachmentOut,
    GradeRequest,
    SubmissionOut,
    TeacherAssignmentOut,
)
from classroom.schemas.auth import OkResponse
from classroom.schemas.dashboard import TeacherDashboardOut
from classroom.schemas.school_class import (
    AddStudentRequest,
    ClassCreate,
    ClassOut,
    ClassUpdate,
    TeacherClassOut,
)
from classroom.services import classes as class_service
from classroom.services import storage
from classroom.services.dashboard import teacher_overview
from classroom.services.errors import (
    AssignmentHasSubmissionsError,
    AssignmentNotFoundError,
    SubmissionNotFoundError,
)
from classroom.services.submissions import grade_submission, list_assignment_submissions

router = APIRouter()


def get_teacher_assignment(db: Session, teacher: User, assignment_id: int) -> Assignment:
    assignment = (
        db.query(Assignment)
        .filter(Assignment.id == assignment_id, Assignment.teacher_id == teacher.id)
        .first()
    )
    if not assignment:
        raise AssignmentNotFoundError()
    return assignment


@router.get("/dashboard", response_model=TeacherDashboardOut)
def teacher_dashboard(
    db: Session = Depends(get_db),
    current_teacher: User = Depends(get_current_teacher),
):
    overview = teacher_overview(db, current_teacher)
    return TeacherDashboardOut(
        total_classes=overview["total_classes"],
        total_assignments=overview["total_assignments"],
        total_students=overview["total_students"],
        recent_classes=[ClassOut.model_validate(c) for c in overview["recent_classes"]],
        upcoming_assignments=[assignment_out(a) for a in overview["upcoming_assignments"]],
    )


@router.get("/classes", response_model=list[TeacherClassOut])
def teacher_classes(
    db: Session = Depends(get_db),
    current_teacher: User = Depends(get_current_teacher),
):
    return [teacher_class_out(c) for c in class_service.list_teacher_classes(db, current_teacher)]


@router.post("/classes", response_model=TeacherClassOut, status_code=201)
def create_class(
    payload: ClassCreate,
    db: Session = Depends(get_db),
    current_teacher: User = Depends(get_current_teacher),
):
    school_class = class_service.create_class(
        db,
        current_teacher,
        name=payload.name,
        description=payload.description,
        subject=payload.subject,
        schedule=payload.schedule,
        max_students=payload.max_students,
    )
    return teacher_class_out(school_class)


@router.get("/classes/{class_id}", response_model=TeacherClassOut)
def get_class(
    class_id: int,
    db: Session = Depends(get_db),
    current_teacher: User = Depends(get_current_teacher),
):
    return teacher_class_out(class_service.get_teacher_class(db, current_teacher, class_id))


@router.patch("/classes/{class_id}", response_model=TeacherClassOut)
def update_class(
    class_id: int,
    payload: ClassUpdate,
    db: Session = Depends(get_db),
    current_teacher: User = Depends(get_current_teacher),
):
    school_class = class_service.get_teacher_class(db, current_teacher, class_id)
    updates = payload.model_dump(exclude_unset=True)
    if "name" in updates and updates["name"] is None:
        raise HTTPException(status_code=400, detail="Class name cannot be empty")
    school_class = class_service.update_class(db, school_class, updates)
    return teacher_class_out(school_class)


@router.delete("/classes/{class_id}", response_model=OkResponse)
def delete_class(
    class_id: int,
    db: Session = Depends(get_db),
    current_teacher: User = Depends(get_current_teacher),
):
    school_class = class_service.get_teacher_class(db, current_teacher, class_id)
    class_service.delete_class(db, school_class)
    return OkResponse(ok=True)


@router.post("/classes/{class_id}/students", response_model=TeacherClassOut)
def add_student(
    class_id: int,
    payload: AddStudentRequest,
    db: Session = Depends(get_db),
    current_teacher: User = Depends(get_current_teacher),
):
    school_class = class_service.get_teacher_class(db, current_teacher, class_id)
    class_service.add_student_by_email(db, school_class, payload.email)
    db.refresh(school_class)
    return teacher_class_out(school_class)


@router.delete("/classes/{class_id}/students/{student_id}", response_model=TeacherClassOut)
def remove_student(
    class_id: int,
    student_id: int,
    db: Session = Depends(get_db),
    current_teacher: User = Depends(get_current_teacher),
):
    school_class = class_service.get_teacher_class(db, current_teacher, class_id)
    class_service.remove_student(db, school_class, student_id)
    db.refresh(school_class)
    return teacher_class_out(school_class)


@router.get("/assignments", response_model=list[TeacherAssignmentOut])
def list_assignments(
    class_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_teacher: User = Depends(get_current_teacher),
):
    if class_id is not None:
        class_ids = [class_service.get_teacher_class(db, current_teacher, class_id).id]
    else:
        class_ids = [c.id for c in class_service.list_teacher_classes(db, current_teacher)]
    assignments = class_service.list_class_assignments(db, class_ids)
    return [teacher_assignment_out(a) for a in assignments]


@router.post("/assignments", response_model=TeacherAssignmentOut, status_code=201)
def create_assignment(
    payload: AssignmentCreate,
    db: Session = Depends(get_db),
    current_teacher: User = Depends(get_current_teacher),
):
    school_class = class_service.get_teacher_class(db, current_teacher, payload.class_id)
    assignment = Assignment(
        class_id=school_class.id,
        teacher_id=current_teacher.id,
        title=payload.title,
        description=payload.description,
        due_date=payload.due_date,
        points=payload.points,
    )
    db.add(assignment)
    db.commit()
    db.refresh(assignment)
    return teacher_assignment_out(assignment)


@router.get("/assignments/{assignment_id}", response_model=TeacherAssignmentOut)
def get_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    current_teacher: User = Depends(get_current_teacher),
):
    return teacher_assignment_out(get_teacher_assignment(db, current_teacher, assignment_id))


@router.patch("/assignments/{assignment_id}", response_model=TeacherAssignmentOut)
def update_assignment(
    assignment_id: int,
    payload: AssignmentUpdate,
    db: Session = Depends(get_db),
    current_teacher: User = Depends(get_current_teacher),
):
    assignment = get_teacher_assignment(db, current_teacher, assignment_id)

    if payload.class_id is not None and payload.class_id != assignment.class_id:
        target_class = class_service.get_teacher_class(db, current_teacher, payload.class_id)
        # submitters must stay enrolled in the assignment's class
        if assignment.submissions:
            raise AssignmentHasSubmissionsError()
        assignment.class_id = target_class.id
    if payload.title is not None:
        assignment.title = payload.title
    if payload.description is not None:
        assignment.description = payload.description
    if payload.due_date is not None:
        assignment.due_date = payload.due_date
    if payload.points is not None:
        assignment.points = payload.points

    db.commit()
    db.refresh(assignment)
    return teacher_assignment_out(assignment)


@router.delete("/assignments/{assignment_id}", response_model=OkResponse)
def delete_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    current_teacher: User = Depends(get_current_teacher),
):
    assignment = get_teacher_assignment(db, current_teacher, assignment_id)
    file_paths = [a.file_path for a in assignment.attachments]
    file_paths += [s.file_path for s in assignment.submissions if s.file_path]
    db.delete(assignment)
    db.commit()
    for file_path in file_paths:
        storage.delete_file(file_path)
    return OkResponse(ok=True)


@router.post("/assignments/{assignment_id}/attachments", response_model=AttachmentOut, status_code=201)
def upload_attachment(
    assignment_id: int,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_teacher: User = Depends(get_current_teacher),
):
    assignment = get_teacher_assignment(db, current_teacher, assignment_id)
    stored = storage.save_upload(file, f"attachments/{assignment.id}")
    attachment = AssignmentAttachment(
        assignment_id=assignment.id,
        file_name=stored.file_name,
        file_path=stored.file_path,
        content_type=stored.content_type,
    )
    db.add(attachment)
    db.commit()
    db.refresh(attachment)
    return attachment_out(attachment)


@router.delete("/assignments/{assignment_id}/attachments/{attachment_id}", response_model=OkResponse)
def delete_attachment(
    assignment_id: int,
    attachment_id: int,
    db: Session = Depends(get_db),
    current_teacher: User = Depends(get_current_teacher),
):
    assignment = get_teacher_assignment(db, current_teacher, assignment_id)
    attachment = (
        db.query(AssignmentAttachment)
        .filter(AssignmentAttachment.id == attachment_id, AssignmentAttachment.assignment_id == assignment.id)
        .first()
    )
    if not attachment:
        raise HTTPException(status_code=404, detail="Attachment not found")
    file_path = attachment.file_path
    db.delete(attachment)
    db.commit()
    storage.delete_file(file_path)
    return OkResponse(ok=True)


@router.get("/assignments/{assignment_id}/submissions", response_model=list[SubmissionOut])
def list_submissions(
    assignment_id: int,
    db: Session = Depends(get_db),
    current_teacher: User = Depends(get_current_teacher),
):
    assignment = get_teacher_assignment(db, current_teacher, assignment_id)
    return [submission_out(s) for s in list_assignment_submissions(db, assignment.id)]


@router.patch("/submissions/{submission_id}", response_model=SubmissionOut)
def grade(
    submission_id: int,
    payload: GradeRequest,
    db: Session = Depends(get_db),
    current_teacher: User = Depends(get_current_teacher),
):
    submission = (
        db.query(Submission)
        .join(Assignment, Submission.assignment_id == Assignment.id)
        .filter(Submission.id == submission_id, Assignment.teacher_id == current_teacher.id)
        .first()
    )
    if not submission:
        raise SubmissionNotFoundError()
    submission = grade_submission(db, submission, current_teacher, payload.grade, payload.feedback)
    return submission_out(submission)
