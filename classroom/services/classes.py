import logging
import secrets
import string
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from classroom.core.config import get_settings
from classroom.models import Assignment, Enrollment, SchoolClass, User, UserRole
from classroom.services import storage
from classroom.services.auth import get_user_by_email
from classroom.services.errors import (
    AlreadyEnrolledError,
    CapacityBelowEnrollmentError,
    ClassCodeExhaustedError,
    ClassFullError,
    ClassNotFoundError,
    InvalidClassCodeError,
    NotAStudentError,
    NotEnrolledError,
    StudentNotFoundError,
)

logger = logging.getLogger(__name__)

CLASS_CODE_ALPHABET = string.ascii_uppercase + string.digits
MAX_CODE_ATTEMPTS = 10


def generate_class_code(length: Optional[int] = None) -> str:
    length = length or get_settings().class_code_length
    return "".join(secrets.choice(CLASS_CODE_ALPHABET) for _ in range(length))


def normalize_class_code(class_code: str) -> str:
    return class_code.strip().upper()


def list_teacher_classes(db: Session, teacher: User) -> List[SchoolClass]:
    return (
        db.query(SchoolClass)
        .filter(SchoolClass.teacher_id == teacher.id)
        .order_by(SchoolClass.created_at, SchoolClass.id)
        .all()
    )


def list_student_classes(db: Session, student: User) -> List[SchoolClass]:
    return (
        db.query(SchoolClass)
        .join(Enrollment, Enrollment.class_id == SchoolClass.id)
        .filter(Enrollment.student_id == student.id)
        .order_by(Enrollment.joined_at, SchoolClass.id)
        .all()
    )


def get_teacher_class(db: Session, teacher: User, class_id: int) -> SchoolClass:
    school_class = (
        db.query(SchoolClass)
        .filter(SchoolClass.id == class_id, SchoolClass.teacher_id == teacher.id)
        .first()
    )
    if not school_class:
        raise ClassNotFoundError()
    return school_class


def is_enrolled(db: Session, class_id: int, student_id: int) -> bool:
    return (
        db.query(Enrollment)
        .filter(Enrollment.class_id == class_id, Enrollment.student_id == student_id)
        .first()
        is not None
    )


def create_class(
    db: Session,
    teacher: User,
    name: str,
    description: Optional[str] = None,
    subject: Optional[str] = None,
    schedule: Optional[str] = None,
    max_students: Optional[int] = None,
) -> SchoolClass:
    for _ in range(MAX_CODE_ATTEMPTS):
        class_code = generate_class_code()
        if db.query(SchoolClass.id).filter(SchoolClass.class_code == class_code).first():
            continue

        school_class = SchoolClass(
            teacher_id=teacher.id,
            name=name,
            description=description,
            subject=subject,
            schedule=schedule,
            max_students=max_students,
            class_code=class_code,
        )
        db.add(school_class)
        try:
            db.commit()
        except IntegrityError:
            # another request took the same code between the check and the insert
            db.rollback()
            continue
        db.refresh(school_class)
        logger.info("Teacher %s created class %s (%s)", teacher.id, school_class.id, class_code)
        return school_class

    raise ClassCodeExhaustedError()


def update_class(db: Session, school_class: SchoolClass, updates: dict) -> SchoolClass:
    if "max_students" in updates:
        max_students = updates["max_students"]
        if max_students is not None and max_students < len(school_class.enrollments):
            raise CapacityBelowEnrollmentError()

    for field, value in updates.items():
        setattr(school_class, field, value)
    db.commit()
    db.refresh(school_class)
    return school_class


def delete_class(db: Session, school_class: SchoolClass) -> None:
    file_paths = []
    for assignment in school_class.assignments:
        file_paths.extend(attachment.file_path for attachment in assignment.attachments)
        file_paths.extend(s.file_path for s in assignment.submissions if s.file_path)

    class_id = school_class.id
    db.delete(school_class)
    db.commit()
    logger.info("Deleted class %s", class_id)

    for file_path in file_paths:
        storage.delete_file(file_path)


def enroll_student(
    db: Session,
    school_class: SchoolClass,
    student: User,
    already_enrolled_detail: Optional[str] = None,
) -> SchoolClass:
    """Add ``student`` to ``school_class`` unless they are in it or it is full."""
    # row lock on backends that support it, so two joins cannot both take the last seat
    locked_class = (
        db.query(SchoolClass)
        .filter(SchoolClass.id == school_class.id)
        .with_for_update()
        .one()
    )

    if is_enrolled(db, locked_class.id, student.id):
        raise AlreadyEnrolledError(already_enrolled_detail)

    enrolled = db.query(Enrollment).filter(Enrollment.class_id == locked_class.id).count()
    if locked_class.max_students is not None and enrolled >= locked_class.max_students:
        raise ClassFullError()

    db.add(Enrollment(class_id=locked_class.id, student_id=student.id))
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise AlreadyEnrolledError(already_enrolled_detail) from exc

    db.refresh(locked_class)
    logger.info("Student %s enrolled in class %s", student.id, locked_class.id)
    return locked_class


def add_student_by_email(db: Session, school_class: SchoolClass, student_email: str) -> User:
    student = get_user_by_email(db, student_email)
    if not student:
        raise StudentNotFoundError()
    if student.role != UserRole.student:
        raise NotAStudentError()

    enroll_student(db, school_class, student)
    return student


def remove_student(db: Session, school_class: SchoolClass, student_id: int) -> None:
    enrollment = (
        db.query(Enrollment)
        .filter(Enrollment.class_id == school_class.id, Enrollment.student_id == student_id)
        .first()
    )
    if not enrollment:
        raise NotEnrolledError()
    db.delete(enrollment)
    db.commit()
    logger.info("Student %s removed from class %s", student_id, school_class.id)


def join_class_by_code(db: Session, student: User, class_code: str) -> SchoolClass:
    school_class = (
        db.query(SchoolClass)
        .filter(SchoolClass.class_code == normalize_class_code(class_code))
        .first()
    )
    if not school_class:
        raise InvalidClassCodeError()

    return enroll_student(
        db,
        school_class,
        student,
        already_enrolled_detail="You are already enrolled in this class",
    )


def count_class_students(db: Session, class_ids: List[int]) -> int:
    if not class_ids:
        return 0
    return db.query(Enrollment).filter(Enrollment.class_id.in_(class_ids)).count()


def list_class_assignments(db: Session, class_ids: List[int]) -> List[Assignment]:
    if not class_ids:
        return []
    return (
        db.query(Assignment)
        .filter(Assignment.class_id.in_(class_ids))
        .order_by(Assignment.due_date, Assignment.id)
        .all()
    )
