from datetime import datetime

from sqlalchemy.orm import Session

from classroom.models import Submission, User
from classroom.services.classes import (
    count_class_students,
    list_class_assignments,
    list_student_classes,
    list_teacher_classes,
)

UPCOMING_LIMIT = 5


def teacher_overview(db: Session, teacher: User) -> dict:
    classes = list_teacher_classes(db, teacher)
    class_ids = [c.id for c in classes]
    assignments = list_class_assignments(db, class_ids)
    now = datetime.utcnow()

    return {
        "total_classes": len(classes),
        "total_assignments": len(assignments),
        "total_students": count_class_students(db, class_ids),
        "recent_classes": sorted(classes, key=lambda c: c.created_at, reverse=True)[:UPCOMING_LIMIT],
        "upcoming_assignments": [a for a in assignments if a.due_date >= now][:UPCOMING_LIMIT],
    }


def student_overview(db: Session, student: User) -> dict:
    classes = list_student_classes(db, student)
    assignments = list_class_assignments(db, [c.id for c in classes])
    submissions = {
        s.assignment_id: s
        for s in db.query(Submission).filter(Submission.student_id == student.id).all()
    }
    now = datetime.utcnow()

    pending = [a for a in assignments if a.id not in submissions and a.due_date >= now]
    completed = [a for a in assignments if a.id in submissions]
    graded = [s.grade for s in submissions.values() if s.grade is not None]
    average = round(sum(graded) / len(graded), 2) if graded else 0.0

    return {
        "enrolled_classes": len(classes),
        "pending_assignments": len(pending),
        "completed_assignments": len(completed),
        "graded_assignments": len(graded),
        "average_grade": average,
        "upcoming_assignments": pending[:UPCOMING_LIMIT],
    }
