import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from classroom.core.config import get_settings
from classroom.core.logging_config import configure_logging
from classroom.core.security import hash_password
from classroom.db.base import Base
from classroom.db.session import SessionLocal, engine
from classroom.models import Assignment, Enrollment, SchoolClass, User, UserRole
from classroom.services.classes import generate_class_code

logger = logging.getLogger(__name__)


def seed_demo_data(db: Optional[Session] = None) -> None:
    own_session = db is None
    if own_session:
        Base.metadata.create_all(bind=engine)
        db = SessionLocal()
    try:
        if db.query(User).first():
            logger.info("Database already has users, skipping demo data")
            return

        teacher = User(
            email="teacher@example.com",
            full_name="Grace Hopper",
            password_hash=hash_password("teacher123"),
            role=UserRole.teacher,
        )
        student_1 = User(
            email="ada@example.com",
            full_name="Ada Lovelace",
            password_hash=hash_password("student123"),
            role=UserRole.student,
        )
        student_2 = User(
            email="alan@example.com",
            full_name="Alan Turing",
            password_hash=hash_password("student123"),
            role=UserRole.student,
        )
        db.add_all([teacher, student_1, student_2])
        db.flush()

        algebra = SchoolClass(
            teacher_id=teacher.id,
            name="Algebra I",
            description="Linear equations and functions",
            subject="Mathematics",
            schedule="Mon, Wed 09:00",
            class_code=generate_class_code(),
            max_students=30,
        )
        programming = SchoolClass(
            teacher_id=teacher.id,
            name="Intro to Programming",
            description="First steps with Python",
            subject="Computer Science",
            schedule="Fri 11:00",
            class_code=generate_class_code(),
        )
        db.add_all([algebra, programming])
        db.flush()

        db.add_all([
            Enrollment(class_id=algebra.id, student_id=student_1.id),
            Enrollment(class_id=algebra.id, student_id=student_2.id),
            Enrollment(class_id=programming.id, student_id=student_1.id),
        ])

        db.add_all([
            Assignment(
                class_id=algebra.id,
                teacher_id=teacher.id,
                title="Worksheet 1",
                description="Solve the equations on page 12",
                due_date=datetime.utcnow() + timedelta(days=7),
                points=100,
            ),
            Assignment(
                class_id=programming.id,
                teacher_id=teacher.id,
                title="Hello, world",
                description="Submit a script that prints a greeting",
                due_date=datetime.utcnow() + timedelta(days=3),
                points=10,
            ),
        ])

        db.commit()
        logger.info("Seeded demo data (algebra code %s)", algebra.class_code)
    finally:
        if own_session:
            db.close()


if __name__ == "__main__":
    configure_logging(get_settings())
    seed_demo_data()
