from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from classroom.db.base import Base


class SchoolClass(Base):
    __tablename__ = "classes"

    id = Column(Integer, primary_key=True)
    teacher_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    subject = Column(String, nullable=True)
    schedule = Column(String, nullable=True)
    class_code = Column(String, unique=True, index=True, nullable=False)
    # None means the class takes any number of students
    max_students = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    teacher = relationship("User", back_populates="classes_taught")
    enrollments = relationship(
        "Enrollment",
        back_populates="school_class",
        cascade="all, delete-orphan",
        order_by="Enrollment.joined_at",
    )
    assignments = relationship("Assignment", back_populates="school_class", cascade="all, delete-orphan")

    @property
    def student_ids(self):
        return [enrollment.student_id for enrollment in self.enrollments]

    @property
    def students(self):
        return [enrollment.student for enrollment in self.enrollments]


class Enrollment(Base):
    __tablename__ = "enrollments"
    __table_args__ = (UniqueConstraint("class_id", "student_id", name="uq_enrollment_class_student"),)

    id = Column(Integer, primary_key=True)
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    joined_at = Column(DateTime, default=datetime.utcnow)

    school_class = relationship("SchoolClass", back_populates="enrollments")
    student = relationship("User", back_populates="enrollments")
