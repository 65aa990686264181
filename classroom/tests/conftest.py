from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from classroom.api.deps import get_db
from classroom.core.config import get_settings
from classroom.core.security import hash_password
from classroom.db.base import Base
from classroom.models import Assignment, User, UserRole
from classroom.services import auth as auth_service
from classroom.services import classes as class_service


@pytest.fixture(autouse=True)
def settings(tmp_path, monkeypatch):
    monkeypatch.setenv("FILES_DIR", str(tmp_path / "uploads"))
    monkeypatch.setenv("MAX_UPLOAD_BYTES", "2048")
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture()
def db_engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture()
def db_session(db_engine):
    session_local = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    db = session_local()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(db_session):
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    from classroom.main import app

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_user(db, email, full_name, role, password="secret123"):
    user = User(
        email=email,
        full_name=full_name,
        password_hash=hash_password(password),
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user):
    return {"Authorization": f"Bearer {auth_service.build_access_token(user)}"}


@pytest.fixture()
def teacher(db_session):
    return make_user(db_session, "teacher@example.com", "Grace Hopper", UserRole.teacher)


@pytest.fixture()
def other_teacher(db_session):
    return make_user(db_session, "other.teacher@example.com", "Edsger Dijkstra", UserRole.teacher)


@pytest.fixture()
def student(db_session):
    return make_user(db_session, "ada@example.com", "Ada Lovelace", UserRole.student)


@pytest.fixture()
def other_student(db_session):
    return make_user(db_session, "alan@example.com", "Alan Turing", UserRole.student)


@pytest.fixture()
def school_class(db_session, teacher):
    return class_service.create_class(
        db_session,
        teacher,
        name="Algebra I",
        description="Linear equations",
        subject="Mathematics",
        schedule="Mon 09:00",
        max_students=2,
    )


@pytest.fixture()
def enrolled_class(db_session, school_class, student):
    return class_service.enroll_student(db_session, school_class, student)


@pytest.fixture()
def assignment(db_session, enrolled_class, teacher):
    assignment = Assignment(
        class_id=enrolled_class.id,
        teacher_id=teacher.id,
        title="Worksheet 1",
        description="Page 12",
        due_date=datetime.utcnow() + timedelta(days=7),
        points=100,
    )
    db_session.add(assignment)
    db_session.commit()
    db_session.refresh(assignment)
    return assignment


@pytest.fixture()
def past_assignment(db_session, enrolled_class, teacher):
    assignment = Assignment(
        class_id=enrolled_class.id,
        teacher_id=teacher.id,
        title="Old worksheet",
        due_date=datetime.utcnow() - timedelta(days=1),
        points=50,
    )
    db_session.add(assignment)
    db_session.commit()
    db_session.refresh(assignment)
    return assignment


@pytest.fixture()
def auth_for():
    return auth_headers


@pytest.fixture()
def create_user(db_session):
    def _create(email, full_name, role=UserRole.student, password="secret123"):
        return make_user(db_session, email, full_name, role, password)

    return _create
