import os

# Settings are cached on first import; point them at a throwaway database first.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.api.deps import get_db
from app.core.security import get_password_hash
from app.db.base import Base
from app.main import app
from app.models.leave_request import LeaveRequest, LeaveSession, LeaveStatus, LeaveType
from app.models.staff import Staff
from app.models.timetable import TimetableSlot
from app.models.user import User, UserRole

DEFAULT_PASSWORD = "password123"


@pytest.fixture()
def engine():
    engine = create_engine( #create isolated DB
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine) #this base contains all the SQLAlchemy models and creates the tables inside the in-memory db
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory): #fake http client
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(db):
    def _make_user(name: str, role: UserRole = UserRole.staff, password: str = DEFAULT_PASSWORD) -> User:
        user = User(
            name=name,
            email=f"{name.lower().replace(' ', '.')}@college.edu",
            hashed_password=get_password_hash(password),
            role=role,
            is_active=True,
        )
        db.add(user)
        db.commit()
        return user

    return _make_user


@pytest.fixture()
def make_staff(db, make_user):
    def _make_staff(name: str, *, with_login: bool = True, department: str = "CSE") -> Staff:
        user = make_user(name) if with_login else None
        staff = Staff(
            user_id=user.id if user is not None else None,
            name=name,
            email=f"{name.lower().replace(' ', '.')}@college.edu",
            department=department,
            is_active=True,
        )
        db.add(staff)
        db.commit()
        return staff

    return _make_staff


@pytest.fixture()
def make_slot(db):
    def _make_slot(staff: Staff, day: str, start: str, end: str, course: str = "Data Structures") -> TimetableSlot:
        slot = TimetableSlot(
            staff_id=staff.id,
            course_name=course,
            day_of_week=day,
            start_time=start,
            end_time=end,
            is_active=True,
        )
        db.add(slot)
        db.commit()
        return slot

    return _make_slot


@pytest.fixture()
def make_leave(db):
    def _make_leave(
        staff: Staff,
        start: date,
        end: date | None = None,
        *,
        leave_type: LeaveType = LeaveType.full_day,
        session: LeaveSession | None = None,
        status: LeaveStatus = LeaveStatus.pending,
    ) -> LeaveRequest:
        leave = LeaveRequest(
            staff_id=staff.id,
            leave_type=leave_type,
            session=session,
            start_date=start,
            end_date=end or start,
            reason="Family function",
            status=status,
        )
        db.add(leave)
        db.commit()
        return leave

    return _make_leave


@pytest.fixture()
def admin(make_user):
    return make_user("Admin User", role=UserRole.admin)


@pytest.fixture()
def auth_headers(client):
    def _auth_headers(email: str, password: str = DEFAULT_PASSWORD) -> dict[str, str]:
        response = client.post("/api/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return _auth_headers
