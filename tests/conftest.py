import os

os.environ.setdefault("POINTSLEDGER_DATABASE_URL", "sqlite://")
os.environ.setdefault("POINTSLEDGER_SCHEDULER_ENABLED", "false")

from datetime import date  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from pointsledger.core.database import Base, get_db  # noqa: E402
from pointsledger.main import app  # noqa: E402
from pointsledger.models import (  # noqa: E402
    ExperienceTransaction,
    Period,
    PeriodStatus,
    PointsTransaction,
    TransactionType,
    User,
    UserRole,
)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.pop(get_db, None)


class LedgerFactory:
    """Inserts rows directly, bypassing the write-path rules."""

    def __init__(self, session):
        self.session = session

    def user(self, username, role=UserRole.STUDENT, tutor=None, **fields):
        user = User(id=username, username=username, role=role, tutor_id=tutor.id if tutor else None, **fields)
        self.session.add(user)
        self.session.flush()
        return user

    def period(self, name, status=PeriodStatus.PLANNED, start=date(2025, 9, 15), end=None, total_weeks=0):
        period = Period(name=name, status=status, start_date=start, end_date=end, total_weeks=total_weeks)
        self.session.add(period)
        self.session.flush()
        return period

    def points(self, student, tutor, period, points, kind=TransactionType.AWARD, rolled_back=False, reason=None):
        row = PointsTransaction(
            student_id=student.id,
            tutor_id=tutor.id,
            period_id=period.id,
            points=points,
            type=kind,
            reason=reason,
            rolled_back=rolled_back,
        )
        self.session.add(row)
        self.session.flush()
        return row

    def experience(self, student, tutor, period, amount, rolled_back=False):
        row = ExperienceTransaction(
            student_id=student.id,
            tutor_id=tutor.id,
            period_id=period.id,
            amount=amount,
            rolled_back=rolled_back,
        )
        self.session.add(row)
        self.session.flush()
        return row


@pytest.fixture
def factory(db_session):
    return LedgerFactory(db_session)


@pytest.fixture
def people(factory):
    admin = factory.user("admin", role=UserRole.ADMIN)
    tutor = factory.user("tutor", role=UserRole.TUTOR)
    other_tutor = factory.user("other-tutor", role=UserRole.TUTOR)
    student = factory.user("student", tutor=tutor, first_name="Ayse", last_name="Kaya")
    return {"admin": admin, "tutor": tutor, "other_tutor": other_tutor, "student": student}
