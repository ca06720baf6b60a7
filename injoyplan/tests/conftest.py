"""Pytest configuration and fixtures."""
import pytest
from datetime import datetime, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from injoyplan.db.models import Base, Event, EventDate, Location, Profile, User, UserRole, UserType
from injoyplan.db.session import enable_sqlite_foreign_keys, get_db
from injoyplan.main import app
from injoyplan.services.event_query import local_today
from fastapi.testclient import TestClient
import tempfile
import os


@pytest.fixture(scope="function")
def db_session():
    """Create a test database session."""
    # Create temporary SQLite database
    db_fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(db_fd)
    
    engine = create_engine(f"sqlite:///{db_path}", connect_args={"check_same_thread": False})
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()
        os.unlink(db_path)


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass
    
    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_user(db, email, user_type=UserType.PERSON, role=UserRole.USER, first_name=None):
    """Insert a user with a profile."""
    user = User(
        email=email,
        password="$2b$10$hash",
        user_type=user_type,
        role=role,
        profile=Profile(first_name=first_name or email.split("@")[0]),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_event(
    db,
    owner,
    title,
    dates=(),
    category="Música",
    location=None,
    is_featured=False,
    is_active=True,
    created_at=None
):
    """
    Insert an event.

    `dates` holds (date, start_time, price) tuples; `location` is a
    (department, province, district, name) tuple.
    """
    event = Event(
        title=title,
        description=f"{title} description",
        category=category,
        is_featured=is_featured,
        is_active=is_active,
        user_id=owner.id,
        created_at=created_at or datetime.utcnow(),
        dates=[EventDate(date=d, start_time=t, price=p) for d, t, p in dates],
    )
    if location:
        department, province, district, name = location
        event.location = Location(department=department, province=province, district=district, name=name)
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


@pytest.fixture
def create_user(db_session):
    """Factory fixture around make_user bound to the test session."""
    def _create(email, **kwargs):
        return make_user(db_session, email, **kwargs)
    return _create


@pytest.fixture
def create_event(db_session):
    """Factory fixture around make_event bound to the test session."""
    def _create(owner, title, **kwargs):
        return make_event(db_session, owner, title, **kwargs)
    return _create


@pytest.fixture
def organizer(db_session):
    return make_user(db_session, "promotora@example.com", user_type=UserType.COMPANY)


@pytest.fixture
def person(db_session):
    return make_user(db_session, "ana@example.com")


@pytest.fixture
def admin_user(db_session):
    return make_user(db_session, "admin@example.com", role=UserRole.ADMIN)


@pytest.fixture
def today():
    return local_today()


@pytest.fixture
def upcoming_event(db_session, organizer, today):
    """Active event with one past and two upcoming dates in Miraflores."""
    return make_event(
        db_session,
        organizer,
        "Jazz en el Parque",
        dates=[
            (today - timedelta(days=10), "20:00", 30.0),
            (today + timedelta(days=5), "20:00", 30.0),
            (today + timedelta(days=12), "21:00", 0),
        ],
        location=("Lima", "Lima", "Miraflores", "Parque Kennedy"),
    )


@pytest.fixture
def sample_complaint_data():
    """Sample complaint form for testing."""
    return {
        "consumer_name": "Ana Torres",
        "consumer_doc_type": "DNI",
        "consumer_doc_number": "45678912",
        "consumer_address": "Av. Larco 123",
        "consumer_phone": "987654321",
        "consumer_email": "ana@example.com",
        "is_minor": False,
        "good_type": "SERVICIO",
        "claim_amount": 120.5,
        "good_description": "Entrada general",
        "claim_type": "RECLAMO",
        "claim_detail": "El evento fue cancelado <sin aviso>",
        "order_request": "Devolución del importe",
    }
