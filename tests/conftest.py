import os

# Point the application at an in-memory database before anything imports it
os.environ["ENVIRONMENT"] = "development"
os.environ["LOCAL_DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.db.session import get_db
from app.db.base_class import Base
from app.models.trainee_profile import TraineeProfile
from app.models.user import User, UserRole
from app.services.trainee_profile import get_trainee_profile_provider
from tests.utils_jwt import auth_header_for


@pytest.fixture(scope="session")
def engine():
    """Create a SQLAlchemy engine shared by every connection in the test run."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    """Create a SQLAlchemy session on freshly created tables."""
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    """Create a FastAPI test client."""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    # Clear dependency overrides
    app.dependency_overrides = {}


@pytest.fixture
def make_user(db_session):
    """Factory fixture that stores a user with the given role."""
    counter = {"n": 0}

    def _make_user(role: UserRole, first_name: str = "Test", is_active: bool = True) -> User:
        counter["n"] += 1
        user = User(
            email=f"{role.value}{counter['n']}@example.com",
            first_name=first_name,
            last_name=role.value.title(),
            role=role,
            is_active=is_active,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def coach(make_user):
    return make_user(UserRole.coach, first_name="Casey")


@pytest.fixture
def other_coach(make_user):
    return make_user(UserRole.coach, first_name="Morgan")


@pytest.fixture
def trainee(make_user):
    return make_user(UserRole.trainee, first_name="Jordan")


@pytest.fixture
def admin(make_user):
    return make_user(UserRole.admin, first_name="Alex")


@pytest.fixture
def trainee_profile(db_session, trainee):
    """A profile that fits the standard weight-loss template perfectly."""
    profile = TraineeProfile(
        user_id=trainee.id,
        age=30,
        gender="female",
        fitness_level="beginner",
        goals=["weight_loss"],
        equipment=["dumbbells", "mat"],
        minutes_per_day=45,
        days_per_week=4,
    )
    db_session.add(profile)
    db_session.commit()
    return profile


@pytest.fixture
def coach_headers(coach):
    return auth_header_for(coach)


@pytest.fixture
def other_coach_headers(other_coach):
    return auth_header_for(other_coach)


@pytest.fixture
def trainee_headers(trainee):
    return auth_header_for(trainee)


@pytest.fixture
def admin_headers(admin):
    return auth_header_for(admin)


@pytest.fixture
def profile_override():
    """Install a fixed trainee profile provider for the duration of a test."""
    def _install(provider):
        app.dependency_overrides[get_trainee_profile_provider] = lambda: provider

    yield _install
    app.dependency_overrides.pop(get_trainee_profile_provider, None)
