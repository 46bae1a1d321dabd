"""
Pytest configuration and fixtures for the User Management tests.

Each test gets its own in-memory SQLite database with the schema created.
"""

from datetime import date
from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from user_management.api.main import create_app
from user_management.config import ApiConfig, AppConfig, DatabaseConfig, UserPolicyConfig
from user_management.database.models import Base
from user_management.database.session import get_db
from user_management.dates import years_before
from user_management.schemas import CreateUserRequest
from user_management.services import UserService, UserSettingService


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """In-memory SQLite engine shared by every session of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=True)


@pytest.fixture
def session(session_factory: sessionmaker) -> Generator[Session, None, None]:
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def config() -> AppConfig:
    return AppConfig(
        database=DatabaseConfig(url="sqlite://"),
        user_policy=UserPolicyConfig(max_age_years=100, audit_actor="SYSTEM"),
        api=ApiConfig(default_page_size=5),
    )


@pytest.fixture
def user_service(session: Session, config: AppConfig) -> UserService:
    return UserService(session, config)


@pytest.fixture
def setting_service(session: Session, config: AppConfig) -> UserSettingService:
    return UserSettingService(session, config)


@pytest.fixture
def make_request() -> Callable[..., CreateUserRequest]:
    """Factory for valid create requests; keyword arguments override fields."""

    def _make(**overrides) -> CreateUserRequest:
        fields = {
            "ssn": "2945",
            "first_name": "John",
            "middle_name": None,
            "last_name": "Smith",
            "birth_date": years_before(date.today(), 30),
        }
        fields.update(overrides)
        return CreateUserRequest(**fields)

    return _make


@pytest.fixture
def client(session_factory: sessionmaker) -> Generator[TestClient, None, None]:
    """API client wired to the test database."""
    app = create_app(use_lifespan=False)

    def _get_test_db() -> Generator[Session, None, None]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_test_db
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
