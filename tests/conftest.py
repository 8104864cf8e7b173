"""
Pytest configuration and shared fixtures for tests
"""

import pytest
from unittest.mock import AsyncMock
from sqlmodel import Session, SQLModel, create_engine
from sqlalchemy.pool import StaticPool

from gym_booking.config import reset_config
from gym_booking.db_models import ClientSetting  # noqa: F401 - registers the table
from gym_booking.models import Booking, BookingForm
from gym_booking.sheets_api_client import SheetsAPIClient

VALID_URL = "https://script.google.com/macros/s/AKfycbTEST123/exec"

CONFIG_ENV_VARS = (
    "TELEGRAM_BOT_TOKEN",
    "DB_FILE",
    "DEFAULT_API_URL",
    "REQUEST_TIMEOUT",
    "SLOT_START_HOUR",
    "SLOT_END_HOUR",
    "BOOKING_DAYS_AHEAD",
    "BOT_LANGUAGE",
    "BUDDHIST_ERA",
    "LOCAL_TIMEZONE",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Every test starts from default configuration"""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture(name="db_engine")
def db_engine_fixture():
    """Create in-memory SQLite database engine for testing"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,  # Keep single connection for in-memory DB
    )
    SQLModel.metadata.create_all(engine)
    return engine


@pytest.fixture(name="db_session")
def db_session_fixture(db_engine):
    """Create database session for testing"""
    with Session(db_engine) as session:
        yield session
        session.rollback()  # Rollback any uncommitted changes after test


@pytest.fixture
def sample_row():
    """A sheet row for a booking far in the future"""
    return {
        "booking_id": "1",
        "date": "2099-01-01",
        "slot": "09:00-10:00",
        "machine_id": "underwater-treadmill",
        "first_name": "A",
        "last_name": "B",
        "member_id": "M1",
        "age": 30,
        "created_at": "2024-01-01T00:00:00Z",
    }


@pytest.fixture
def mock_client():
    """SheetsAPIClient with every network call mocked"""
    client = AsyncMock(spec=SheetsAPIClient)
    client.list_rows.return_value = []
    client.create_row.return_value = {"ok": True}
    return client


def make_booking(**overrides) -> Booking:
    """Booking with sensible defaults for tests"""
    values = dict(
        id="b-1",
        date="2099-01-01",
        slot_id="09:00-10:00",
        machine_id="underwater-treadmill",
        first_name="A",
        last_name="B",
        member_id="M1",
        age=30,
        created_at="2024-01-01T00:00:00.000Z",
    )
    values.update(overrides)
    return Booking(**values)


def make_form(**overrides) -> BookingForm:
    """Filled-in booking form for a future slot"""
    values = dict(
        first_name="Somchai",
        last_name="Jaidee",
        member_id="M42",
        age="35",
        machine_id="underwater-treadmill",
        date="2099-01-01",
        slot_id="10:00-11:00",
    )
    values.update(overrides)
    return BookingForm(**values)
