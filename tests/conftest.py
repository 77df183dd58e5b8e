"""Shared test fixtures: an in-memory database per test and an HTTP client bound to it."""
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

import clinic_booking.models  # noqa: F401 - register tables
from clinic_booking.core.db import get_session
from clinic_booking.main import app
from clinic_booking.models import Clinic, Treatment


def weekly_hours(open_: str = "09:00", close: str = "18:00", closed: tuple[str, ...] = ("friday",)) -> dict:
    days = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
    return {
        day: {"open": open_, "close": close, "is_open": day not in closed}
        for day in days
    }


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_maker):
    async with session_maker() as s:
        yield s


@pytest.fixture
def make_clinic(session):
    """Factory: persist a clinic open 09:00-18:00 (closed Friday), 30 min slots, lunch 12:00-13:00."""

    async def _make(**overrides) -> Clinic:
        fields = {
            "name": "Baghdad Dental Center",
            "address": "Karrada, Baghdad",
            "governorate": "Baghdad",
            "city": "Baghdad",
            "phone": "+964 770 123 4567",
            "latitude": 33.3000,
            "longitude": 44.4200,
            "doctor_id": "doc1",
            "doctor_name": "Dr. Sara Ahmed",
            "online_booking_enabled": True,
            "working_hours": weekly_hours(),
            "time_slot_duration": 30,
            "break_times": [{"start": "12:00", "end": "13:00"}],
            "accepted_treatments": ["Teeth Cleaning"],
        }
        fields.update(overrides)
        clinic = Clinic(**fields)
        session.add(clinic)
        await session.commit()
        return clinic

    return _make


@pytest_asyncio.fixture
async def clinic(make_clinic) -> Clinic:
    return await make_clinic()


@pytest_asyncio.fixture
async def treatments(session) -> list[Treatment]:
    rows = [
        Treatment(name="Teeth Cleaning", duration=45, price=50000, category="preventive"),
        Treatment(name="Dental Filling", duration=60, price=75000, category="restorative"),
    ]
    session.add_all(rows)
    await session.commit()
    return rows


@pytest_asyncio.fixture
async def client(session_maker):
    async def _override_get_session():
        async with session_maker() as s:
            try:
                yield s
                await s.commit()
            except Exception:
                await s.rollback()
                raise

    app.dependency_overrides[get_session] = _override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
