"""
Test infrastructure for the EMR API.

Strategy
--------
- SQLite in-memory via aiosqlite; no Postgres needed in CI.
- StaticPool makes every session share the one in-memory connection
  (an in-memory SQLite database is connection-scoped).
- The app's get_db dependency is overridden so every request uses the
  test session factory.
- All tables are created before each test and dropped after it.
"""
import uuid

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from emr.database import Base, get_db
from emr.main import app
from emr.middleware import install_query_counter
from emr.models import Comorbidity, Patient

# ---------------------------------------------------------------------------
# Test database engine: SQLite in-memory with aiosqlite
# ---------------------------------------------------------------------------

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine_test = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

install_query_counter(engine_test)

async_session_test = async_sessionmaker(
    engine_test,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ---------------------------------------------------------------------------
# Dependency override
# ---------------------------------------------------------------------------

async def override_get_db():
    async with async_session_test() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


app.dependency_overrides[get_db] = override_get_db


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after to guarantee isolation."""
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    """A live AsyncSession for tests that call services directly."""
    async with async_session_test() as session:
        yield session


@pytest_asyncio.fixture
async def async_client() -> AsyncClient:
    """An httpx.AsyncClient wired to the FastAPI app via ASGITransport."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def session_factory():
    """The test session factory, for tests that need a second, fresh session."""
    return async_session_test


@pytest_asyncio.fixture
async def statement_log():
    """Collect every SQL statement executed on the test engine while the test runs."""
    statements: list[str] = []

    def _record(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    event.listen(engine_test.sync_engine, "before_cursor_execute", _record)
    yield statements
    event.remove(engine_test.sync_engine, "before_cursor_execute", _record)


# ---------------------------------------------------------------------------
# EMR data fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def request_context() -> dict:
    """Tenant and user headers as forwarded by the gateway."""
    return {"X-Tenant-Id": str(uuid.uuid4()), "X-User-Id": str(uuid.uuid4())}


@pytest_asyncio.fixture
async def patient_with_comorbidity() -> tuple[uuid.UUID, uuid.UUID]:
    """A committed patient linked to a committed primary comorbidity: (patient_id, comorbidity_id)."""
    async with async_session_test() as session:
        condition = Comorbidity(name="Diabetes", code="E11")
        session.add(condition)
        await session.flush()
        patient = Patient(
            first_name="Ana",
            last_name="Costa",
            medical_record_number="MRN-FIXTURE",
            comorbidity_id=condition.id,
        )
        session.add(patient)
        await session.commit()
        return patient.id, condition.id
