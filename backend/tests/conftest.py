"""Pytest configuration and fixtures for the vesting ledger tests"""
import pytest
import pytest_asyncio
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from vesting_ledger.main import app
from vesting_ledger.config import Settings
from vesting_ledger.models.access import Role
from vesting_ledger.models.database import Base, get_db
from vesting_ledger.services.access_policy import RoleDirectory
from vesting_ledger.services.bootstrap import bootstrap_engine
from vesting_ledger.services.clock import ManualClock, get_clock
from vesting_ledger.services.event_log import EventLog

ADMIN = "admin-wallet"
GRANTER = "hr-wallet"
CUSTODY = "vesting-custody"
EMPLOYEE = "employee-1"
EMPLOYEE_2 = "employee-2"
START_TIME = 1_700_000_000
INITIAL_MINT = 1_000_000


@pytest.fixture
def clock() -> ManualClock:
    """Manual clock starting at a fixed timestamp"""
    return ManualClock(start=START_TIME)


@pytest.fixture
def settings() -> Settings:
    """Engine settings used by tests"""
    return Settings(
        database_url="sqlite+aiosqlite://",
        initial_owner=ADMIN,
        custody_account=CUSTODY,
        initial_mint=INITIAL_MINT,
        seed_default_classes=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Fresh in-memory database per test.

    StaticPool keeps the single in-memory connection alive for the whole test.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    session = session_factory()
    try:
        yield session
    finally:
        await session.close()
        await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def engine_db(db_session: AsyncSession, settings: Settings, clock: ManualClock) -> AsyncSession:
    """Bootstrapped engine: admin owner, funded custody, and a granter"""
    await bootstrap_engine(db_session, settings, clock)
    roles = RoleDirectory(db_session, EventLog(db_session, clock))
    await roles.assign_role(ADMIN, GRANTER, Role.GRANTER)
    await db_session.commit()
    return db_session


@pytest_asyncio.fixture(scope="function")
async def client(engine_db: AsyncSession, clock: ManualClock) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client bound to the bootstrapped database"""

    async def override_get_db():
        try:
            yield engine_db
        except Exception:
            await engine_db.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def cxo_class():
    """Class parameters from the worked example"""
    return {
        "name": "CXO",
        "token_count": 1000,
        "cliff_period": 120,
        "vesting_period": 120,
        "vesting_percentage": 25,
    }
