"""Unit tests for engine bootstrap and company aggregates"""
import pytest

from vesting_ledger.config import Settings
from vesting_ledger.errors import Unauthorized
from vesting_ledger.models.engine_state import EngineState
from vesting_ledger.services.bootstrap import DEFAULT_EQUITY_CLASSES, bootstrap_engine
from vesting_ledger.services.claim_processor import ClaimProcessor
from vesting_ledger.services.equity_registry import EquityClassRegistry
from vesting_ledger.services.ownership import EngineNotInitialized, load_engine_state
from vesting_ledger.services.reporting import ReportingService
from vesting_ledger.services.token_ledger import TokenLedgerService

from tests.conftest import ADMIN, GRANTER, CUSTODY, EMPLOYEE, EMPLOYEE_2, START_TIME, INITIAL_MINT


class TestBootstrap:
    """Tests for first-run setup"""

    @pytest.mark.asyncio
    async def test_state_missing_before_bootstrap(self, db_session):
        with pytest.raises(EngineNotInitialized):
            await load_engine_state(db_session)

    @pytest.mark.asyncio
    async def test_seeds_default_classes(self, db_session, settings, clock):
        seeded = settings.model_copy(update={"seed_default_classes": True})

        stats = await bootstrap_engine(db_session, seeded, clock)

        assert stats["state_created"] == 1
        assert stats["classes_defined"] == len(DEFAULT_EQUITY_CLASSES)
        assert stats["tokens_minted"] == INITIAL_MINT
        registry = EquityClassRegistry(db_session)
        assert await registry.names() == ["CXO", "Senior Manager", "Others"]
        others = await registry.details("Others")
        assert others.token_count == 400
        assert others.vesting_percentage == 5000

    @pytest.mark.asyncio
    async def test_bootstrap_is_idempotent(self, db_session, settings, clock):
        seeded = settings.model_copy(update={"seed_default_classes": True})
        await bootstrap_engine(db_session, seeded, clock)

        stats = await bootstrap_engine(db_session, seeded, clock)

        assert stats == {"state_created": 0, "roles_assigned": 0, "classes_defined": 0, "tokens_minted": 0}
        assert await TokenLedgerService(db_session).balance_of(CUSTODY) == INITIAL_MINT
        state = await load_engine_state(db_session)
        assert isinstance(state, EngineState)
        assert state.owner == ADMIN


class TestReporting:
    """Aggregates are derived from grants"""

    @pytest.mark.asyncio
    async def test_summary(self, engine_db, clock, cxo_class):
        processor = ClaimProcessor(engine_db, clock=clock)
        await processor.ledger.registry.define(ADMIN, **cxo_class)
        await processor.ledger.registry.define(ADMIN, **{**cxo_class, "name": "Others", "token_count": 400})
        await processor.ledger.grant(GRANTER, EMPLOYEE, "CXO")
        await processor.ledger.grant(GRANTER, EMPLOYEE_2, "Others")

        clock.set(START_TIME + 240)
        await processor.claim(EMPLOYEE)

        reporting = ReportingService(engine_db, clock=clock)
        summary = await reporting.summary(ADMIN)

        assert summary.custody_account == CUSTODY
        assert summary.tokens_held == INITIAL_MINT - 500
        assert summary.tokens_obligated == 1400
        assert summary.tokens_released == 500
        assert summary.tokens_outstanding == 900
        assert summary.tokens_claimable == 200  # employee-2: 25% of 400 at cliff + one period
        assert summary.grant_count == 2
        assert await reporting.total_tokens_for_company() == INITIAL_MINT - 500
        assert await reporting.released_counter_matches()

    @pytest.mark.asyncio
    async def test_summary_requires_admin(self, engine_db, clock):
        with pytest.raises(Unauthorized):
            await ReportingService(engine_db, clock=clock).summary(GRANTER)

    @pytest.mark.asyncio
    async def test_counter_divergence_detected(self, engine_db, clock):
        state = await load_engine_state(engine_db)
        state.total_released = 42
        await engine_db.flush()

        assert not await ReportingService(engine_db, clock=clock).released_counter_matches()
