"""Unit tests for the employee equity ledger"""
import pytest
from sqlalchemy import inspect

from vesting_ledger.errors import InvalidEquityClass, Unauthorized, ZeroIdentity
from vesting_ledger.models.equity import EmployeeGrant, EquityClass
from vesting_ledger.models.ledger_event import EventType
from vesting_ledger.services.employee_ledger import EmployeeEquityLedger
from vesting_ledger.services.event_log import EventLog

from tests.conftest import ADMIN, GRANTER, EMPLOYEE, START_TIME


@pytest.fixture
def ledger(engine_db, clock):
    return EmployeeEquityLedger(engine_db, clock=clock)


class TestGrant:
    """Tests for binding employees to classes"""

    @pytest.mark.asyncio
    async def test_grant_snapshots_class(self, ledger, cxo_class):
        await ledger.registry.define(ADMIN, **cxo_class)

        grant = await ledger.grant(GRANTER, EMPLOYEE, "CXO")

        assert grant.employee == EMPLOYEE
        assert grant.equity_class == "CXO"
        assert grant.total_tokens == 1000
        assert grant.start_time == START_TIME
        assert grant.claimed_tokens == 0

    @pytest.mark.asyncio
    async def test_grant_requires_granter(self, ledger, cxo_class):
        await ledger.registry.define(ADMIN, **cxo_class)

        with pytest.raises(Unauthorized):
            await ledger.grant(EMPLOYEE, EMPLOYEE, "CXO")

        assert await ledger.get_grant(EMPLOYEE) is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("employee", ["", "   ", "0x0000000000000000000000000000000000000000"])
    async def test_grant_rejects_null_identity(self, ledger, cxo_class, employee):
        await ledger.registry.define(ADMIN, **cxo_class)

        with pytest.raises(ZeroIdentity):
            await ledger.grant(GRANTER, employee, "CXO")

    @pytest.mark.asyncio
    async def test_grant_rejects_unknown_class(self, ledger):
        with pytest.raises(InvalidEquityClass):
            await ledger.grant(GRANTER, EMPLOYEE, "Ghost")

    @pytest.mark.asyncio
    async def test_second_grant_fails_and_keeps_original(self, ledger, clock, cxo_class):
        await ledger.registry.define(ADMIN, **cxo_class)
        await ledger.registry.define(ADMIN, **{**cxo_class, "name": "Others", "token_count": 400})
        await ledger.grant(GRANTER, EMPLOYEE, "CXO")

        clock.advance(500)
        with pytest.raises(InvalidEquityClass):
            await ledger.grant(GRANTER, EMPLOYEE, "Others")
        with pytest.raises(InvalidEquityClass):
            await ledger.grant(GRANTER, EMPLOYEE, "CXO")

        grant = await ledger.get_grant(EMPLOYEE)
        assert grant.equity_class == "CXO"
        assert grant.total_tokens == 1000
        assert grant.start_time == START_TIME

    @pytest.mark.asyncio
    async def test_grant_is_immune_to_later_token_count_change(self, ledger, cxo_class):
        await ledger.registry.define(ADMIN, **cxo_class)
        await ledger.grant(GRANTER, EMPLOYEE, "CXO")

        await ledger.registry.define(ADMIN, **{**cxo_class, "token_count": 5000})

        assert await ledger.total_tokens_of(EMPLOYEE) == 1000

    @pytest.mark.asyncio
    async def test_grant_emits_event(self, ledger, engine_db, cxo_class):
        await ledger.registry.define(ADMIN, **cxo_class)
        await ledger.grant(GRANTER, EMPLOYEE, "CXO")

        events = await EventLog(engine_db).list_events(EventType.EQUITY_GRANTED)
        assert len(events) == 1
        assert events[0].identity == EMPLOYEE
        assert events[0].class_name == "CXO"
        assert events[0].data == {"grant_time": START_TIME}


class TestAccessors:
    """Tests for read accessors"""

    @pytest.mark.asyncio
    async def test_accessors(self, ledger, cxo_class):
        await ledger.registry.define(ADMIN, **cxo_class)
        await ledger.grant(GRANTER, EMPLOYEE, "CXO")

        assert await ledger.equity_class_of(EMPLOYEE) == "CXO"
        assert await ledger.total_tokens_of(EMPLOYEE) == 1000
        assert await ledger.start_time_of(EMPLOYEE) == START_TIME
        assert await ledger.claimed_tokens_of(EMPLOYEE) == 0

    @pytest.mark.asyncio
    async def test_accessors_for_missing_grant(self, ledger):
        assert await ledger.equity_class_of("nobody") == ""
        assert await ledger.total_tokens_of("nobody") == 0
        assert await ledger.start_time_of("nobody") == 0
        assert await ledger.claimed_tokens_of("nobody") == 0
        assert await ledger.get_grant_with_class("nobody") == (None, None)


class TestMapping:
    """Grants reference their class by name only"""

    def test_no_orm_relationships(self):
        assert not inspect(EquityClass).relationships
        assert not inspect(EmployeeGrant).relationships
