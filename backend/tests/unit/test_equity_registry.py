"""Unit tests for the equity class registry"""
import pytest

from vesting_ledger.errors import InvalidEquityClass, Unauthorized
from vesting_ledger.models.ledger_event import EventType
from vesting_ledger.services.equity_registry import EquityClassRegistry
from vesting_ledger.services.event_log import EventLog

from tests.conftest import ADMIN, GRANTER


@pytest.fixture
def registry(engine_db, clock):
    return EquityClassRegistry(engine_db, events=EventLog(engine_db, clock))


class TestDefine:
    """Tests for defining equity classes"""

    @pytest.mark.asyncio
    async def test_define_stores_basis_points(self, registry, cxo_class):
        equity_class = await registry.define(ADMIN, **cxo_class)

        assert equity_class.name == "CXO"
        assert equity_class.token_count == 1000
        assert equity_class.vesting_percentage == 2500
        assert equity_class.vesting_percentage_whole == 25.0

    @pytest.mark.asyncio
    async def test_define_requires_admin(self, registry, cxo_class):
        with pytest.raises(Unauthorized):
            await registry.define(GRANTER, **cxo_class)
        with pytest.raises(Unauthorized):
            await registry.define("", **cxo_class)

        assert await registry.names() == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("overrides", [
        {"vesting_percentage": 0},
        {"vesting_percentage": 101},
        {"token_count": 0},
        {"vesting_period": 0},
        {"cliff_period": -1},
        {"name": ""},
        {"name": "x" * 33},
        {"name": "names"},
    ])
    async def test_define_rejects_invalid_parameters(self, registry, cxo_class, overrides):
        with pytest.raises(InvalidEquityClass):
            await registry.define(ADMIN, **{**cxo_class, **overrides})

    @pytest.mark.asyncio
    async def test_full_percentage_is_accepted(self, registry, cxo_class):
        equity_class = await registry.define(ADMIN, **{**cxo_class, "vesting_percentage": 100})
        assert equity_class.vesting_percentage == 10000

    @pytest.mark.asyncio
    async def test_define_emits_event(self, registry, engine_db, cxo_class):
        await registry.define(ADMIN, **cxo_class)

        events = await EventLog(engine_db).list_events(EventType.CLASS_DEFINED)
        assert len(events) == 1
        assert events[0].class_name == "CXO"
        assert events[0].amount == 1000
        assert events[0].triggered_by == ADMIN


class TestEnumeration:
    """Tests for class lookup and ordering"""

    @pytest.mark.asyncio
    async def test_names_keep_definition_order(self, registry, cxo_class):
        await registry.define(ADMIN, **{**cxo_class, "name": "Others"})
        await registry.define(ADMIN, **cxo_class)
        await registry.define(ADMIN, **{**cxo_class, "name": "Senior Manager"})

        assert await registry.names() == ["Others", "CXO", "Senior Manager"]

    @pytest.mark.asyncio
    async def test_redefinition_overwrites_without_duplicating(self, registry, cxo_class):
        await registry.define(ADMIN, **cxo_class)
        await registry.define(ADMIN, **{**cxo_class, "name": "Others"})
        await registry.define(ADMIN, **{**cxo_class, "token_count": 2000, "vesting_percentage": 50})

        assert await registry.names() == ["CXO", "Others"]
        details = await registry.details("CXO")
        assert details.token_count == 2000
        assert details.vesting_percentage == 5000

    @pytest.mark.asyncio
    async def test_undefined_class_reads_as_zero(self, registry):
        details = await registry.details("Nope")

        assert details.token_count == 0
        assert details.cliff_period == 0
        assert details.vesting_period == 0
        assert details.vesting_percentage == 0
        assert not details.exists
