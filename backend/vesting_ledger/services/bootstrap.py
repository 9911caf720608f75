"""Initial engine setup: owner, roles, default classes and custody funding."""
from dataclasses import dataclass
from typing import Dict, List, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from vesting_ledger.config import Settings, get_settings
from vesting_ledger.models.access import Role
from vesting_ledger.models.engine_state import EngineState, ENGINE_STATE_ID
from vesting_ledger.services.access_policy import RoleDirectory, require_identity
from vesting_ledger.services.clock import Clock, SystemClock
from vesting_ledger.services.equity_registry import EquityClassRegistry
from vesting_ledger.services.event_log import EventLog
from vesting_ledger.services.ownership import EngineNotInitialized, load_engine_state
from vesting_ledger.services.token_ledger import TokenLedgerService

logger = structlog.get_logger()


@dataclass(frozen=True)
class EquityClassTemplate:
    name: str
    token_count: int
    cliff_period: int
    vesting_period: int
    vesting_percentage: int  # whole percent


DEFAULT_EQUITY_CLASSES: List[EquityClassTemplate] = [
    EquityClassTemplate("CXO", 1000, 120, 120, 25),
    EquityClassTemplate("Senior Manager", 800, 120, 120, 25),
    EquityClassTemplate("Others", 400, 120, 120, 50),
]


async def bootstrap_engine(
    db: AsyncSession,
    settings: Optional[Settings] = None,
    clock: Optional[Clock] = None,
) -> Dict[str, int]:
    """
    Prepare a fresh engine. Safe to run on every startup.

    Returns:
        Counts of what was created, for logging
    """
    settings = settings or get_settings()
    clock = clock or SystemClock()
    events = EventLog(db, clock)
    roles = RoleDirectory(db, events)
    stats = {"state_created": 0, "roles_assigned": 0, "classes_defined": 0, "tokens_minted": 0}

    try:
        state = await load_engine_state(db)
    except EngineNotInitialized:
        state = EngineState(
            id=ENGINE_STATE_ID,
            owner=require_identity(settings.initial_owner, "initial_owner"),
            custody_account=require_identity(settings.custody_account, "custody_account"),
            total_released=0,
        )
        db.add(state)
        await db.flush()
        stats["state_created"] = 1
        logger.info("Engine state created", owner=state.owner, custody_account=state.custody_account)

    # Admin comes from ownership itself
    for role in (Role.GRANTER, Role.MINTER):
        if await roles.bootstrap_role(state.owner, role):
            stats["roles_assigned"] += 1

    if settings.seed_default_classes:
        registry = EquityClassRegistry(db, roles, events)
        existing = set(await registry.names())
        for template in DEFAULT_EQUITY_CLASSES:
            if template.name in existing:
                continue
            await registry.define(
                state.owner,
                template.name,
                template.token_count,
                template.cliff_period,
                template.vesting_period,
                template.vesting_percentage,
            )
            stats["classes_defined"] += 1

    if settings.initial_mint > 0:
        token_ledger = TokenLedgerService(db, roles, events)
        if await token_ledger.balance_of(state.custody_account) == 0:
            await token_ledger.mint(state.owner, state.custody_account, settings.initial_mint)
            stats["tokens_minted"] = settings.initial_mint

    await db.flush()
    return stats
