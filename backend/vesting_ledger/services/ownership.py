"""Engine state and two-step ownership handover"""
from typing import Optional

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from vesting_ledger.errors import Unauthorized
from vesting_ledger.models.engine_state import EngineState, ENGINE_STATE_ID
from vesting_ledger.models.ledger_event import EventType
from vesting_ledger.services.access_policy import require_identity
from vesting_ledger.services.event_log import EventLog

logger = structlog.get_logger()


class EngineNotInitialized(RuntimeError):
    """Raised when the engine state row has not been bootstrapped"""


async def load_engine_state(db: AsyncSession) -> EngineState:
    result = await db.execute(
        select(EngineState).where(EngineState.id == ENGINE_STATE_ID)
    )
    state = result.scalar_one_or_none()
    if state is None:
        raise EngineNotInitialized("Engine state has not been bootstrapped")
    return state


async def adjust_total_released(db: AsyncSession, delta: int) -> None:
    """Add `delta` to the released counter in SQL, not from a loaded value"""
    await db.execute(
        update(EngineState)
        .where(EngineState.id == ENGINE_STATE_ID)
        .values(total_released=EngineState.total_released + delta)
        .execution_options(synchronize_session=False)
    )


class OwnershipService:
    """
    Owner handover in two phases.

    `initiate_transfer` only records a pending owner; the active owner does
    not change until that pending owner calls `confirm_transfer`.
    """

    def __init__(self, db: AsyncSession, events: Optional[EventLog] = None):
        self.db = db
        self.events = events or EventLog(db)

    async def owner(self) -> str:
        return (await load_engine_state(self.db)).owner

    async def pending_owner(self) -> Optional[str]:
        return (await load_engine_state(self.db)).pending_owner

    async def initiate_transfer(self, caller: str, new_owner: str) -> EngineState:
        state = await load_engine_state(self.db)
        if caller != state.owner:
            logger.warning("Rejected ownership transfer from non-owner", caller=caller)
            raise Unauthorized(caller, "owner")
        new_owner = require_identity(new_owner, "new_owner")

        state.pending_owner = new_owner
        await self.db.flush()

        await self.events.record(
            EventType.OWNERSHIP_TRANSFER_STARTED,
            identity=state.owner,
            identity_to=new_owner,
            triggered_by=caller,
        )
        logger.info("Ownership transfer initiated", owner=state.owner, pending_owner=new_owner)
        return state

    async def confirm_transfer(self, caller: str) -> EngineState:
        state = await load_engine_state(self.db)
        if state.pending_owner is None or caller != state.pending_owner:
            logger.warning(
                "Rejected ownership confirmation",
                caller=caller,
                pending_owner=state.pending_owner,
            )
            raise Unauthorized(caller, "pending_owner")

        previous_owner = state.owner
        state.owner = state.pending_owner
        state.pending_owner = None
        await self.db.flush()

        await self.events.record(
            EventType.OWNERSHIP_TRANSFERRED,
            identity=previous_owner,
            identity_to=state.owner,
            triggered_by=caller,
        )
        logger.info("Ownership transferred", previous_owner=previous_owner, owner=state.owner)
        return state
