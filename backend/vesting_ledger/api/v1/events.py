"""Event log API endpoints"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from vesting_ledger.models.database import get_db
from vesting_ledger.models.ledger_event import EventType
from vesting_ledger.schemas.admin import LedgerEventResponse
from vesting_ledger.services.event_log import EventLog

router = APIRouter()


@router.get("", response_model=List[LedgerEventResponse])
async def list_events(
    event_type: Optional[EventType] = None,
    identity: Optional[str] = None,
    after_id: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
):
    """Events in commit order. Use after_id to page forward."""
    events = await EventLog(db).list_events(event_type, identity, after_id, limit)
    return [
        LedgerEventResponse(
            id=e.id,
            event_type=e.event_type.value,
            timestamp=e.timestamp,
            identity=e.identity,
            identity_to=e.identity_to,
            class_name=e.class_name,
            amount=e.amount,
            data=e.data,
            triggered_by=e.triggered_by,
            created_at=e.created_at,
        )
        for e in events
    ]
