"""Event log service for recording and replaying engine events."""
from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vesting_ledger.models.ledger_event import LedgerEvent, EventType
from vesting_ledger.services.clock import Clock, SystemClock

logger = structlog.get_logger()


class EventLog:
    """Append-only log of committed engine events, ordered by commit sequence."""

    def __init__(self, db: AsyncSession, clock: Optional[Clock] = None):
        self.db = db
        self.clock = clock or SystemClock()

    async def record(
        self,
        event_type: EventType,
        identity: Optional[str] = None,
        identity_to: Optional[str] = None,
        class_name: Optional[str] = None,
        amount: Optional[int] = None,
        data: Optional[Dict[str, Any]] = None,
        triggered_by: Optional[str] = None,
        timestamp: Optional[int] = None,
    ) -> LedgerEvent:
        """
        Append an event to the log.

        Args:
            event_type: The kind of event (from EventType enum)
            identity: Primary identity involved
            identity_to: Secondary identity (recipient, new owner)
            class_name: Equity class the event refers to
            amount: Token amount involved
            data: Additional type-specific data as JSON
            triggered_by: Caller that caused the event
            timestamp: Logical time (taken from the clock if not provided)

        Returns:
            The created LedgerEvent record
        """
        if timestamp is None:
            timestamp = self.clock.now()

        event = LedgerEvent(
            event_type=event_type,
            timestamp=timestamp,
            identity=identity,
            identity_to=identity_to,
            class_name=class_name,
            amount=amount,
            data=data,
            triggered_by=triggered_by,
        )

        self.db.add(event)
        await self.db.flush()

        logger.debug(
            "Recorded event",
            event_id=event.id,
            event_type=event_type.value,
            identity=identity,
            amount=amount,
        )

        return event

    async def list_events(
        self,
        event_type: Optional[EventType] = None,
        identity: Optional[str] = None,
        after_id: int = 0,
        limit: int = 100,
    ) -> List[LedgerEvent]:
        """Events in commit order, optionally filtered"""
        query = select(LedgerEvent).where(LedgerEvent.id > after_id)
        if event_type is not None:
            query = query.where(LedgerEvent.event_type == event_type)
        if identity is not None:
            query = query.where(LedgerEvent.identity == identity)
        query = query.order_by(LedgerEvent.id).limit(limit)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def replay_claimed_totals(self) -> Dict[str, int]:
        """
        Rebuild cumulative claimed tokens per employee from claim events alone.

        Returns:
            Mapping of employee -> total tokens claimed
        """
        result = await self.db.execute(
            select(LedgerEvent)
            .where(LedgerEvent.event_type == EventType.TOKENS_CLAIMED)
            .order_by(LedgerEvent.id)
        )
        events = result.scalars().all()

        totals: Dict[str, int] = {}
        for event in events:
            totals[event.identity] = totals.get(event.identity, 0) + (event.amount or 0)

        logger.info(
            "Replayed claim events",
            event_count=len(events),
            employee_count=len(totals),
        )

        return totals
