"""Employee equity ledger"""
from typing import List, Optional, Tuple

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from vesting_ledger.errors import InvalidEquityClass
from vesting_ledger.models.equity import EmployeeGrant, EquityClass
from vesting_ledger.models.ledger_event import EventType
from vesting_ledger.services.access_policy import AccessPolicy, RoleDirectory, require_granter, require_identity
from vesting_ledger.services.clock import Clock, SystemClock
from vesting_ledger.services.equity_registry import EquityClassRegistry
from vesting_ledger.services.event_log import EventLog

logger = structlog.get_logger()


class EmployeeEquityLedger:
    """Stores the one-shot grant binding each employee to an equity class."""

    def __init__(
        self,
        db: AsyncSession,
        access_policy: Optional[AccessPolicy] = None,
        clock: Optional[Clock] = None,
        events: Optional[EventLog] = None,
    ):
        self.db = db
        self.clock = clock or SystemClock()
        self.events = events or EventLog(db, self.clock)
        self.access_policy = access_policy or RoleDirectory(db, self.events)
        self.registry = EquityClassRegistry(db, self.access_policy, self.events)

    async def get_grant(self, employee: str, for_update: bool = False) -> Optional[EmployeeGrant]:
        query = select(EmployeeGrant).where(EmployeeGrant.employee == employee)
        if for_update:
            # Row lock where supported, and never serve a stale copy from the session
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_grant_with_class(
        self, employee: str, for_update: bool = False
    ) -> Tuple[Optional[EmployeeGrant], Optional[EquityClass]]:
        """Grant and the *current* definition of its class"""
        grant = await self.get_grant(employee, for_update=for_update)
        if grant is None:
            return None, None
        return grant, await self.registry.details(grant.equity_class)

    async def list_grants(self) -> List[EmployeeGrant]:
        result = await self.db.execute(
            select(EmployeeGrant).order_by(EmployeeGrant.start_time, EmployeeGrant.employee)
        )
        return list(result.scalars().all())

    async def grant(self, caller: str, employee: str, class_name: str) -> EmployeeGrant:
        """
        Bind an employee to an equity class. Granter only.

        Grants are permanent: a second grant for the same employee fails and
        leaves the first untouched.
        """
        await require_granter(self.access_policy, caller)
        employee = require_identity(employee, "employee")

        equity_class = await self.registry.details(class_name)
        if not equity_class.exists:
            raise InvalidEquityClass(f"Equity class {class_name!r} does not exist", name=class_name)

        existing = await self.get_grant(employee)
        if existing is not None:
            logger.warning(
                "Rejected duplicate grant",
                employee=employee,
                existing_class=existing.equity_class,
                requested_class=equity_class.name,
            )
            raise InvalidEquityClass(
                f"Employee {employee} already holds a grant",
                employee=employee,
                name=existing.equity_class,
            )

        grant_time = self.clock.now()
        grant = EmployeeGrant(
            employee=employee,
            equity_class=equity_class.name,
            total_tokens=equity_class.token_count,
            start_time=grant_time,
            claimed_tokens=0,
        )
        self.db.add(grant)
        await self.db.flush()

        await self.events.record(
            EventType.EQUITY_GRANTED,
            identity=employee,
            class_name=equity_class.name,
            amount=equity_class.token_count,
            data={"grant_time": grant_time},
            triggered_by=caller,
            timestamp=grant_time,
        )

        logger.info(
            "Equity granted",
            employee=employee,
            equity_class=equity_class.name,
            total_tokens=equity_class.token_count,
            grant_time=grant_time,
        )

        return grant

    # Read accessors. Missing grants read as empty/zero.

    async def equity_class_of(self, employee: str) -> str:
        grant = await self.get_grant(employee)
        return grant.equity_class if grant else ""

    async def total_tokens_of(self, employee: str) -> int:
        grant = await self.get_grant(employee)
        return grant.total_tokens if grant else 0

    async def start_time_of(self, employee: str) -> int:
        grant = await self.get_grant(employee)
        return grant.start_time if grant else 0

    async def claimed_tokens_of(self, employee: str) -> int:
        grant = await self.get_grant(employee)
        return grant.claimed_tokens if grant else 0

    # Claimed totals only move through these conditional updates

    async def record_claim(self, employee: str, previous_claimed: int, amount: int) -> bool:
        """
        Add `amount` to the employee's claimed total if it still equals
        `previous_claimed`. Returns False when another transaction got there
        first and nothing was written.
        """
        result = await self.db.execute(
            update(EmployeeGrant)
            .where(
                EmployeeGrant.employee == employee,
                EmployeeGrant.claimed_tokens == previous_claimed,
            )
            .values(claimed_tokens=EmployeeGrant.claimed_tokens + amount)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def revert_claim(self, employee: str, amount: int) -> None:
        await self.db.execute(
            update(EmployeeGrant)
            .where(EmployeeGrant.employee == employee)
            .values(claimed_tokens=EmployeeGrant.claimed_tokens - amount)
            .execution_options(synchronize_session=False)
        )
