"""Administrative aggregates derived from grant state"""
from dataclasses import dataclass
from typing import Optional

import structlog
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from vesting_ledger.models.equity import EmployeeGrant
from vesting_ledger.services import vesting_calculator
from vesting_ledger.services.access_policy import AccessPolicy, RoleDirectory, require_admin
from vesting_ledger.services.clock import Clock, SystemClock
from vesting_ledger.services.employee_ledger import EmployeeEquityLedger
from vesting_ledger.services.ownership import load_engine_state
from vesting_ledger.services.token_ledger import TokenLedger, TokenLedgerService

logger = structlog.get_logger()


@dataclass
class CompanySummary:
    """Token totals across the whole engine"""
    custody_account: str
    tokens_held: int
    tokens_obligated: int
    tokens_released: int
    tokens_outstanding: int
    tokens_claimable: int
    grant_count: int


class ReportingService:
    """Aggregates are always computed from grants, never stored separately."""

    def __init__(
        self,
        db: AsyncSession,
        token_ledger: Optional[TokenLedger] = None,
        access_policy: Optional[AccessPolicy] = None,
        clock: Optional[Clock] = None,
    ):
        self.db = db
        self.clock = clock or SystemClock()
        self.access_policy = access_policy or RoleDirectory(db)
        self.token_ledger = token_ledger or TokenLedgerService(db, self.access_policy)

    async def total_tokens_for_company(self) -> int:
        """Tokens still held by the custody account"""
        state = await load_engine_state(self.db)
        return await self.token_ledger.balance_of(state.custody_account)

    async def total_tokens_locked_for_employees(self) -> int:
        """Sum of snapshotted grant totals"""
        result = await self.db.execute(
            select(func.coalesce(func.sum(EmployeeGrant.total_tokens), 0))
        )
        return int(result.scalar_one())

    async def total_tokens_released_to_employees(self) -> int:
        """Sum of claimed tokens over all grants"""
        result = await self.db.execute(
            select(func.coalesce(func.sum(EmployeeGrant.claimed_tokens), 0))
        )
        return int(result.scalar_one())

    async def released_counter_matches(self) -> bool:
        """True when the engine's running release counter equals the derived sum"""
        state = await load_engine_state(self.db)
        derived = await self.total_tokens_released_to_employees()
        if state.total_released != derived:
            logger.error(
                "Release counter diverged from grant totals",
                counter=state.total_released,
                derived=derived,
            )
            return False
        return True

    async def summary(self, caller: str) -> CompanySummary:
        """Company-wide totals. Admin only."""
        await require_admin(self.access_policy, caller)

        state = await load_engine_state(self.db)
        now = self.clock.now()

        ledger = EmployeeEquityLedger(self.db, self.access_policy, self.clock)
        claimable = 0
        grants = await ledger.list_grants()
        for grant in grants:
            equity_class = await ledger.registry.details(grant.equity_class)
            claimable += vesting_calculator.claimable_amount(grant, equity_class, now)

        obligated = await self.total_tokens_locked_for_employees()
        released = await self.total_tokens_released_to_employees()

        return CompanySummary(
            custody_account=state.custody_account,
            tokens_held=await self.token_ledger.balance_of(state.custody_account),
            tokens_obligated=obligated,
            tokens_released=released,
            tokens_outstanding=obligated - released,
            tokens_claimable=claimable,
            grant_count=len(grants),
        )
