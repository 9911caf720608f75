"""Claim processing for vested tokens."""
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional, Set

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from vesting_ledger.errors import (
    ClaimInProgress,
    CliffPeriodNotMet,
    NoEquityGranted,
    NoTokensToClaim,
    TransferFailed,
)
from vesting_ledger.models.equity import EmployeeGrant
from vesting_ledger.models.engine_state import EngineState
from vesting_ledger.models.ledger_event import EventType
from vesting_ledger.services import vesting_calculator
from vesting_ledger.services.access_policy import AccessPolicy, RoleDirectory, require_identity
from vesting_ledger.services.clock import Clock, SystemClock
from vesting_ledger.services.employee_ledger import EmployeeEquityLedger
from vesting_ledger.services.event_log import EventLog
from vesting_ledger.services.ownership import adjust_total_released, load_engine_state
from vesting_ledger.services.token_ledger import TokenLedger, TokenLedgerService

logger = structlog.get_logger()

# Employees with a claim between its first read and its commit
_claims_in_flight: Set[str] = set()


@contextmanager
def claim_guard(employee: str) -> Iterator[None]:
    """Reject a second claim for `employee` while one is outstanding"""
    if employee in _claims_in_flight:
        logger.warning("Rejected nested claim", employee=employee)
        raise ClaimInProgress(employee)
    _claims_in_flight.add(employee)
    try:
        yield
    finally:
        _claims_in_flight.discard(employee)


def claim_in_flight(employee: str) -> bool:
    return employee in _claims_in_flight


@dataclass
class ClaimResult:
    """Outcome of a committed claim"""
    employee: str
    amount: int
    claimed_tokens: int
    total_tokens: int
    claimed_at: int


class ClaimProcessor:
    """
    Transfers an employee's vested, unclaimed tokens out of custody.

    Claimed totals are written before the transfer is attempted and are
    restored if it fails, so a claim either commits fully or leaves no trace.
    """

    def __init__(
        self,
        db: AsyncSession,
        token_ledger: Optional[TokenLedger] = None,
        access_policy: Optional[AccessPolicy] = None,
        clock: Optional[Clock] = None,
        events: Optional[EventLog] = None,
    ):
        self.db = db
        self.clock = clock or SystemClock()
        self.events = events or EventLog(db, self.clock)
        self.access_policy = access_policy or RoleDirectory(db, self.events)
        self.token_ledger = token_ledger or TokenLedgerService(db, self.access_policy, self.events)
        self.ledger = EmployeeEquityLedger(db, self.access_policy, self.clock, self.events)

    async def _restore(self, grant: EmployeeGrant, state: EngineState, amount: int) -> None:
        await self.ledger.revert_claim(grant.employee, amount)
        await adjust_total_released(self.db, -amount)
        await self.db.refresh(grant)
        await self.db.refresh(state)

    async def claim(self, employee: str, commit: bool = False) -> ClaimResult:
        """
        Claim everything vested and not yet claimed for `employee`.

        With `commit=True` the session is committed before the in-flight
        guard is released.

        Raises:
            NoEquityGranted: employee holds no grant
            CliffPeriodNotMet: the cliff has not elapsed
            NoTokensToClaim: nothing new has vested since the last claim
            TransferFailed: the token transfer reported failure
            ClaimInProgress: another claim for the employee is outstanding
                or changed the grant since it was read
        """
        employee = require_identity(employee, "employee")

        with claim_guard(employee):
            grant, equity_class = await self.ledger.get_grant_with_class(employee, for_update=True)
            if grant is None:
                raise NoEquityGranted(employee)

            now = self.clock.now()
            remaining = vesting_calculator.cliff_remaining(grant, equity_class, now)
            if remaining > 0:
                logger.warning("Claim before cliff", employee=employee, remaining_seconds=remaining)
                raise CliffPeriodNotMet(employee, remaining)

            amount = vesting_calculator.claimable_amount(grant, equity_class, now)
            if amount == 0:
                raise NoTokensToClaim(employee)

            state = await load_engine_state(self.db)

            # Effects before the external call
            if not await self.ledger.record_claim(employee, grant.claimed_tokens, amount):
                logger.warning(
                    "Claim conflict, grant changed since it was read",
                    employee=employee,
                    expected_claimed=grant.claimed_tokens,
                )
                raise ClaimInProgress(employee)
            await adjust_total_released(self.db, amount)
            await self.db.refresh(grant)
            await self.db.refresh(state)

            try:
                transferred = await self.token_ledger.transfer(state.custody_account, employee, amount)
            except Exception:
                await self._restore(grant, state, amount)
                raise

            if not transferred:
                await self._restore(grant, state, amount)
                logger.warning(
                    "Claim aborted, transfer failed",
                    employee=employee,
                    amount=amount,
                    custody_account=state.custody_account,
                )
                raise TransferFailed(employee, amount)

            await self.events.record(
                EventType.TOKENS_CLAIMED,
                identity=employee,
                class_name=grant.equity_class,
                amount=amount,
                data={
                    "claimed_tokens": grant.claimed_tokens,
                    "total_tokens": grant.total_tokens,
                },
                triggered_by=employee,
                timestamp=now,
            )

            result = ClaimResult(
                employee=employee,
                amount=amount,
                claimed_tokens=grant.claimed_tokens,
                total_tokens=grant.total_tokens,
                claimed_at=now,
            )
            if commit:
                await self.db.commit()

            logger.info(
                "Tokens claimed",
                employee=employee,
                amount=amount,
                claimed_tokens=result.claimed_tokens,
                total_tokens=result.total_tokens,
            )
            return result
