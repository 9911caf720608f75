"""Employee grant API endpoints"""
from typing import List

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from vesting_ledger.api.deps import get_caller, get_clock, Clock
from vesting_ledger.errors import NoEquityGranted
from vesting_ledger.models.database import get_db
from vesting_ledger.models.equity import EmployeeGrant, EquityClass
from vesting_ledger.schemas.equity import (
    EmployeeGrantResponse,
    GrantEquityRequest,
    NextUnlockResponse,
    VestedTokensResponse,
)
from vesting_ledger.services import vesting_calculator
from vesting_ledger.services.employee_ledger import EmployeeEquityLedger

router = APIRouter()


def _next_unlock_response(employee: str, grant, equity_class, now: int) -> NextUnlockResponse:
    event = vesting_calculator.next_unlock(grant, equity_class, now)
    return NextUnlockResponse(
        employee=employee,
        amount=event.amount,
        time=event.time,
        fully_vested=grant is not None and not event.pending,
    )


def _grant_to_response(grant: EmployeeGrant, equity_class: EquityClass, now: int) -> EmployeeGrantResponse:
    return EmployeeGrantResponse(
        employee=grant.employee,
        equity_class=grant.equity_class,
        total_tokens=grant.total_tokens,
        start_time=grant.start_time,
        claimed_tokens=grant.claimed_tokens,
        remaining_tokens=grant.remaining_tokens,
        total_vested=vesting_calculator.total_vested_amount(grant, equity_class, now),
        available_to_claim=vesting_calculator.claimable_amount(grant, equity_class, now),
        vesting_done=vesting_calculator.vesting_progress(grant),
        next_unlock=_next_unlock_response(grant.employee, grant, equity_class, now),
        created_at=grant.created_at,
    )


@router.post("", response_model=EmployeeGrantResponse)
async def grant_equity(
    request: GrantEquityRequest,
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
    db: AsyncSession = Depends(get_db),
):
    """Bind an employee to an equity class (granter only, one grant per employee)"""
    ledger = EmployeeEquityLedger(db, clock=clock)
    grant = await ledger.grant(caller, request.employee, request.equity_class)
    await db.commit()

    equity_class = await ledger.registry.details(grant.equity_class)
    return _grant_to_response(grant, equity_class, clock.now())


@router.get("", response_model=List[EmployeeGrantResponse])
async def list_grants(clock: Clock = Depends(get_clock), db: AsyncSession = Depends(get_db)):
    """List all grants with their current vesting position"""
    ledger = EmployeeEquityLedger(db, clock=clock)
    now = clock.now()
    responses = []
    for grant in await ledger.list_grants():
        equity_class = await ledger.registry.details(grant.equity_class)
        responses.append(_grant_to_response(grant, equity_class, now))
    return responses


@router.get("/{employee}", response_model=EmployeeGrantResponse)
async def get_grant(
    employee: str = Path(...),
    clock: Clock = Depends(get_clock),
    db: AsyncSession = Depends(get_db),
):
    """Get an employee's grant"""
    ledger = EmployeeEquityLedger(db, clock=clock)
    grant, equity_class = await ledger.get_grant_with_class(employee)
    if grant is None:
        raise NoEquityGranted(employee)
    return _grant_to_response(grant, equity_class, clock.now())


@router.get("/{employee}/vested", response_model=VestedTokensResponse)
async def get_vested_tokens(
    employee: str = Path(...),
    clock: Clock = Depends(get_clock),
    db: AsyncSession = Depends(get_db),
):
    """Tokens the employee could claim now. Zero when there is no grant."""
    ledger = EmployeeEquityLedger(db, clock=clock)
    grant, equity_class = await ledger.get_grant_with_class(employee)
    now = clock.now()
    return VestedTokensResponse(
        employee=employee,
        claimable=vesting_calculator.claimable_amount(grant, equity_class, now),
        total_vested=vesting_calculator.total_vested_amount(grant, equity_class, now),
        claimed_tokens=grant.claimed_tokens if grant else 0,
        cliff_remaining=vesting_calculator.cliff_remaining(grant, equity_class, now),
    )


@router.get("/{employee}/next-unlock", response_model=NextUnlockResponse)
async def get_next_unlock(
    employee: str = Path(...),
    clock: Clock = Depends(get_clock),
    db: AsyncSession = Depends(get_db),
):
    """Amount and time of the employee's next unlock"""
    ledger = EmployeeEquityLedger(db, clock=clock)
    grant, equity_class = await ledger.get_grant_with_class(employee)
    return _next_unlock_response(employee, grant, equity_class, clock.now())
