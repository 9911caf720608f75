"""Admin API endpoints"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vesting_ledger.api.deps import get_caller, get_clock, Clock
from vesting_ledger.models.database import get_db
from vesting_ledger.schemas.admin import (
    CompanySummaryResponse,
    InitiateOwnershipTransferRequest,
    OwnershipResponse,
    RoleRequest,
    RolesResponse,
)
from vesting_ledger.services.access_policy import RoleDirectory
from vesting_ledger.services.event_log import EventLog
from vesting_ledger.services.ownership import OwnershipService
from vesting_ledger.services.reporting import ReportingService

router = APIRouter()


@router.get("/summary", response_model=CompanySummaryResponse)
async def get_company_summary(
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
    db: AsyncSession = Depends(get_db),
):
    """Company token totals (admin only)"""
    reporting = ReportingService(db, clock=clock)
    summary = await reporting.summary(caller)

    return CompanySummaryResponse(
        custody_account=summary.custody_account,
        total_tokens_for_company=summary.tokens_held,
        total_tokens_locked_for_employees=summary.tokens_obligated,
        total_tokens_released_to_employees=summary.tokens_released,
        tokens_outstanding=summary.tokens_outstanding,
        tokens_claimable=summary.tokens_claimable,
        grant_count=summary.grant_count,
        released_counter_consistent=await reporting.released_counter_matches(),
    )


@router.get("/ownership", response_model=OwnershipResponse)
async def get_ownership(db: AsyncSession = Depends(get_db)):
    """Current and pending owner"""
    ownership = OwnershipService(db)
    return OwnershipResponse(owner=await ownership.owner(), pending_owner=await ownership.pending_owner())


@router.post("/ownership/transfer", response_model=OwnershipResponse)
async def initiate_ownership_transfer(
    request: InitiateOwnershipTransferRequest,
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
    db: AsyncSession = Depends(get_db),
):
    """Nominate a new owner. Takes effect only once they confirm."""
    state = await OwnershipService(db, EventLog(db, clock)).initiate_transfer(caller, request.new_owner)
    await db.commit()
    return OwnershipResponse(owner=state.owner, pending_owner=state.pending_owner)


@router.post("/ownership/confirm", response_model=OwnershipResponse)
async def confirm_ownership_transfer(
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
    db: AsyncSession = Depends(get_db),
):
    """Accept a pending ownership transfer (pending owner only)"""
    state = await OwnershipService(db, EventLog(db, clock)).confirm_transfer(caller)
    await db.commit()
    return OwnershipResponse(owner=state.owner, pending_owner=state.pending_owner)


@router.get("/roles/{identity}", response_model=RolesResponse)
async def get_roles(identity: str, db: AsyncSession = Depends(get_db)):
    """Roles held by an identity"""
    return RolesResponse(identity=identity, roles=await RoleDirectory(db).roles_of(identity))


@router.post("/roles", response_model=RolesResponse)
async def assign_role(
    request: RoleRequest,
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
    db: AsyncSession = Depends(get_db),
):
    """Give an identity a role (admin only)"""
    roles = RoleDirectory(db, EventLog(db, clock))
    changed = await roles.assign_role(caller, request.identity, request.role)
    await db.commit()
    return RolesResponse(identity=request.identity, roles=await roles.roles_of(request.identity), changed=changed)


@router.delete("/roles", response_model=RolesResponse)
async def revoke_role(
    request: RoleRequest,
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
    db: AsyncSession = Depends(get_db),
):
    """Remove a role from an identity (admin only)"""
    roles = RoleDirectory(db, EventLog(db, clock))
    changed = await roles.revoke_role(caller, request.identity, request.role)
    await db.commit()
    return RolesResponse(identity=request.identity, roles=await roles.roles_of(request.identity), changed=changed)
