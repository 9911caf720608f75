"""Claim API endpoints"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vesting_ledger.api.deps import get_caller, get_clock, Clock
from vesting_ledger.models.database import get_db
from vesting_ledger.schemas.equity import ClaimResponse
from vesting_ledger.services.claim_processor import ClaimProcessor

router = APIRouter()


@router.post("", response_model=ClaimResponse)
async def claim_vested_tokens(
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
    db: AsyncSession = Depends(get_db),
):
    """Claim the caller's vested, unclaimed tokens"""
    result = await ClaimProcessor(db, clock=clock).claim(caller, commit=True)

    return ClaimResponse(
        message=f"Successfully claimed {result.amount} tokens",
        employee=result.employee,
        amount=result.amount,
        claimed_tokens=result.claimed_tokens,
        total_tokens=result.total_tokens,
        claimed_at=result.claimed_at,
    )
