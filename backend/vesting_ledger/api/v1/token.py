"""Token ledger API endpoints"""
from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.ext.asyncio import AsyncSession

from vesting_ledger.api.deps import get_caller, get_clock, Clock
from vesting_ledger.models.database import get_db
from vesting_ledger.schemas.token import BalanceResponse, MintRequest, TransferRequest, TransferResponse
from vesting_ledger.services.access_policy import is_null_identity
from vesting_ledger.services.event_log import EventLog
from vesting_ledger.services.token_ledger import TokenLedgerService

router = APIRouter()


@router.get("/balance/{identity}", response_model=BalanceResponse)
async def get_balance(identity: str = Path(...), db: AsyncSession = Depends(get_db)):
    """Token balance of an identity"""
    balance = await TokenLedgerService(db).balance_of(identity)
    return BalanceResponse(identity=identity, balance=balance)


@router.post("/mint", response_model=BalanceResponse)
async def mint_tokens(
    request: MintRequest,
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
    db: AsyncSession = Depends(get_db),
):
    """Mint tokens (minter only)"""
    ledger = TokenLedgerService(db, events=EventLog(db, clock))
    balance = await ledger.mint(caller, request.recipient, request.amount)
    await db.commit()
    return BalanceResponse(identity=request.recipient, balance=balance)


@router.post("/transfer", response_model=TransferResponse)
async def transfer_tokens(
    request: TransferRequest,
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
    db: AsyncSession = Depends(get_db),
):
    """Transfer tokens from the caller's own balance"""
    if is_null_identity(caller) or is_null_identity(request.recipient):
        raise HTTPException(status_code=400, detail="Sender and recipient are required")

    ledger = TokenLedgerService(db, events=EventLog(db, clock))
    if not await ledger.transfer(caller, request.recipient.strip(), request.amount):
        raise HTTPException(status_code=400, detail="Transfer failed")
    await db.commit()

    return TransferResponse(
        message=f"Successfully transferred {request.amount} tokens",
        sender=caller,
        recipient=request.recipient.strip(),
        amount=request.amount,
        sender_balance=await ledger.balance_of(caller),
    )
