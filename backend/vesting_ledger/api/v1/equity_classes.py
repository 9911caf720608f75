"""Equity class API endpoints"""
from typing import List

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from vesting_ledger.api.deps import get_caller, get_clock, Clock
from vesting_ledger.models.database import get_db
from vesting_ledger.models.equity import EquityClass
from vesting_ledger.schemas.equity import DefineEquityClassRequest, EquityClassResponse
from vesting_ledger.services.equity_registry import EquityClassRegistry
from vesting_ledger.services.event_log import EventLog

router = APIRouter()


def _class_to_response(ec: EquityClass) -> EquityClassResponse:
    return EquityClassResponse(
        name=ec.name,
        token_count=ec.token_count,
        cliff_period=ec.cliff_period,
        vesting_period=ec.vesting_period,
        vesting_percentage_bp=ec.vesting_percentage,
        vesting_percentage=ec.vesting_percentage_whole,
        exists=ec.exists,
    )


@router.post("", response_model=EquityClassResponse)
async def define_equity_class(
    request: DefineEquityClassRequest,
    caller: str = Depends(get_caller),
    clock: Clock = Depends(get_clock),
    db: AsyncSession = Depends(get_db),
):
    """Define or redefine an equity class (admin only)"""
    registry = EquityClassRegistry(db, events=EventLog(db, clock))
    equity_class = await registry.define(
        caller,
        request.name,
        request.token_count,
        request.cliff_period,
        request.vesting_period,
        request.vesting_percentage,
    )
    await db.commit()
    return _class_to_response(equity_class)


@router.get("", response_model=List[EquityClassResponse])
async def list_equity_classes(db: AsyncSession = Depends(get_db)):
    """List equity classes in definition order"""
    registry = EquityClassRegistry(db)
    return [_class_to_response(ec) for ec in await registry.list_classes()]


@router.get("/names", response_model=List[str])
async def list_equity_class_names(db: AsyncSession = Depends(get_db)):
    """Equity class names in definition order"""
    return await EquityClassRegistry(db).names()


@router.get("/{name}", response_model=EquityClassResponse)
async def get_equity_class(name: str = Path(...), db: AsyncSession = Depends(get_db)):
    """Class details. Undefined names return an all-zero class with exists=false."""
    return _class_to_response(await EquityClassRegistry(db).details(name))
