"""Equity class and grant schemas"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class DefineEquityClassRequest(BaseModel):
    """Create or redefine an equity class.

    `vesting_percentage` is a whole percent (1-100) unlocked at the cliff and
    after every vesting period.
    """
    name: str
    token_count: int
    cliff_period: int = 0  # seconds
    vesting_period: int  # seconds
    vesting_percentage: int  # 1-100


class EquityClassResponse(BaseModel):
    name: str
    token_count: int
    cliff_period: int
    vesting_period: int
    vesting_percentage_bp: int
    vesting_percentage: float  # whole percent, for display
    exists: bool = True


class GrantEquityRequest(BaseModel):
    employee: str
    equity_class: str


class NextUnlockResponse(BaseModel):
    employee: str
    amount: int
    time: int
    fully_vested: bool


class VestedTokensResponse(BaseModel):
    employee: str
    claimable: int  # vested minus claimed
    total_vested: int
    claimed_tokens: int
    cliff_remaining: int = 0


class EmployeeGrantResponse(BaseModel):
    employee: str
    equity_class: str
    total_tokens: int
    start_time: int  # Unix timestamp
    claimed_tokens: int
    remaining_tokens: int
    total_vested: int
    available_to_claim: int
    vesting_done: float  # claimed as % of total
    next_unlock: Optional[NextUnlockResponse] = None
    created_at: Optional[datetime] = None


class ClaimResponse(BaseModel):
    message: str
    employee: str
    amount: int
    claimed_tokens: int
    total_tokens: int
    claimed_at: int
