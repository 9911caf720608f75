"""Shared API dependencies"""
from typing import Optional

from fastapi import Header

from vesting_ledger.services.clock import Clock, get_clock

__all__ = ["get_caller", "get_clock", "Clock"]


async def get_caller(x_caller: Optional[str] = Header(default=None)) -> str:
    """Identity of the caller, taken from the X-Caller header"""
    return (x_caller or "").strip()
