"""Admin schemas"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from vesting_ledger.models.access import Role


class CompanySummaryResponse(BaseModel):
    custody_account: str
    total_tokens_for_company: int
    total_tokens_locked_for_employees: int
    total_tokens_released_to_employees: int
    tokens_outstanding: int
    tokens_claimable: int
    grant_count: int
    released_counter_consistent: bool


class OwnershipResponse(BaseModel):
    owner: str
    pending_owner: Optional[str] = None


class InitiateOwnershipTransferRequest(BaseModel):
    new_owner: str


class RoleRequest(BaseModel):
    identity: str
    role: Role


class RolesResponse(BaseModel):
    identity: str
    roles: List[Role]
    changed: bool = False


class LedgerEventResponse(BaseModel):
    id: int
    event_type: str
    timestamp: int
    identity: Optional[str] = None
    identity_to: Optional[str] = None
    class_name: Optional[str] = None
    amount: Optional[int] = None
    data: Optional[Dict[str, Any]] = None
    triggered_by: Optional[str] = None
    created_at: Optional[datetime] = None
