"""Database models"""
from vesting_ledger.models.database import Base, get_db
from vesting_ledger.models.equity import EquityClass, EmployeeGrant, BASIS_POINTS
from vesting_ledger.models.ledger_event import LedgerEvent, EventType
from vesting_ledger.models.engine_state import EngineState
from vesting_ledger.models.token import TokenBalance
from vesting_ledger.models.access import Role, RoleAssignment

__all__ = [
    "Base",
    "get_db",
    "EquityClass",
    "EmployeeGrant",
    "BASIS_POINTS",
    "LedgerEvent",
    "EventType",
    "EngineState",
    "TokenBalance",
    "Role",
    "RoleAssignment",
]
