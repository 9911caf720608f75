"""Vesting ledger services"""
from .equity_registry import EquityClassRegistry
from .employee_ledger import EmployeeEquityLedger
from .claim_processor import ClaimProcessor, ClaimResult
from .ownership import OwnershipService
from .reporting import ReportingService, CompanySummary
from .access_policy import AccessPolicy, RoleDirectory
from .token_ledger import TokenLedger, TokenLedgerService
from .event_log import EventLog
from . import vesting_calculator

__all__ = [
    "EquityClassRegistry",
    "EmployeeEquityLedger",
    "ClaimProcessor",
    "ClaimResult",
    "OwnershipService",
    "ReportingService",
    "CompanySummary",
    "AccessPolicy",
    "RoleDirectory",
    "TokenLedger",
    "TokenLedgerService",
    "EventLog",
    "vesting_calculator",
]
