"""Append-only ledger event model"""
import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, BigInteger, DateTime, JSON, Index, Enum as SQLEnum

from vesting_ledger.models.database import Base


class EventType(str, enum.Enum):
    """All events emitted by the engine."""
    # Equity
    CLASS_DEFINED = "class_defined"
    EQUITY_GRANTED = "equity_granted"
    TOKENS_CLAIMED = "tokens_claimed"

    # Ownership
    OWNERSHIP_TRANSFER_STARTED = "ownership_transfer_started"
    OWNERSHIP_TRANSFERRED = "ownership_transferred"

    # Access
    ROLE_ASSIGNED = "role_assigned"
    ROLE_REVOKED = "role_revoked"

    # Token ledger
    MINT = "mint"
    TRANSFER = "transfer"


class LedgerEvent(Base):
    """
    Single table capturing every committed state change.

    The autoincrement id is the commit sequence. Claim events carry the
    running claimed total so cumulative claims can be rebuilt from the log
    without querying grant state.
    """
    __tablename__ = "ledger_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_type = Column(SQLEnum(EventType), nullable=False, index=True)

    # Logical time the event was committed at (Unix seconds)
    timestamp = Column(BigInteger, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    identity = Column(String(64), nullable=True, index=True)  # Primary identity involved
    identity_to = Column(String(64), nullable=True)  # Secondary identity (transfers, ownership)
    class_name = Column(String(32), nullable=True)
    amount = Column(BigInteger, nullable=True)

    data = Column(JSON, nullable=True)
    triggered_by = Column(String(64), nullable=True)

    __table_args__ = (
        Index('ix_ledger_events_identity_type', 'identity', 'event_type'),
    )

    def __repr__(self):
        return f"<LedgerEvent(id={self.id}, type={self.event_type}, identity={self.identity}, amount={self.amount})>"
