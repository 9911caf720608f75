"""Engine-wide state: ownership and release counter"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, BigInteger, DateTime

from vesting_ledger.models.database import Base

ENGINE_STATE_ID = 1


class EngineState(Base):
    """Single-row table holding owner, pending owner and the released counter"""
    __tablename__ = "engine_state"

    id = Column(Integer, primary_key=True, default=ENGINE_STATE_ID)
    owner = Column(String(64), nullable=False)
    pending_owner = Column(String(64), nullable=True)
    custody_account = Column(String(64), nullable=False)
    total_released = Column(BigInteger, nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<EngineState owner={self.owner} pending={self.pending_owner}>"
