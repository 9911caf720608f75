"""Token balance model"""
from datetime import datetime
from sqlalchemy import Column, String, BigInteger, DateTime

from vesting_ledger.models.database import Base


class TokenBalance(Base):
    """Fungible token balance held by an identity"""
    __tablename__ = "token_balances"

    identity = Column(String(64), primary_key=True)
    balance = Column(BigInteger, nullable=False, default=0)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<TokenBalance {self.identity}: {self.balance}>"
