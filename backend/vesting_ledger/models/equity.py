"""Equity class and employee grant models"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, BigInteger, DateTime, ForeignKey

from vesting_ledger.models.database import Base

# Vesting percentages are stored in basis points (1% == 100 bp)
BASIS_POINTS = 10000
MAX_NAME_BYTES = 32


class EquityClass(Base):
    """Named vesting policy.

    `vesting_percentage` is the fraction unlocked at the cliff and at every
    subsequent vesting period, in basis points.
    """
    __tablename__ = "equity_classes"

    name = Column(String(MAX_NAME_BYTES), primary_key=True)
    token_count = Column(BigInteger, nullable=False)
    cliff_period = Column(BigInteger, nullable=False, default=0)  # seconds
    vesting_period = Column(BigInteger, nullable=False)  # seconds
    vesting_percentage = Column(Integer, nullable=False)  # basis points
    # Enumeration order, assigned once on first definition
    position = Column(Integer, nullable=False, unique=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @classmethod
    def empty(cls, name: str = "") -> "EquityClass":
        """All-zero class returned for names that were never defined"""
        return cls(
            name=name,
            token_count=0,
            cliff_period=0,
            vesting_period=0,
            vesting_percentage=0,
            position=-1,
        )

    @property
    def exists(self) -> bool:
        return bool(self.token_count)

    @property
    def vesting_percentage_whole(self) -> float:
        """Percentage unlocked per period as a whole-number percent"""
        return (self.vesting_percentage or 0) / 100

    def __repr__(self):
        return f"<EquityClass {self.name} ({self.token_count} tokens, {self.vesting_percentage} bp)>"


class EmployeeGrant(Base):
    """One grant per employee, created once and never replaced.

    `total_tokens` is a snapshot of the class token count at grant time, so
    redefining the class later does not change the allocation. Only
    `claimed_tokens` changes after creation.
    """
    __tablename__ = "employee_grants"

    employee = Column(String(64), primary_key=True)
    equity_class = Column(String(MAX_NAME_BYTES), ForeignKey("equity_classes.name"), nullable=False, index=True)
    total_tokens = Column(BigInteger, nullable=False)
    start_time = Column(BigInteger, nullable=False)  # Unix seconds
    claimed_tokens = Column(BigInteger, nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def remaining_tokens(self) -> int:
        return self.total_tokens - (self.claimed_tokens or 0)

    def __repr__(self):
        return f"<EmployeeGrant {self.employee} ({self.equity_class}, {self.claimed_tokens}/{self.total_tokens})>"
