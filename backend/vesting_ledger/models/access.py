"""Role assignment model"""
from datetime import datetime
from enum import Enum
from sqlalchemy import Column, Integer, String, DateTime, UniqueConstraint

from vesting_ledger.models.database import Base


class Role(str, Enum):
    """Capabilities checked by the access policy"""
    ADMIN = "admin"
    GRANTER = "granter"
    MINTER = "minter"


class RoleAssignment(Base):
    """An identity holding a role"""
    __tablename__ = "role_assignments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    identity = Column(String(64), nullable=False, index=True)
    role = Column(String(20), nullable=False)
    granted_by = Column(String(64), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('identity', 'role', name='uq_role_assignment'),
    )

    def __repr__(self):
        return f"<RoleAssignment {self.identity} ({self.role})>"
