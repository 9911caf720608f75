"""Role-based access policy"""
from typing import List, Optional, Protocol, runtime_checkable

import structlog
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from vesting_ledger.errors import Unauthorized, ZeroIdentity
from vesting_ledger.models.access import Role, RoleAssignment
from vesting_ledger.models.engine_state import EngineState, ENGINE_STATE_ID
from vesting_ledger.models.ledger_event import EventType
from vesting_ledger.services.event_log import EventLog

logger = structlog.get_logger()

NULL_ADDRESS = "0x" + "0" * 40


def is_null_identity(identity: Optional[str]) -> bool:
    """True for missing, blank or all-zero identities"""
    if identity is None or not identity.strip():
        return True
    return identity.strip().lower() == NULL_ADDRESS


def require_identity(identity: Optional[str], field: str = "identity") -> str:
    if is_null_identity(identity):
        raise ZeroIdentity(field)
    return identity.strip()


@runtime_checkable
class AccessPolicy(Protocol):
    """Capability checks consumed by the engine"""

    async def is_admin(self, identity: str) -> bool:
        ...

    async def is_granter(self, identity: str) -> bool:
        ...

    async def is_minter(self, identity: str) -> bool:
        ...


async def require_admin(policy: AccessPolicy, caller: Optional[str]) -> None:
    if is_null_identity(caller) or not await policy.is_admin(caller):
        logger.warning("Rejected caller without admin capability", caller=caller)
        raise Unauthorized(caller, Role.ADMIN.value)


async def require_granter(policy: AccessPolicy, caller: Optional[str]) -> None:
    if is_null_identity(caller) or not await policy.is_granter(caller):
        logger.warning("Rejected caller without granter capability", caller=caller)
        raise Unauthorized(caller, Role.GRANTER.value)


async def require_minter(policy: AccessPolicy, caller: Optional[str]) -> None:
    if is_null_identity(caller) or not await policy.is_minter(caller):
        logger.warning("Rejected caller without minter capability", caller=caller)
        raise Unauthorized(caller, Role.MINTER.value)


class RoleDirectory:
    """AccessPolicy backed by the role_assignments table.

    The current owner is always an admin. That capability moves with
    ownership, so it is not stored as a role assignment.
    """

    def __init__(self, db: AsyncSession, events: Optional[EventLog] = None):
        self.db = db
        self.events = events or EventLog(db)

    async def has_role(self, identity: str, role: Role) -> bool:
        result = await self.db.execute(
            select(RoleAssignment.id).where(
                RoleAssignment.identity == identity,
                RoleAssignment.role == role.value,
            )
        )
        return result.scalar_one_or_none() is not None

    async def is_owner(self, identity: str) -> bool:
        result = await self.db.execute(
            select(EngineState.owner).where(EngineState.id == ENGINE_STATE_ID)
        )
        owner = result.scalar_one_or_none()
        return owner is not None and owner == identity

    async def is_admin(self, identity: str) -> bool:
        return await self.is_owner(identity) or await self.has_role(identity, Role.ADMIN)

    async def is_granter(self, identity: str) -> bool:
        return await self.has_role(identity, Role.GRANTER)

    async def is_minter(self, identity: str) -> bool:
        return await self.has_role(identity, Role.MINTER)

    async def roles_of(self, identity: str) -> List[Role]:
        result = await self.db.execute(
            select(RoleAssignment.role)
            .where(RoleAssignment.identity == identity)
            .order_by(RoleAssignment.id)
        )
        roles = [Role(r) for r in result.scalars().all()]
        if Role.ADMIN not in roles and await self.is_owner(identity):
            roles.insert(0, Role.ADMIN)
        return roles

    async def _add(self, identity: str, role: Role, granted_by: Optional[str]) -> bool:
        if await self.has_role(identity, role):
            return False
        self.db.add(RoleAssignment(identity=identity, role=role.value, granted_by=granted_by))
        await self.db.flush()
        return True

    async def bootstrap_role(self, identity: str, role: Role) -> bool:
        """Assign a role without a caller check. Only used during bootstrap."""
        identity = require_identity(identity)
        return await self._add(identity, role, granted_by=None)

    async def assign_role(self, caller: str, identity: str, role: Role) -> bool:
        """Give `identity` a role. Admin only. Returns False if already held."""
        await require_admin(self, caller)
        identity = require_identity(identity)

        added = await self._add(identity, role, granted_by=caller)
        if added:
            await self.events.record(
                EventType.ROLE_ASSIGNED,
                identity=identity,
                data={"role": role.value},
                triggered_by=caller,
            )
            logger.info("Role assigned", identity=identity, role=role.value, caller=caller)
        return added

    async def revoke_role(self, caller: str, identity: str, role: Role) -> bool:
        """Remove a role from `identity`. Admin only. Returns False if not held."""
        await require_admin(self, caller)
        identity = require_identity(identity)

        result = await self.db.execute(
            delete(RoleAssignment).where(
                RoleAssignment.identity == identity,
                RoleAssignment.role == role.value,
            )
        )
        removed = (result.rowcount or 0) > 0
        if removed:
            await self.events.record(
                EventType.ROLE_REVOKED,
                identity=identity,
                data={"role": role.value},
                triggered_by=caller,
            )
            logger.info("Role revoked", identity=identity, role=role.value, caller=caller)
        return removed
