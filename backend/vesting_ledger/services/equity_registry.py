"""Equity class registry"""
from typing import List, Optional

import structlog
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from vesting_ledger.errors import InvalidEquityClass
from vesting_ledger.models.equity import EquityClass, MAX_NAME_BYTES
from vesting_ledger.models.ledger_event import EventType
from vesting_ledger.services.access_policy import AccessPolicy, RoleDirectory, require_admin
from vesting_ledger.services.event_log import EventLog

logger = structlog.get_logger()

# Collide with fixed routes under /equity-classes
RESERVED_CLASS_NAMES = frozenset({"names"})


def validate_class_parameters(
    name: str,
    token_count: int,
    cliff_period: int,
    vesting_period: int,
    vesting_percentage: int,
) -> str:
    """Check caller-supplied class parameters, returning the normalized name"""
    name = (name or "").strip()
    if not name:
        raise InvalidEquityClass("Equity class name is required")
    if len(name.encode("utf-8")) > MAX_NAME_BYTES:
        raise InvalidEquityClass(f"Equity class name must fit in {MAX_NAME_BYTES} bytes", name=name)
    if name in RESERVED_CLASS_NAMES:
        raise InvalidEquityClass(f"Equity class name {name!r} is reserved", name=name)
    if token_count <= 0:
        raise InvalidEquityClass("Token count must be positive", name=name)
    if cliff_period < 0:
        raise InvalidEquityClass("Cliff period cannot be negative", name=name)
    if vesting_period <= 0:
        raise InvalidEquityClass("Vesting period must be positive", name=name)
    if vesting_percentage <= 0 or vesting_percentage > 100:
        raise InvalidEquityClass("Vesting percentage must be between 1 and 100", name=name)
    return name


class EquityClassRegistry:
    """Defines and looks up named vesting policies."""

    def __init__(
        self,
        db: AsyncSession,
        access_policy: Optional[AccessPolicy] = None,
        events: Optional[EventLog] = None,
    ):
        self.db = db
        self.events = events or EventLog(db)
        self.access_policy = access_policy or RoleDirectory(db, self.events)

    async def _get(self, name: str) -> Optional[EquityClass]:
        result = await self.db.execute(
            select(EquityClass).where(EquityClass.name == name)
        )
        return result.scalar_one_or_none()

    async def _next_position(self) -> int:
        result = await self.db.execute(select(func.max(EquityClass.position)))
        current = result.scalar_one_or_none()
        return 0 if current is None else current + 1

    async def define(
        self,
        caller: str,
        name: str,
        token_count: int,
        cliff_period: int,
        vesting_period: int,
        vesting_percentage: int,
    ) -> EquityClass:
        """
        Create or overwrite an equity class. Admin only.

        Args:
            caller: Identity performing the definition
            name: Unique class name
            token_count: Tokens awarded per grant
            cliff_period: Seconds before the first unlock
            vesting_period: Seconds between unlocks after the cliff
            vesting_percentage: Whole percent (1-100) unlocked per step

        Returns:
            The stored EquityClass (percentage in basis points)
        """
        await require_admin(self.access_policy, caller)
        name = validate_class_parameters(name, token_count, cliff_period, vesting_period, vesting_percentage)

        percentage_bp = vesting_percentage * 100
        equity_class = await self._get(name)
        is_new = equity_class is None

        if is_new:
            equity_class = EquityClass(name=name, position=await self._next_position())
            self.db.add(equity_class)

        # Existing grants keep their total_tokens snapshot but read the other
        # parameters from here at query time.
        equity_class.token_count = token_count
        equity_class.cliff_period = cliff_period
        equity_class.vesting_period = vesting_period
        equity_class.vesting_percentage = percentage_bp
        await self.db.flush()

        await self.events.record(
            EventType.CLASS_DEFINED,
            class_name=name,
            amount=token_count,
            data={
                "cliff_period": cliff_period,
                "vesting_period": vesting_period,
                "vesting_percentage_bp": percentage_bp,
                "redefined": not is_new,
            },
            triggered_by=caller,
        )

        logger.info(
            "Equity class defined",
            name=name,
            token_count=token_count,
            cliff_period=cliff_period,
            vesting_period=vesting_period,
            vesting_percentage_bp=percentage_bp,
            redefined=not is_new,
        )

        return equity_class

    async def details(self, name: str) -> EquityClass:
        """Stored class, or an all-zero class when `name` is undefined"""
        equity_class = await self._get((name or "").strip())
        return equity_class if equity_class is not None else EquityClass.empty(name)

    async def names(self) -> List[str]:
        """Class names in definition order"""
        result = await self.db.execute(
            select(EquityClass.name).order_by(EquityClass.position)
        )
        return list(result.scalars().all())

    async def list_classes(self) -> List[EquityClass]:
        result = await self.db.execute(
            select(EquityClass).order_by(EquityClass.position)
        )
        return list(result.scalars().all())
