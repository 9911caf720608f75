"""Fungible token ledger"""
from typing import Optional, Protocol, runtime_checkable

import structlog
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from vesting_ledger.models.ledger_event import EventType
from vesting_ledger.models.token import TokenBalance
from vesting_ledger.services.access_policy import AccessPolicy, RoleDirectory, require_minter, require_identity
from vesting_ledger.services.event_log import EventLog

logger = structlog.get_logger()


@runtime_checkable
class TokenLedger(Protocol):
    """Token operations consumed by the claim processor"""

    async def balance_of(self, identity: str) -> int:
        ...

    async def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        ...


class TokenLedgerService:
    """TokenLedger backed by the token_balances table.

    `transfer` reports failure through its return value rather than raising,
    so callers must check it.
    """

    def __init__(
        self,
        db: AsyncSession,
        access_policy: Optional[AccessPolicy] = None,
        events: Optional[EventLog] = None,
    ):
        self.db = db
        self.events = events or EventLog(db)
        self.access_policy = access_policy or RoleDirectory(db, self.events)

    async def _get_row(self, identity: str) -> Optional[TokenBalance]:
        result = await self.db.execute(
            select(TokenBalance).where(TokenBalance.identity == identity)
        )
        return result.scalar_one_or_none()

    async def _credit(self, identity: str, amount: int) -> None:
        row = await self._get_row(identity)
        if row:
            row.balance += amount
        else:
            self.db.add(TokenBalance(identity=identity, balance=amount))

    async def balance_of(self, identity: str) -> int:
        row = await self._get_row(identity)
        return row.balance if row else 0

    async def total_supply(self) -> int:
        result = await self.db.execute(select(func.coalesce(func.sum(TokenBalance.balance), 0)))
        return int(result.scalar_one())

    async def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        """Move `amount` from sender to recipient. Returns False instead of raising."""
        if amount <= 0 or not recipient or sender == recipient:
            return False

        source = await self._get_row(sender)
        if source is None or source.balance < amount:
            logger.warning(
                "Transfer rejected, insufficient balance",
                sender=sender,
                recipient=recipient,
                amount=amount,
                balance=source.balance if source else 0,
            )
            return False

        source.balance -= amount
        await self._credit(recipient, amount)
        await self.db.flush()

        await self.events.record(
            EventType.TRANSFER,
            identity=sender,
            identity_to=recipient,
            amount=amount,
            triggered_by=sender,
        )
        return True

    async def mint(self, caller: str, recipient: str, amount: int) -> int:
        """Create new tokens for `recipient`. Minter only. Returns the new balance."""
        await require_minter(self.access_policy, caller)
        recipient = require_identity(recipient, "recipient")
        if amount <= 0:
            raise ValueError("Mint amount must be positive")

        await self._credit(recipient, amount)
        await self.db.flush()

        await self.events.record(
            EventType.MINT,
            identity=recipient,
            amount=amount,
            triggered_by=caller,
        )
        logger.info("Minted tokens", recipient=recipient, amount=amount, caller=caller)
        return await self.balance_of(recipient)
