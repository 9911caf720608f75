"""Vesting math.

All vesting is discrete and percentage-based: a fixed share of the grant
unlocks when the cliff is reached and the same share again at the end of
every vesting period after it, until 100% is reached.

Percentages are basis points and all division is integer floor division.
Functions here never touch the database; they accept any objects exposing
the grant fields (`total_tokens`, `start_time`, `claimed_tokens`) and the
class fields (`cliff_period`, `vesting_period`, `vesting_percentage`).
"""
from dataclasses import dataclass
from typing import Optional

from vesting_ledger.models.equity import BASIS_POINTS


@dataclass(frozen=True)
class UnlockEvent:
    """Next scheduled unlock. `amount == 0` and `time == 0` means fully vested."""
    amount: int = 0
    time: int = 0

    @property
    def pending(self) -> bool:
        return self.amount > 0


NO_UNLOCK = UnlockEvent()


def _has_grant(grant, equity_class) -> bool:
    if grant is None or equity_class is None or not getattr(grant, "equity_class", None):
        return False
    # An all-zero class means the referenced class is not defined
    return equity_class.vesting_period > 0


def period_increment(total_tokens: int, vesting_percentage: int) -> int:
    """Tokens unlocked by a single step (the cliff or one vesting period)"""
    return total_tokens * vesting_percentage // BASIS_POINTS


def cliff_remaining(grant, equity_class, now: int) -> int:
    """Seconds left until the cliff, 0 once it has been reached"""
    if not _has_grant(grant, equity_class):
        return 0
    cliff_at = grant.start_time + equity_class.cliff_period
    return max(0, cliff_at - now)


def completed_periods(grant, equity_class, now: int) -> Optional[int]:
    """Whole vesting periods finished since the cliff, None before the cliff"""
    elapsed = now - grant.start_time
    if elapsed < equity_class.cliff_period:
        return None
    vesting_time = elapsed - equity_class.cliff_period
    return vesting_time // equity_class.vesting_period


def vested_basis_points(grant, equity_class, now: int) -> int:
    """Share of the grant vested at `now`, capped at 10000 bp"""
    if not _has_grant(grant, equity_class):
        return 0
    periods = completed_periods(grant, equity_class, now)
    if periods is None:
        return 0
    return min(equity_class.vesting_percentage * (1 + periods), BASIS_POINTS)


def total_vested_amount(grant, equity_class, now: int) -> int:
    """Tokens vested at `now`, ignoring what has already been claimed"""
    if not _has_grant(grant, equity_class):
        return 0
    return grant.total_tokens * vested_basis_points(grant, equity_class, now) // BASIS_POINTS


def claimable_amount(grant, equity_class, now: int) -> int:
    """Vested tokens not yet claimed. Zero for missing grants."""
    if not _has_grant(grant, equity_class):
        return 0
    return max(0, total_vested_amount(grant, equity_class, now) - (grant.claimed_tokens or 0))


def next_unlock(grant, equity_class, now: int) -> UnlockEvent:
    """Amount and time of the next unlock, NO_UNLOCK once fully vested"""
    if not _has_grant(grant, equity_class):
        return NO_UNLOCK

    step = period_increment(grant.total_tokens, equity_class.vesting_percentage)
    cliff_at = grant.start_time + equity_class.cliff_period

    periods = completed_periods(grant, equity_class, now)
    if periods is None:
        return UnlockEvent(amount=step, time=cliff_at)

    current_periods = 1 + periods
    if current_periods * equity_class.vesting_percentage >= BASIS_POINTS:
        return NO_UNLOCK

    return UnlockEvent(
        amount=step,
        time=cliff_at + current_periods * equity_class.vesting_period,
    )


def vesting_progress(grant) -> float:
    """Claimed tokens as a percentage of the grant (0-100)"""
    if grant is None or not grant.total_tokens:
        return 0.0
    return round((grant.claimed_tokens or 0) * 100 / grant.total_tokens, 2)
