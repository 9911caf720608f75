"""Typed failures raised by the vesting engine"""
from typing import Any, Dict, Optional


class VestingError(Exception):
    """Base class for all engine errors.

    `code` is a stable machine-readable identifier and `status_code` the HTTP
    status the API layer reports for it.
    """
    code = "vesting_error"
    status_code = 400

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "detail": self.message, **self.context}


class Unauthorized(VestingError):
    code = "unauthorized"
    status_code = 403

    def __init__(self, caller: Optional[str], capability: str):
        super().__init__(
            f"Caller {caller!r} lacks the {capability} capability",
            caller=caller,
            capability=capability,
        )


class InvalidEquityClass(VestingError):
    code = "invalid_equity_class"


class ZeroIdentity(VestingError):
    code = "zero_identity"

    def __init__(self, field: str = "identity"):
        super().__init__(f"A non-null {field} is required", field=field)


class NoEquityGranted(VestingError):
    code = "no_equity_granted"
    status_code = 404

    def __init__(self, employee: str):
        super().__init__(f"No equity granted to {employee}", employee=employee)


class CliffPeriodNotMet(VestingError):
    code = "cliff_period_not_met"

    def __init__(self, employee: str, remaining_seconds: int):
        super().__init__(
            f"Cliff period not met, {remaining_seconds} seconds remaining",
            employee=employee,
            remaining_seconds=remaining_seconds,
        )
        self.remaining_seconds = remaining_seconds


class NoTokensToClaim(VestingError):
    code = "no_tokens_to_claim"

    def __init__(self, employee: str):
        super().__init__(f"No tokens available to claim for {employee}", employee=employee)


class TransferFailed(VestingError):
    code = "transfer_failed"
    status_code = 409

    def __init__(self, recipient: str, amount: int):
        super().__init__(
            f"Token transfer of {amount} to {recipient} failed",
            recipient=recipient,
            amount=amount,
        )


class ClaimInProgress(VestingError):
    code = "claim_in_progress"
    status_code = 409

    def __init__(self, employee: str):
        super().__init__(f"A claim for {employee} is already in progress", employee=employee)
