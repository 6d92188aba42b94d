"""Rewardman exceptions."""


class RewardmanError(Exception):
    """
    Structured exception for ledger operations.

    Every error carries a stable ``code``, a human message and free-form
    ``data``. Callers (UI, API views) decide user messaging from the code.

    Usage:
        try:
            RewardsService.redeem(customer_id, reward_id)
        except RewardmanError as e:
            if e.code == "INSUFFICIENT_POINTS":
                show_balance(e.data["available"])
    """

    default_code = "REWARDMAN_ERROR"

    _default_messages = {
        "REWARDMAN_ERROR": "Loyalty ledger error",
        "INVALID_INPUT": "Invalid input",
        "INVALID_POINTS": "Points must be a positive integer",
        "INVALID_RANGE": "Start date is after end date",
        "DUPLICATE_EMAIL": "Email already registered",
        "NOT_FOUND": "Not found",
        "CUSTOMER_NOT_FOUND": "Customer not found",
        "REWARD_NOT_FOUND": "Reward not found",
        "INSUFFICIENT_POINTS": "Insufficient points for redemption",
        "BALANCE_CHANGED": "Customer balance changed during the operation",
        "CUSTOMER_BUSY": "Another operation is in progress for this customer",
        "BACKEND_UNAVAILABLE": "Persistence backend unavailable",
        "BACKEND_REJECTED": "Persistence backend rejected the request",
        "REDEMPTION_INCOMPLETE": "Balance was reset but the redemption record was not stored",
    }

    def __init__(self, code: str | None = None, message: str | None = None, **data):
        self.code = code or self.default_code
        self.message = message or self._default_messages.get(self.code, self.code)
        self.data = data
        super().__init__(f"[{self.code}] {self.message}")

    def as_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "data": self.data}


class ValidationError(RewardmanError):
    """Bad input shape or range. Raised before any write."""

    default_code = "INVALID_INPUT"


class DuplicateEmailError(RewardmanError):
    """Registration conflict. Recoverable: look up the existing customer."""

    default_code = "DUPLICATE_EMAIL"


class NotFoundError(RewardmanError):
    default_code = "NOT_FOUND"


class InsufficientPointsError(RewardmanError):
    default_code = "INSUFFICIENT_POINTS"


class ConcurrentUpdateError(RewardmanError):
    """The balance moved under us or the customer is locked. Reload and retry."""

    default_code = "BALANCE_CHANGED"


class BackendUnavailableError(RewardmanError):
    """Transient infrastructure failure. Never retried automatically on writes."""

    default_code = "BACKEND_UNAVAILABLE"


class RedemptionIncompleteError(BackendUnavailableError):
    """
    The customer's balance was reset but the redemption record write failed.

    ``data["record"]`` holds the pending record; pass it to
    ``redemption.complete_redemption`` to store it (the insert is idempotent).
    """

    default_code = "REDEMPTION_INCOMPLETE"
