"""Domain errors raised by the service layer.

Every error carries the HTTP status the routers translate it to.
Validation errors are raised before any write, so the caller may fix the
input and resubmit. PersistenceFailure means the order was rolled back and
not applied.
"""

from decimal import Decimal


class SimTraderError(ValueError):
    """Base class for service errors."""

    status_code: int = 400

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


# --- Order validation ---


class InvalidQuantity(SimTraderError):
    def __init__(self, quantity) -> None:
        super().__init__(f"Quantity must be a positive integer, got {quantity!r}")


class InvalidPrice(SimTraderError):
    def __init__(self, price) -> None:
        super().__init__(f"LIMIT orders require a positive limit price, got {price!r}")


class InvalidStockPrice(SimTraderError):
    def __init__(self, price) -> None:
        super().__init__(f"Stock price must be at least 0.01, got {price!r}")


class InsufficientFunds(SimTraderError):
    def __init__(self, required: Decimal, available: Decimal) -> None:
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient funds: have {available:.2f} available, need {required:.2f}"
        )


class InsufficientShares(SimTraderError):
    def __init__(self, requested: int, owned: int) -> None:
        self.requested = requested
        self.owned = owned
        super().__init__(
            f"Insufficient shares: have {owned} available, need {requested}"
        )


# --- Lookups ---


class NotFound(SimTraderError):
    status_code = 404


class InstrumentNotFound(NotFound):
    def __init__(self, stock_id) -> None:
        super().__init__(f"Stock '{stock_id}' not found")


class AccountNotFound(NotFound):
    def __init__(self, account_id: str) -> None:
        super().__init__(f"Account '{account_id}' not found")


class Conflict(SimTraderError):
    status_code = 409


# --- Execution ---


class PersistenceFailure(SimTraderError):
    status_code = 500

    def __init__(self, message: str = "Failed to execute order") -> None:
        super().__init__(message)
