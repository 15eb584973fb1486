"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/Access
  2xxx: Account
  3xxx: Transaction
  9xxx: System / Storage

Only errors flagged `retryable` may be retried by a caller. Business-rule
failures (insufficient funds, same-account transfer, ...) never are.
"""

from decimal import Decimal


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
        retryable: bool = False,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        self.retryable = retryable
        super().__init__(message)


# --- 1xxx: Auth/Access ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid or expired credentials", 401)


class ForbiddenError(AppError):
    def __init__(self, detail: str = "You do not have permission to access this resource") -> None:
        super().__init__(1006, detail, 403)


# --- 2xxx: Account ---

class InsufficientFundsError(AppError):
    def __init__(self, operation: str, required: Decimal, available: Decimal) -> None:
        super().__init__(
            2001,
            f"Insufficient funds for {operation}: required {required}, available {available}",
            422,
        )


class AccountNotFoundError(AppError):
    def __init__(self, account_id: int) -> None:
        super().__init__(2002, f"Account not found: {account_id}", 404)


class RecipientNotFoundError(AppError):
    def __init__(self, account_id: int) -> None:
        super().__init__(2003, f"Recipient account not found: {account_id}", 404)


class AccountNameExistsError(AppError):
    def __init__(self, account_name: str) -> None:
        super().__init__(2004, f"Account name already exists: {account_name}", 409)


class AccountBalanceNotZeroError(AppError):
    def __init__(self, account_id: int, balance: Decimal) -> None:
        super().__init__(
            2005,
            f"Account {account_id} balance must be zero before deletion (balance {balance})",
            400,
        )


# --- 3xxx: Transaction ---

class TransactionNotFoundError(AppError):
    def __init__(self, transaction_id: int) -> None:
        super().__init__(3001, f"Transaction not found: {transaction_id}", 404)


class SameAccountTransferError(AppError):
    def __init__(self) -> None:
        super().__init__(3002, "Cannot transfer to the same account", 400)


class InvalidOperationTypeError(AppError):
    def __init__(self, transaction_type: object) -> None:
        super().__init__(3003, f"Invalid transaction type: {transaction_type}", 400)


class InvalidAmountError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3004, f"Invalid amount: {detail}", 400)


class RecipientRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(
            3005, "Recipient account ID (to_account_id) is required for transfer", 400
        )


# --- 9xxx: System / Storage ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class TransientStorageError(AppError):
    """Timeout, lock conflict or serialization failure; safe to retry."""

    def __init__(self, detail: str = "Storage temporarily unavailable") -> None:
        super().__init__(9003, detail, 503, retryable=True)


class StorageError(AppError):
    """Non-retryable storage failure (constraint violation, broken schema, ...)."""

    def __init__(self, detail: str = "Storage failure") -> None:
        super().__init__(9004, detail, 500)


class CommitOutcomeUnknownError(AppError):
    """COMMIT was sent but never acknowledged; the unit may already be durable."""

    def __init__(self) -> None:
        super().__init__(
            9005, "Commit outcome unknown, check transaction history before retrying", 500
        )
