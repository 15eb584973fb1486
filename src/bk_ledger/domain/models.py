"""Domain models for bk_ledger — pure dataclasses, no SQLAlchemy dependency.

A ledger operation is one of three variants. Each variant names the account it
debits (`from_account_id`) and the account it credits (`to_account_id`), which
is all the engine's single load → validate → compute → write+log pipeline
needs to know about it:

    DepositOp     from=None        to=account_id
    WithdrawalOp  from=account_id  to=None
    TransferOp    from=account_id  to=to_account_id
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import ClassVar

from src.bk_common.enums import TransactionStatus, TransactionType
from src.bk_common.errors import InvalidOperationTypeError, RecipientRequiredError
from src.bk_common.money import parse_amount


@dataclass(frozen=True)
class Transaction:
    """A persisted, immutable transaction row."""

    id: int
    amount: Decimal
    transaction_type: TransactionType
    transaction_status: TransactionStatus
    description: str | None
    from_account_id: int | None
    to_account_id: int | None
    created_at: datetime

    def involves(self, account_ids: set[int]) -> bool:
        return self.from_account_id in account_ids or self.to_account_id in account_ids


@dataclass(frozen=True)
class NewTransaction:
    """Append payload; id and created_at are assigned by the store."""

    amount: Decimal
    transaction_type: TransactionType
    from_account_id: int | None = None
    to_account_id: int | None = None
    description: str | None = None
    transaction_status: TransactionStatus = TransactionStatus.COMPLETED

    def __post_init__(self) -> None:
        legs = (self.from_account_id is not None, self.to_account_id is not None)
        expected = {
            TransactionType.DEPOSIT: (False, True),
            TransactionType.WITHDRAWAL: (True, False),
            TransactionType.TRANSFER: (True, True),
        }[self.transaction_type]
        if legs != expected:
            raise ValueError(
                f"{self.transaction_type.value} requires legs from={expected[0]} to={expected[1]}"
            )
        if self.from_account_id is not None and self.from_account_id == self.to_account_id:
            raise ValueError("Transaction legs must reference different accounts")
        if self.amount <= 0:
            raise ValueError("Transaction amount must be positive")


@dataclass(frozen=True)
class DepositOp:
    transaction_type: ClassVar[TransactionType] = TransactionType.DEPOSIT

    account_id: int
    amount: Decimal
    description: str | None = None

    @property
    def from_account_id(self) -> int | None:
        return None

    @property
    def to_account_id(self) -> int | None:
        return self.account_id


@dataclass(frozen=True)
class WithdrawalOp:
    transaction_type: ClassVar[TransactionType] = TransactionType.WITHDRAWAL

    account_id: int
    amount: Decimal
    description: str | None = None

    @property
    def from_account_id(self) -> int | None:
        return self.account_id

    @property
    def to_account_id(self) -> int | None:
        return None


@dataclass(frozen=True)
class TransferOp:
    transaction_type: ClassVar[TransactionType] = TransactionType.TRANSFER

    account_id: int
    to_account_id: int
    amount: Decimal
    description: str | None = None

    @property
    def from_account_id(self) -> int | None:
        return self.account_id


LedgerOperation = DepositOp | WithdrawalOp | TransferOp


@dataclass(frozen=True)
class TransactionRequest:
    """A validated, already-authorized request from the HTTP layer."""

    transaction_type: TransactionType | str
    account_id: int
    amount: Decimal | int | str
    description: str | None = None
    to_account_id: int | None = None


def build_operation(request: TransactionRequest) -> LedgerOperation:
    """Turn a request into its operation variant.

    Raises:
        InvalidOperationTypeError: unknown transaction type.
        InvalidAmountError: malformed, non-positive or over-precise amount.
        RecipientRequiredError: TRANSFER without to_account_id.
    """
    try:
        tx_type = TransactionType(request.transaction_type)
    except ValueError:
        raise InvalidOperationTypeError(request.transaction_type) from None

    amount = parse_amount(request.amount)

    if tx_type == TransactionType.DEPOSIT:
        return DepositOp(request.account_id, amount, request.description)
    if tx_type == TransactionType.WITHDRAWAL:
        return WithdrawalOp(request.account_id, amount, request.description)
    if request.to_account_id is None:
        raise RecipientRequiredError()
    return TransferOp(request.account_id, request.to_account_id, amount, request.description)
