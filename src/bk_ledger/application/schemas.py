"""Pydantic schemas for bk_ledger API."""

from decimal import Decimal

from pydantic import BaseModel, Field

from src.bk_ledger.domain.models import Transaction

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class _AmountRequest(BaseModel):
    account_id: int = Field(..., gt=0, description="Account initiating the operation")
    amount: Decimal = Field(
        ..., gt=0, max_digits=20, decimal_places=2, description="Positive amount, 2 decimals max"
    )
    description: str | None = Field(None, max_length=255)


class DepositRequest(_AmountRequest):
    pass


class WithdrawalRequest(_AmountRequest):
    pass


class TransferRequest(_AmountRequest):
    to_account_id: int = Field(..., gt=0, description="Recipient account")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class TransactionResponse(BaseModel):
    id: int
    # Decimal rendered as a string so no client ever parses it as a float
    amount: str
    transaction_type: str
    transaction_status: str
    description: str | None
    from_account_id: int | None
    to_account_id: int | None
    created_at: str

    @classmethod
    def from_domain(cls, transaction: Transaction) -> "TransactionResponse":
        return cls(
            id=transaction.id,
            amount=str(transaction.amount),
            transaction_type=transaction.transaction_type.value,
            transaction_status=transaction.transaction_status.value,
            description=transaction.description,
            from_account_id=transaction.from_account_id,
            to_account_id=transaction.to_account_id,
            created_at=transaction.created_at.isoformat(),
        )


class TransactionListResponse(BaseModel):
    items: list[TransactionResponse]
    total: int

    @classmethod
    def from_domain(cls, transactions: list[Transaction]) -> "TransactionListResponse":
        return cls(
            items=[TransactionResponse.from_domain(t) for t in transactions],
            total=len(transactions),
        )
