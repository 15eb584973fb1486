"""Pydantic schemas for bk_account API."""

from pydantic import BaseModel, Field

from src.bk_account.domain.models import Account
from src.bk_common.enums import AccountStatus
from src.bk_common.money import format_money


class CreateAccountRequest(BaseModel):
    account_name: str = Field(..., min_length=1, max_length=100)
    currency: str | None = Field(
        None, pattern=r"^[A-Z]{3}$", description="ISO 4217 code, defaults to DEFAULT_CURRENCY"
    )


class RenameAccountRequest(BaseModel):
    account_name: str = Field(..., min_length=1, max_length=100)


class UpdateAccountStatusRequest(BaseModel):
    status: AccountStatus


class AccountResponse(BaseModel):
    id: int
    user_id: int
    account_name: str
    account_number: str
    currency: str
    balance: str
    balance_display: str
    status: str
    created_at: str
    updated_at: str

    @classmethod
    def from_domain(cls, account: Account) -> "AccountResponse":
        return cls(
            id=account.id,
            user_id=account.user_id,
            account_name=account.account_name,
            account_number=account.account_number,
            currency=account.currency,
            balance=str(account.balance),
            balance_display=format_money(account.balance, account.currency),
            status=account.status.value,
            created_at=account.created_at.isoformat(),
            updated_at=account.updated_at.isoformat(),
        )
