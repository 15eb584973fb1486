"""Domain models for bk_account — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.bk_common.enums import AccountStatus


@dataclass
class Account:
    id: int
    user_id: int
    account_name: str
    account_number: str
    currency: str
    balance: Decimal          # never negative after a committed operation
    status: AccountStatus
    created_at: datetime
    updated_at: datetime

    @property
    def is_active(self) -> bool:
        return self.status == AccountStatus.ACTIVE

    @property
    def is_empty(self) -> bool:
        return self.balance == 0


@dataclass(frozen=True)
class NewAccount:
    """Insert payload; balance always starts at zero and status ACTIVE."""

    user_id: int
    account_name: str
    account_number: str
    currency: str
