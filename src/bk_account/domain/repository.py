"""Account Store Protocol — dependency inversion for testability.

The Ledger Engine and the services depend on this Protocol only. Both the
SQLAlchemy repository and the in-memory repository implement it; unit tests
may also inject an AsyncMock conforming to it.

Every call runs inside a caller-supplied unit of work (`uow`). The store does
no business validation: `set_balance` persists the value it is given.
"""

from decimal import Decimal
from typing import Protocol

from src.bk_account.domain.models import Account, NewAccount
from src.bk_common.enums import AccountStatus
from src.bk_common.unit_of_work import UnitOfWork


class AccountStoreProtocol(Protocol):
    async def get(
        self, uow: UnitOfWork, account_id: int, *, for_update: bool = False
    ) -> Account | None: ...

    async def set_balance(
        self, uow: UnitOfWork, account_id: int, new_balance: Decimal
    ) -> Account: ...

    async def create(self, uow: UnitOfWork, new_account: NewAccount) -> Account: ...

    async def find_by_name(self, uow: UnitOfWork, account_name: str) -> Account | None: ...

    async def find_by_number(
        self, uow: UnitOfWork, account_number: str
    ) -> Account | None: ...

    async def list_by_user(self, uow: UnitOfWork, user_id: int) -> list[Account]: ...

    async def list_all(self, uow: UnitOfWork) -> list[Account]: ...

    async def rename(
        self, uow: UnitOfWork, account_id: int, account_name: str
    ) -> Account: ...

    async def set_status(
        self, uow: UnitOfWork, account_id: int, status: AccountStatus
    ) -> Account: ...

    async def delete(self, uow: UnitOfWork, account_id: int) -> Account: ...


class AccountOwnershipResolver(Protocol):
    """External capability: which accounts does a user own?"""

    async def account_ids_for_user(self, user_id: int) -> set[int]: ...
