"""Transaction Log Store Protocol.

Append-only: there is deliberately no update or delete. Listings are ordered
newest first (created_at DESC, id DESC). A transaction belongs to an account
when the account is either its from- or its to-leg.
"""

from collections.abc import Iterable
from typing import Protocol

from src.bk_common.unit_of_work import UnitOfWork
from src.bk_ledger.domain.models import NewTransaction, Transaction


class TransactionLogProtocol(Protocol):
    async def append(self, uow: UnitOfWork, record: NewTransaction) -> Transaction: ...

    async def get(self, uow: UnitOfWork, transaction_id: int) -> Transaction | None: ...

    async def list_by_account(self, uow: UnitOfWork, account_id: int) -> list[Transaction]: ...

    async def list_by_accounts(
        self, uow: UnitOfWork, account_ids: Iterable[int]
    ) -> list[Transaction]: ...

    async def list_all(self, uow: UnitOfWork) -> list[Transaction]: ...
