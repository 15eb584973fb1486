"""InMemoryTransactionRepository — TransactionLogProtocol over the in-memory backend."""

from collections.abc import Iterable

from src.bk_common.datetime_utils import utc_now
from src.bk_common.memory import MemoryUnitOfWork, suspend
from src.bk_common.money import to_money
from src.bk_ledger.domain.models import NewTransaction, Transaction

TRANSACTIONS = "transactions"


def _newest_first(rows: Iterable[Transaction]) -> list[Transaction]:
    return sorted(rows, key=lambda t: (t.created_at, t.id), reverse=True)


class InMemoryTransactionRepository:
    async def append(self, uow: MemoryUnitOfWork, record: NewTransaction) -> Transaction:
        await suspend()
        transaction = Transaction(
            id=uow.next_id(TRANSACTIONS),
            amount=to_money(record.amount),
            transaction_type=record.transaction_type,
            transaction_status=record.transaction_status,
            description=record.description,
            from_account_id=record.from_account_id,
            to_account_id=record.to_account_id,
            created_at=utc_now(),
        )
        uow.put(TRANSACTIONS, transaction.id, transaction)
        return transaction

    async def get(self, uow: MemoryUnitOfWork, transaction_id: int) -> Transaction | None:
        await suspend()
        return uow.get(TRANSACTIONS, transaction_id)

    async def list_by_account(
        self, uow: MemoryUnitOfWork, account_id: int
    ) -> list[Transaction]:
        return await self.list_by_accounts(uow, [account_id])

    async def list_by_accounts(
        self, uow: MemoryUnitOfWork, account_ids: Iterable[int]
    ) -> list[Transaction]:
        await suspend()
        ids = set(account_ids)
        if not ids:
            return []
        return _newest_first(t for t in uow.rows(TRANSACTIONS) if t.involves(ids))

    async def list_all(self, uow: MemoryUnitOfWork) -> list[Transaction]:
        await suspend()
        return _newest_first(uow.rows(TRANSACTIONS))
