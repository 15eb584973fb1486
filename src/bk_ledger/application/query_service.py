"""TransactionQueryService — read side of the ledger.

All reads run in read-only units of work. Per-user listings are silently
scoped: filtering by an account the user does not own yields an empty list,
never an error, so the existence of other users' accounts is not revealed.
"""

from src.bk_account.domain.repository import AccountOwnershipResolver, AccountStoreProtocol
from src.bk_common.errors import AccountNotFoundError, TransactionNotFoundError
from src.bk_common.unit_of_work import UnitOfWorkProvider
from src.bk_ledger.domain.models import Transaction
from src.bk_ledger.domain.repository import TransactionLogProtocol


class TransactionQueryService:
    def __init__(
        self,
        uow_provider: UnitOfWorkProvider,
        accounts: AccountStoreProtocol,
        transactions: TransactionLogProtocol,
        ownership: AccountOwnershipResolver,
    ) -> None:
        self._uow = uow_provider
        self._accounts = accounts
        self._transactions = transactions
        self._ownership = ownership

    async def find_by_id(self, transaction_id: int) -> Transaction:
        async with self._uow.transaction(read_only=True) as uow:
            transaction = await self._transactions.get(uow, transaction_id)
        if transaction is None:
            raise TransactionNotFoundError(transaction_id)
        return transaction

    async def find_all_for_account(self, account_id: int) -> list[Transaction]:
        async with self._uow.transaction(read_only=True) as uow:
            if await self._accounts.get(uow, account_id) is None:
                raise AccountNotFoundError(account_id)
            return await self._transactions.list_by_account(uow, account_id)

    async def find_all_for_user(
        self, user_id: int, account_id: int | None = None
    ) -> list[Transaction]:
        owned = await self._ownership.account_ids_for_user(user_id)
        if account_id is not None:
            if account_id not in owned:
                return []
            owned = {account_id}
        if not owned:
            return []
        async with self._uow.transaction(read_only=True) as uow:
            return await self._transactions.list_by_accounts(uow, owned)

    async def find_all(self, account_id: int | None = None) -> list[Transaction]:
        """Administrative listing, optionally narrowed to one existing account."""
        if account_id is not None:
            return await self.find_all_for_account(account_id)
        async with self._uow.transaction(read_only=True) as uow:
            return await self._transactions.list_all(uow)

    async def is_user_involved(self, user_id: int, transaction: Transaction) -> bool:
        owned = await self._ownership.account_ids_for_user(user_id)
        return transaction.involves(owned)
