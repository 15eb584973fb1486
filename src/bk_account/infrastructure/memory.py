"""InMemoryAccountRepository — AccountStoreProtocol over the in-memory backend.

Mirrors the SQL schema's constraints: unique account name and number, and
ON DELETE SET NULL on the transaction legs that reference a deleted account.
"""

import dataclasses
from decimal import Decimal

from src.bk_account.domain.models import Account, NewAccount
from src.bk_common.datetime_utils import utc_now
from src.bk_common.enums import AccountStatus
from src.bk_common.errors import AccountNotFoundError, StorageError
from src.bk_common.memory import MemoryUnitOfWork, suspend
from src.bk_common.money import to_money

ACCOUNTS = "accounts"
TRANSACTIONS = "transactions"


class InMemoryAccountRepository:
    async def get(
        self, uow: MemoryUnitOfWork, account_id: int, *, for_update: bool = False
    ) -> Account | None:
        # Writing units already hold the database write lock
        await suspend()
        return uow.get(ACCOUNTS, account_id)

    async def set_balance(
        self, uow: MemoryUnitOfWork, account_id: int, new_balance: Decimal
    ) -> Account:
        await suspend()
        account = uow.get(ACCOUNTS, account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        updated = dataclasses.replace(
            account, balance=to_money(new_balance), updated_at=utc_now()
        )
        uow.put(ACCOUNTS, account_id, updated)
        return updated

    async def create(self, uow: MemoryUnitOfWork, new_account: NewAccount) -> Account:
        await suspend()
        for existing in uow.rows(ACCOUNTS):
            if existing.account_name == new_account.account_name:
                raise StorageError("Storage constraint violation")
            if existing.account_number == new_account.account_number:
                raise StorageError("Storage constraint violation")
        now = utc_now()
        account = Account(
            id=uow.next_id(ACCOUNTS),
            user_id=new_account.user_id,
            account_name=new_account.account_name,
            account_number=new_account.account_number,
            currency=new_account.currency,
            balance=to_money(0),
            status=AccountStatus.ACTIVE,
            created_at=now,
            updated_at=now,
        )
        uow.put(ACCOUNTS, account.id, account)
        return account

    async def find_by_name(
        self, uow: MemoryUnitOfWork, account_name: str
    ) -> Account | None:
        await suspend()
        return next(
            (a for a in uow.rows(ACCOUNTS) if a.account_name == account_name), None
        )

    async def find_by_number(
        self, uow: MemoryUnitOfWork, account_number: str
    ) -> Account | None:
        await suspend()
        return next(
            (a for a in uow.rows(ACCOUNTS) if a.account_number == account_number), None
        )

    async def list_by_user(self, uow: MemoryUnitOfWork, user_id: int) -> list[Account]:
        await suspend()
        return sorted(
            (a for a in uow.rows(ACCOUNTS) if a.user_id == user_id), key=lambda a: a.id
        )

    async def list_all(self, uow: MemoryUnitOfWork) -> list[Account]:
        await suspend()
        return sorted(uow.rows(ACCOUNTS), key=lambda a: a.id)

    async def rename(
        self, uow: MemoryUnitOfWork, account_id: int, account_name: str
    ) -> Account:
        await suspend()
        account = uow.get(ACCOUNTS, account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        if any(
            a.account_name == account_name and a.id != account_id for a in uow.rows(ACCOUNTS)
        ):
            raise StorageError("Storage constraint violation")
        updated = dataclasses.replace(account, account_name=account_name, updated_at=utc_now())
        uow.put(ACCOUNTS, account_id, updated)
        return updated

    async def set_status(
        self, uow: MemoryUnitOfWork, account_id: int, status: AccountStatus
    ) -> Account:
        await suspend()
        account = uow.get(ACCOUNTS, account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        updated = dataclasses.replace(account, status=status, updated_at=utc_now())
        uow.put(ACCOUNTS, account_id, updated)
        return updated

    async def delete(self, uow: MemoryUnitOfWork, account_id: int) -> Account:
        await suspend()
        account = uow.get(ACCOUNTS, account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        uow.delete(ACCOUNTS, account_id)
        for tx in uow.rows(TRANSACTIONS):
            if account_id in (tx.from_account_id, tx.to_account_id):
                uow.put(
                    TRANSACTIONS,
                    tx.id,
                    dataclasses.replace(
                        tx,
                        from_account_id=None if tx.from_account_id == account_id else tx.from_account_id,
                        to_account_id=None if tx.to_account_id == account_id else tx.to_account_id,
                    ),
                )
        return account
