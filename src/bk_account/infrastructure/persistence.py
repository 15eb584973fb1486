"""AccountRepository — SQL implementation of AccountStoreProtocol.

Statements are SQLAlchemy Core so the same code path runs on PostgreSQL and
SQLite. `get(..., for_update=True)` compiles to SELECT ... FOR UPDATE on
PostgreSQL (a no-op on SQLite, which locks the whole database on write).

Transaction ownership: the CALLER opens and commits the unit of work; the
repository only executes statements on the session it is handed.
"""

from decimal import Decimal
from typing import Any

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.bk_account.domain.models import Account, NewAccount
from src.bk_account.infrastructure.db_models import accounts_table
from src.bk_common.datetime_utils import as_utc
from src.bk_common.enums import AccountStatus
from src.bk_common.errors import AccountNotFoundError, InternalError

_c = accounts_table.c


def _row_to_account(row: Any) -> Account:
    return Account(
        id=row.id,
        user_id=row.user_id,
        account_name=row.account_name,
        account_number=row.account_number,
        currency=row.currency,
        balance=row.balance,
        status=AccountStatus(row.status),
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )


class AccountRepository:
    async def get(
        self, uow: AsyncSession, account_id: int, *, for_update: bool = False
    ) -> Account | None:
        stmt = select(accounts_table).where(_c.id == account_id)
        if for_update:
            stmt = stmt.with_for_update()
        row = (await uow.execute(stmt)).fetchone()
        return _row_to_account(row) if row else None

    async def set_balance(
        self, uow: AsyncSession, account_id: int, new_balance: Decimal
    ) -> Account:
        stmt = (
            update(accounts_table)
            .where(_c.id == account_id)
            .values(balance=new_balance, updated_at=func.now())
            .returning(accounts_table)
        )
        row = (await uow.execute(stmt)).fetchone()
        if row is None:
            raise AccountNotFoundError(account_id)
        return _row_to_account(row)

    async def create(self, uow: AsyncSession, new_account: NewAccount) -> Account:
        stmt = (
            insert(accounts_table)
            .values(
                user_id=new_account.user_id,
                account_name=new_account.account_name,
                account_number=new_account.account_number,
                currency=new_account.currency,
                balance=Decimal("0"),
                status=AccountStatus.ACTIVE.value,
            )
            .returning(accounts_table)
        )
        row = (await uow.execute(stmt)).fetchone()
        if row is None:
            raise InternalError("Account insert returned no rows")
        return _row_to_account(row)

    async def find_by_name(self, uow: AsyncSession, account_name: str) -> Account | None:
        stmt = select(accounts_table).where(_c.account_name == account_name)
        row = (await uow.execute(stmt)).fetchone()
        return _row_to_account(row) if row else None

    async def find_by_number(
        self, uow: AsyncSession, account_number: str
    ) -> Account | None:
        stmt = select(accounts_table).where(_c.account_number == account_number)
        row = (await uow.execute(stmt)).fetchone()
        return _row_to_account(row) if row else None

    async def list_by_user(self, uow: AsyncSession, user_id: int) -> list[Account]:
        stmt = select(accounts_table).where(_c.user_id == user_id).order_by(_c.id)
        rows = (await uow.execute(stmt)).fetchall()
        return [_row_to_account(row) for row in rows]

    async def list_all(self, uow: AsyncSession) -> list[Account]:
        rows = (await uow.execute(select(accounts_table).order_by(_c.id))).fetchall()
        return [_row_to_account(row) for row in rows]

    async def rename(
        self, uow: AsyncSession, account_id: int, account_name: str
    ) -> Account:
        stmt = (
            update(accounts_table)
            .where(_c.id == account_id)
            .values(account_name=account_name, updated_at=func.now())
            .returning(accounts_table)
        )
        row = (await uow.execute(stmt)).fetchone()
        if row is None:
            raise AccountNotFoundError(account_id)
        return _row_to_account(row)

    async def set_status(
        self, uow: AsyncSession, account_id: int, status: AccountStatus
    ) -> Account:
        stmt = (
            update(accounts_table)
            .where(_c.id == account_id)
            .values(status=status.value, updated_at=func.now())
            .returning(accounts_table)
        )
        row = (await uow.execute(stmt)).fetchone()
        if row is None:
            raise AccountNotFoundError(account_id)
        return _row_to_account(row)

    async def delete(self, uow: AsyncSession, account_id: int) -> Account:
        # transactions.{from,to}_account_id are ON DELETE SET NULL
        stmt = delete(accounts_table).where(_c.id == account_id).returning(accounts_table)
        row = (await uow.execute(stmt)).fetchone()
        if row is None:
            raise AccountNotFoundError(account_id)
        return _row_to_account(row)
