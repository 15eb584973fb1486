"""TransactionRepository — SQL implementation of TransactionLogProtocol."""

from collections.abc import Iterable
from decimal import Decimal
from typing import Any

from sqlalchemy import insert, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.bk_common.datetime_utils import as_utc
from src.bk_common.enums import TransactionStatus, TransactionType
from src.bk_common.errors import InternalError
from src.bk_ledger.domain.models import NewTransaction, Transaction
from src.bk_ledger.infrastructure.db_models import transactions_table

_c = transactions_table.c
_NEWEST_FIRST = (_c.created_at.desc(), _c.id.desc())


def _row_to_transaction(row: Any) -> Transaction:
    return Transaction(
        id=row.id,
        amount=Decimal(row.amount),
        transaction_type=TransactionType(row.transaction_type),
        transaction_status=TransactionStatus(row.transaction_status),
        description=row.description,
        from_account_id=row.from_account_id,
        to_account_id=row.to_account_id,
        created_at=as_utc(row.created_at),
    )


class TransactionRepository:
    async def append(self, uow: AsyncSession, record: NewTransaction) -> Transaction:
        stmt = (
            insert(transactions_table)
            .values(
                amount=record.amount,
                transaction_type=record.transaction_type.value,
                transaction_status=record.transaction_status.value,
                description=record.description,
                from_account_id=record.from_account_id,
                to_account_id=record.to_account_id,
            )
            .returning(transactions_table)
        )
        row = (await uow.execute(stmt)).fetchone()
        if row is None:
            raise InternalError("Transaction insert returned no rows")
        return _row_to_transaction(row)

    async def get(self, uow: AsyncSession, transaction_id: int) -> Transaction | None:
        stmt = select(transactions_table).where(_c.id == transaction_id)
        row = (await uow.execute(stmt)).fetchone()
        return _row_to_transaction(row) if row else None

    async def list_by_account(self, uow: AsyncSession, account_id: int) -> list[Transaction]:
        return await self.list_by_accounts(uow, [account_id])

    async def list_by_accounts(
        self, uow: AsyncSession, account_ids: Iterable[int]
    ) -> list[Transaction]:
        ids = sorted(set(account_ids))
        if not ids:
            return []
        # A transfer between two of the ids matches once: WHERE ... OR ... never duplicates rows
        stmt = (
            select(transactions_table)
            .where(or_(_c.from_account_id.in_(ids), _c.to_account_id.in_(ids)))
            .order_by(*_NEWEST_FIRST)
        )
        rows = (await uow.execute(stmt)).fetchall()
        return [_row_to_transaction(row) for row in rows]

    async def list_all(self, uow: AsyncSession) -> list[Transaction]:
        stmt = select(transactions_table).order_by(*_NEWEST_FIRST)
        rows = (await uow.execute(stmt)).fetchall()
        return [_row_to_transaction(row) for row in rows]
