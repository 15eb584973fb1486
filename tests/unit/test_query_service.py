"""Tests for TransactionQueryService and AccountOwnershipService."""

from collections.abc import Awaitable, Callable
from decimal import Decimal

import pytest

from src.bk_account.application.ownership import AccountOwnershipService
from src.bk_account.domain.models import Account
from src.bk_account.infrastructure.memory import InMemoryAccountRepository
from src.bk_common.enums import TransactionType
from src.bk_common.errors import AccountNotFoundError, TransactionNotFoundError
from src.bk_common.memory import InMemoryUnitOfWorkProvider
from src.bk_ledger.application.query_service import TransactionQueryService
from src.bk_ledger.domain.models import TransactionRequest
from src.bk_ledger.engine.engine import LedgerEngine
from src.bk_ledger.infrastructure.memory import InMemoryTransactionRepository

MakeAccount = Callable[..., Awaitable[Account]]


@pytest.fixture
def ownership(
    uow_provider: InMemoryUnitOfWorkProvider, account_store: InMemoryAccountRepository
) -> AccountOwnershipService:
    return AccountOwnershipService(uow_provider, account_store)


@pytest.fixture
def queries(
    uow_provider: InMemoryUnitOfWorkProvider,
    account_store: InMemoryAccountRepository,
    transaction_log: InMemoryTransactionRepository,
    ownership: AccountOwnershipService,
) -> TransactionQueryService:
    return TransactionQueryService(uow_provider, account_store, transaction_log, ownership)


async def _deposit(ledger: LedgerEngine, account_id: int, amount: str = "10.00") -> int:
    tx = await ledger.execute(TransactionRequest(TransactionType.DEPOSIT, account_id, amount))
    return tx.id


class TestFindById:
    async def test_found(
        self, queries: TransactionQueryService, ledger: LedgerEngine, make_account: MakeAccount
    ) -> None:
        a = await make_account()
        tx_id = await _deposit(ledger, a.id)
        tx = await queries.find_by_id(tx_id)
        assert tx.amount == Decimal("10.00")

    async def test_missing(self, queries: TransactionQueryService) -> None:
        with pytest.raises(TransactionNotFoundError):
            await queries.find_by_id(12345)


class TestFindAllForAccount:
    async def test_lists_both_legs_newest_first(
        self, queries: TransactionQueryService, ledger: LedgerEngine, make_account: MakeAccount
    ) -> None:
        a = await make_account(balance="100.00")
        b = await make_account(balance="100.00")
        first = await _deposit(ledger, a.id)
        second = (
            await ledger.execute(
                TransactionRequest(TransactionType.TRANSFER, b.id, "5.00", to_account_id=a.id)
            )
        ).id
        await _deposit(ledger, b.id)

        rows = await queries.find_all_for_account(a.id)
        assert [t.id for t in rows] == [second, first]

    async def test_missing_account(self, queries: TransactionQueryService) -> None:
        with pytest.raises(AccountNotFoundError):
            await queries.find_all_for_account(77)


class TestFindAllForUser:
    async def test_union_over_owned_accounts(
        self, queries: TransactionQueryService, ledger: LedgerEngine, make_account: MakeAccount
    ) -> None:
        a1 = await make_account(user_id=1, balance="50.00")
        a2 = await make_account(user_id=1)
        other = await make_account(user_id=2)
        await _deposit(ledger, a1.id)
        # Transfer between two owned accounts must appear exactly once
        await ledger.execute(
            TransactionRequest(TransactionType.TRANSFER, a1.id, "5.00", to_account_id=a2.id)
        )
        await _deposit(ledger, other.id)

        rows = await queries.find_all_for_user(1)
        assert len(rows) == 2
        assert len({t.id for t in rows}) == 2

    async def test_filter_to_owned_account(
        self, queries: TransactionQueryService, ledger: LedgerEngine, make_account: MakeAccount
    ) -> None:
        a1 = await make_account(user_id=1)
        a2 = await make_account(user_id=1)
        await _deposit(ledger, a1.id)
        await _deposit(ledger, a2.id)

        rows = await queries.find_all_for_user(1, a2.id)
        assert [t.to_account_id for t in rows] == [a2.id]

    async def test_foreign_account_filter_is_silently_empty(
        self, queries: TransactionQueryService, ledger: LedgerEngine, make_account: MakeAccount
    ) -> None:
        await make_account(user_id=1)
        foreign = await make_account(user_id=2)
        await _deposit(ledger, foreign.id)

        assert await queries.find_all_for_user(1, foreign.id) == []

    async def test_nonexistent_account_filter_is_silently_empty(
        self, queries: TransactionQueryService, make_account: MakeAccount
    ) -> None:
        await make_account(user_id=1)
        assert await queries.find_all_for_user(1, 9999) == []

    async def test_user_without_accounts(self, queries: TransactionQueryService) -> None:
        assert await queries.find_all_for_user(42) == []


class TestAdministrativeListing:
    async def test_find_all(
        self, queries: TransactionQueryService, ledger: LedgerEngine, make_account: MakeAccount
    ) -> None:
        a = await make_account(user_id=1)
        b = await make_account(user_id=2)
        await _deposit(ledger, a.id)
        await _deposit(ledger, b.id)
        assert len(await queries.find_all()) == 2
        assert len(await queries.find_all(b.id)) == 1

    async def test_find_all_unknown_account(self, queries: TransactionQueryService) -> None:
        with pytest.raises(AccountNotFoundError):
            await queries.find_all(5)


class TestInvolvementAndOwnership:
    async def test_is_user_involved(
        self, queries: TransactionQueryService, ledger: LedgerEngine, make_account: MakeAccount
    ) -> None:
        mine = await make_account(user_id=1, balance="10.00")
        theirs = await make_account(user_id=2)
        tx = await ledger.execute(
            TransactionRequest(TransactionType.TRANSFER, mine.id, "1.00", to_account_id=theirs.id)
        )
        assert await queries.is_user_involved(1, tx)
        assert await queries.is_user_involved(2, tx)
        assert not await queries.is_user_involved(3, tx)

    async def test_account_ids_for_user(
        self, ownership: AccountOwnershipService, make_account: MakeAccount
    ) -> None:
        a = await make_account(user_id=1)
        b = await make_account(user_id=1)
        await make_account(user_id=2)
        assert await ownership.account_ids_for_user(1) == {a.id, b.id}

    async def test_is_resource_owner(
        self, ownership: AccountOwnershipService, make_account: MakeAccount
    ) -> None:
        a = await make_account(user_id=1)
        assert await ownership.is_resource_owner(1, a.id)
        assert not await ownership.is_resource_owner(2, a.id)
        assert not await ownership.is_resource_owner(1, 9999)
