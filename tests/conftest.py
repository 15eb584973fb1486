"""Shared test fixtures.

Every fixture here runs on the in-memory backend; SQL repository tests build
their own SQLite engine.
"""

import os

# Settings are read at import time and JWT_SECRET has no default
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-unit-tests-only")
os.environ.setdefault("LEDGER_RETRY_BACKOFF_MS", "0")

from collections.abc import Awaitable, Callable  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402

from src.bk_account.domain.models import Account, NewAccount  # noqa: E402
from src.bk_account.infrastructure.memory import InMemoryAccountRepository  # noqa: E402
from src.bk_common.memory import InMemoryUnitOfWorkProvider  # noqa: E402
from src.bk_ledger.engine.engine import LedgerEngine  # noqa: E402
from src.bk_ledger.infrastructure.memory import InMemoryTransactionRepository  # noqa: E402

MakeAccount = Callable[..., Awaitable[Account]]


@pytest.fixture
def uow_provider() -> InMemoryUnitOfWorkProvider:
    return InMemoryUnitOfWorkProvider()


@pytest.fixture
def account_store() -> InMemoryAccountRepository:
    return InMemoryAccountRepository()


@pytest.fixture
def transaction_log() -> InMemoryTransactionRepository:
    return InMemoryTransactionRepository()


@pytest.fixture
def ledger(
    uow_provider: InMemoryUnitOfWorkProvider,
    account_store: InMemoryAccountRepository,
    transaction_log: InMemoryTransactionRepository,
) -> LedgerEngine:
    return LedgerEngine(uow_provider, account_store, transaction_log)


@pytest.fixture
def make_account(
    uow_provider: InMemoryUnitOfWorkProvider, account_store: InMemoryAccountRepository
) -> MakeAccount:
    """Factory: open an account directly in the store with a starting balance."""
    counter = iter(range(1, 10_000))

    async def _make(user_id: int = 1, balance: str = "0.00", name: str | None = None) -> Account:
        n = next(counter)
        async with uow_provider.transaction() as uow:
            account = await account_store.create(
                uow,
                NewAccount(
                    user_id=user_id,
                    account_name=name or f"account-{n}",
                    account_number=f"{n:014d}",
                    currency="USD",
                ),
            )
            if Decimal(balance) != 0:
                account = await account_store.set_balance(uow, account.id, Decimal(balance))
        return account

    return _make


@pytest.fixture
def balance_of(
    uow_provider: InMemoryUnitOfWorkProvider, account_store: InMemoryAccountRepository
) -> Callable[[int], Awaitable[Decimal]]:
    async def _balance(account_id: int) -> Decimal:
        async with uow_provider.transaction(read_only=True) as uow:
            account = await account_store.get(uow, account_id)
        assert account is not None
        return account.balance

    return _balance


@pytest.fixture
def log_size(
    uow_provider: InMemoryUnitOfWorkProvider, transaction_log: InMemoryTransactionRepository
) -> Callable[[], Awaitable[int]]:
    async def _size() -> int:
        async with uow_provider.transaction(read_only=True) as uow:
            return len(await transaction_log.list_all(uow))

    return _size
