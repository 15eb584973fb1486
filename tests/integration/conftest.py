"""Integration-test fixtures.

The FastAPI app runs in-process over ASGITransport. Every service dependency is
overridden to share one fresh in-memory database per test, so no PostgreSQL is
needed and tests never see each other's data.
"""

from collections.abc import AsyncIterator

import pytest
from httpx import ASGITransport, AsyncClient

from src.bk_account.application.ownership import AccountOwnershipService, get_ownership_service
from src.bk_account.application.service import AccountApplicationService, get_account_service
from src.bk_account.infrastructure.memory import InMemoryAccountRepository
from src.bk_common.memory import InMemoryUnitOfWorkProvider
from src.bk_ledger.application.query_service import TransactionQueryService
from src.bk_ledger.application.service import (
    TransactionApplicationService,
    get_transaction_service,
)
from src.bk_ledger.engine.engine import LedgerEngine
from src.bk_ledger.infrastructure.memory import InMemoryTransactionRepository
from src.main import app


@pytest.fixture
async def client() -> AsyncIterator[AsyncClient]:
    provider = InMemoryUnitOfWorkProvider()
    accounts = InMemoryAccountRepository()
    transactions = InMemoryTransactionRepository()
    ownership = AccountOwnershipService(provider, accounts)
    account_service = AccountApplicationService(provider, accounts)
    transaction_service = TransactionApplicationService(
        engine=LedgerEngine(provider, accounts, transactions),
        queries=TransactionQueryService(provider, accounts, transactions, ownership),
        retry_backoff_ms=0,
    )

    app.dependency_overrides[get_ownership_service] = lambda: ownership
    app.dependency_overrides[get_account_service] = lambda: account_service
    app.dependency_overrides[get_transaction_service] = lambda: transaction_service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
