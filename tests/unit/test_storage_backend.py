"""STORAGE_BACKEND selects the unit-of-work provider and the stores behind the services."""

from decimal import Decimal

import pytest

from config.settings import settings
from src.bk_account.application.ownership import get_ownership_service
from src.bk_account.application.service import get_account_service
from src.bk_account.infrastructure.memory import InMemoryAccountRepository
from src.bk_account.infrastructure.persistence import AccountRepository
from src.bk_account.infrastructure.store import get_account_store
from src.bk_common import unit_of_work
from src.bk_common.memory import InMemoryUnitOfWorkProvider
from src.bk_common.unit_of_work import SqlAlchemyUnitOfWorkProvider, get_unit_of_work_provider
from src.bk_ledger.application.service import get_transaction_service
from src.bk_ledger.infrastructure.memory import InMemoryTransactionRepository
from src.bk_ledger.infrastructure.persistence import TransactionRepository
from src.bk_ledger.infrastructure.store import get_transaction_log


@pytest.fixture
def memory_backend(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "STORAGE_BACKEND", "memory")
    monkeypatch.setattr(unit_of_work, "_provider", None)


@pytest.fixture
def sql_backend(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "STORAGE_BACKEND", "sql")
    monkeypatch.setattr(unit_of_work, "_provider", None)


class TestSqlBackend:
    def test_default_is_sql(self) -> None:
        assert settings.STORAGE_BACKEND == "sql"

    def test_factories(self, sql_backend: None) -> None:
        assert isinstance(get_unit_of_work_provider(), SqlAlchemyUnitOfWorkProvider)
        assert isinstance(get_account_store(), AccountRepository)
        assert isinstance(get_transaction_log(), TransactionRepository)


class TestMemoryBackend:
    def test_factories(self, memory_backend: None) -> None:
        assert isinstance(get_unit_of_work_provider(), InMemoryUnitOfWorkProvider)
        assert isinstance(get_account_store(), InMemoryAccountRepository)
        assert isinstance(get_transaction_log(), InMemoryTransactionRepository)

    def test_provider_is_process_wide(self, memory_backend: None) -> None:
        assert get_unit_of_work_provider() is get_unit_of_work_provider()

    async def test_services_share_state(self, memory_backend: None) -> None:
        opened = await get_account_service().open_account(5, "Local run")
        await get_transaction_service().deposit(opened.id, Decimal("42.00"))

        account = await get_account_service().get_account(opened.id)
        history = await get_transaction_service().list_for_user(5)
        assert account.balance == "42.00"
        assert history.total == 1
        assert await get_ownership_service().is_resource_owner(5, opened.id)
