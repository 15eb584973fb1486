"""Account store for the configured STORAGE_BACKEND."""

from config.settings import settings
from src.bk_account.domain.repository import AccountStoreProtocol
from src.bk_account.infrastructure.memory import InMemoryAccountRepository
from src.bk_account.infrastructure.persistence import AccountRepository


def get_account_store() -> AccountStoreProtocol:
    if settings.STORAGE_BACKEND == "memory":
        return InMemoryAccountRepository()
    return AccountRepository()
