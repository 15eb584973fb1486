"""Transaction log for the configured STORAGE_BACKEND."""

from config.settings import settings
from src.bk_ledger.domain.repository import TransactionLogProtocol
from src.bk_ledger.infrastructure.memory import InMemoryTransactionRepository
from src.bk_ledger.infrastructure.persistence import TransactionRepository


def get_transaction_log() -> TransactionLogProtocol:
    if settings.STORAGE_BACKEND == "memory":
        return InMemoryTransactionRepository()
    return TransactionRepository()
