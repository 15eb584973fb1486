"""TransactionApplicationService — thin composition layer over the ledger.

Commands build a TransactionRequest and hand it to the LedgerEngine, which owns
the unit of work. Only TransientStorageError is retried (linear backoff);
business failures such as InsufficientFundsError propagate on the first try.
"""

import asyncio
import logging
from decimal import Decimal

from config.settings import settings
from src.bk_account.application.ownership import AccountOwnershipService
from src.bk_account.infrastructure.store import get_account_store
from src.bk_common.enums import TransactionType
from src.bk_common.errors import ForbiddenError, TransientStorageError
from src.bk_common.unit_of_work import get_unit_of_work_provider
from src.bk_ledger.application.query_service import TransactionQueryService
from src.bk_ledger.application.schemas import TransactionListResponse, TransactionResponse
from src.bk_ledger.domain.models import TransactionRequest
from src.bk_ledger.engine.engine import LedgerEngine
from src.bk_ledger.infrastructure.store import get_transaction_log

logger = logging.getLogger(__name__)


class TransactionApplicationService:
    def __init__(
        self,
        engine: LedgerEngine,
        queries: TransactionQueryService,
        retry_attempts: int | None = None,
        retry_backoff_ms: int | None = None,
    ) -> None:
        self._engine = engine
        self._queries = queries
        self._attempts = max(
            1, settings.LEDGER_RETRY_ATTEMPTS if retry_attempts is None else retry_attempts
        )
        backoff_ms = (
            settings.LEDGER_RETRY_BACKOFF_MS if retry_backoff_ms is None else retry_backoff_ms
        )
        self._backoff = backoff_ms / 1000

    async def deposit(
        self, account_id: int, amount: Decimal, description: str | None = None
    ) -> TransactionResponse:
        return await self._execute(
            TransactionRequest(TransactionType.DEPOSIT, account_id, amount, description)
        )

    async def withdraw(
        self, account_id: int, amount: Decimal, description: str | None = None
    ) -> TransactionResponse:
        return await self._execute(
            TransactionRequest(TransactionType.WITHDRAWAL, account_id, amount, description)
        )

    async def transfer(
        self,
        account_id: int,
        to_account_id: int,
        amount: Decimal,
        description: str | None = None,
    ) -> TransactionResponse:
        return await self._execute(
            TransactionRequest(
                TransactionType.TRANSFER, account_id, amount, description, to_account_id
            )
        )

    async def _execute(self, request: TransactionRequest) -> TransactionResponse:
        attempt = 1
        while True:
            try:
                transaction = await self._engine.execute(request)
            except TransientStorageError:
                if attempt >= self._attempts:
                    raise
                logger.warning(
                    "Retrying %s on account %d after transient failure (attempt %d/%d)",
                    TransactionType(request.transaction_type).value,
                    request.account_id,
                    attempt,
                    self._attempts,
                )
                await asyncio.sleep(self._backoff * attempt)
                attempt += 1
            else:
                return TransactionResponse.from_domain(transaction)

    async def get_transaction(
        self, transaction_id: int, user_id: int | None = None
    ) -> TransactionResponse:
        """Fetch one transaction; with `user_id`, the user must own one of its legs."""
        transaction = await self._queries.find_by_id(transaction_id)
        if user_id is not None and not await self._queries.is_user_involved(
            user_id, transaction
        ):
            raise ForbiddenError("User is forbidden to access this transaction")
        return TransactionResponse.from_domain(transaction)

    async def list_for_user(
        self, user_id: int, account_id: int | None = None
    ) -> TransactionListResponse:
        transactions = await self._queries.find_all_for_user(user_id, account_id)
        return TransactionListResponse.from_domain(transactions)

    async def list_all(self, account_id: int | None = None) -> TransactionListResponse:
        transactions = await self._queries.find_all(account_id)
        return TransactionListResponse.from_domain(transactions)


def get_transaction_service() -> TransactionApplicationService:
    uow_provider = get_unit_of_work_provider()
    accounts = get_account_store()
    transactions = get_transaction_log()
    return TransactionApplicationService(
        engine=LedgerEngine(uow_provider, accounts, transactions),
        queries=TransactionQueryService(
            uow_provider,
            accounts,
            transactions,
            AccountOwnershipService(uow_provider, accounts),
        ),
    )
