"""AccountApplicationService — account lifecycle around the ledger.

Balances are never written here: only the LedgerEngine moves money. Opening an
account starts it at zero, and an account can only be closed once it is empty.
"""

import logging

from config.settings import settings
from src.bk_account.application.schemas import AccountResponse
from src.bk_account.domain.account_number import generate_account_number
from src.bk_account.domain.models import Account, NewAccount
from src.bk_account.domain.repository import AccountStoreProtocol
from src.bk_account.infrastructure.store import get_account_store
from src.bk_common.enums import AccountStatus
from src.bk_common.errors import (
    AccountBalanceNotZeroError,
    AccountNameExistsError,
    AccountNotFoundError,
    InternalError,
)
from src.bk_common.unit_of_work import UnitOfWork, UnitOfWorkProvider, get_unit_of_work_provider

logger = logging.getLogger(__name__)

_ACCOUNT_NUMBER_ATTEMPTS = 5


class AccountApplicationService:
    def __init__(
        self,
        uow_provider: UnitOfWorkProvider,
        accounts: AccountStoreProtocol | None = None,
    ) -> None:
        self._uow = uow_provider
        self._accounts: AccountStoreProtocol = accounts or get_account_store()

    async def open_account(
        self, user_id: int, account_name: str, currency: str | None = None
    ) -> AccountResponse:
        async with self._uow.transaction() as uow:
            if await self._accounts.find_by_name(uow, account_name) is not None:
                raise AccountNameExistsError(account_name)
            account = await self._accounts.create(
                uow,
                NewAccount(
                    user_id=user_id,
                    account_name=account_name,
                    account_number=await self._allocate_account_number(uow),
                    currency=currency or settings.DEFAULT_CURRENCY,
                ),
            )
        logger.info("Opened account %d (%s) for user %d", account.id, account.account_number, user_id)
        return AccountResponse.from_domain(account)

    async def _allocate_account_number(self, uow: UnitOfWork) -> str:
        for _ in range(_ACCOUNT_NUMBER_ATTEMPTS):
            candidate = generate_account_number()
            if await self._accounts.find_by_number(uow, candidate) is None:
                return candidate
        raise InternalError("Could not allocate a unique account number")

    async def get_account(self, account_id: int) -> AccountResponse:
        return AccountResponse.from_domain(await self._load(account_id))

    async def list_accounts(self, user_id: int) -> list[AccountResponse]:
        async with self._uow.transaction(read_only=True) as uow:
            accounts = await self._accounts.list_by_user(uow, user_id)
        return [AccountResponse.from_domain(a) for a in accounts]

    async def list_all_accounts(self) -> list[AccountResponse]:
        async with self._uow.transaction(read_only=True) as uow:
            accounts = await self._accounts.list_all(uow)
        return [AccountResponse.from_domain(a) for a in accounts]

    async def rename_account(self, account_id: int, account_name: str) -> AccountResponse:
        async with self._uow.transaction() as uow:
            if await self._accounts.get(uow, account_id, for_update=True) is None:
                raise AccountNotFoundError(account_id)
            existing = await self._accounts.find_by_name(uow, account_name)
            if existing is not None and existing.id != account_id:
                raise AccountNameExistsError(account_name)
            account = await self._accounts.rename(uow, account_id, account_name)
        logger.info("Account %d renamed to %r", account_id, account_name)
        return AccountResponse.from_domain(account)

    async def set_status(self, account_id: int, status: AccountStatus) -> AccountResponse:
        async with self._uow.transaction() as uow:
            account = await self._accounts.set_status(uow, account_id, status)
        logger.info("Account %d status set to %s", account_id, status.value)
        return AccountResponse.from_domain(account)

    async def close_account(self, account_id: int) -> AccountResponse:
        async with self._uow.transaction() as uow:
            # Lock so a concurrent deposit cannot land between the check and the delete
            account = await self._accounts.get(uow, account_id, for_update=True)
            if account is None:
                raise AccountNotFoundError(account_id)
            if not account.is_empty:
                raise AccountBalanceNotZeroError(account_id, account.balance)
            await self._accounts.delete(uow, account_id)
        logger.info("Closed account %d", account_id)
        return AccountResponse.from_domain(account)

    async def _load(self, account_id: int) -> Account:
        async with self._uow.transaction(read_only=True) as uow:
            account = await self._accounts.get(uow, account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account


def get_account_service() -> AccountApplicationService:
    return AccountApplicationService(get_unit_of_work_provider())
