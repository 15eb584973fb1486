"""AccountOwnershipService — who owns which account.

Backs two consumers: the transaction query layer (`account_ids_for_user`) and
the HTTP authorization checks (`is_resource_owner`). Both run in read-only
units of work and never lock.
"""

from src.bk_account.domain.repository import AccountStoreProtocol
from src.bk_account.infrastructure.store import get_account_store
from src.bk_common.unit_of_work import UnitOfWorkProvider, get_unit_of_work_provider


class AccountOwnershipService:
    def __init__(
        self,
        uow_provider: UnitOfWorkProvider,
        accounts: AccountStoreProtocol | None = None,
    ) -> None:
        self._uow = uow_provider
        self._accounts: AccountStoreProtocol = accounts or get_account_store()

    async def account_ids_for_user(self, user_id: int) -> set[int]:
        async with self._uow.transaction(read_only=True) as uow:
            accounts = await self._accounts.list_by_user(uow, user_id)
        return {a.id for a in accounts}

    async def is_resource_owner(self, user_id: int, account_id: int) -> bool:
        async with self._uow.transaction(read_only=True) as uow:
            account = await self._accounts.get(uow, account_id)
        return account is not None and account.user_id == user_id


def get_ownership_service() -> AccountOwnershipService:
    return AccountOwnershipService(get_unit_of_work_provider())
