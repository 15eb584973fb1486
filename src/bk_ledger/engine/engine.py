"""LedgerEngine — stateless orchestrator for deposits, withdrawals and transfers.

Every operation variant runs through the same pipeline inside one unit of work:

    1. reject same-account transfers (before any storage access)
    2. load      lock every involved account, ascending id order
    3. validate  source exists, recipient exists, debited balance >= amount
    4. compute   new balances with exact Decimal arithmetic
    5. write+log set balances, append exactly one COMPLETED transaction

The balance check reads the locked row inside the same unit that writes it, so
two concurrent operations on one account can never both pass it. Any failure
rolls the whole unit back: a balance change is never observable without its
transaction row, and a transfer never without both legs.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from src.bk_account.domain.models import Account
from src.bk_account.domain.repository import AccountStoreProtocol
from src.bk_common.errors import (
    AccountNotFoundError,
    InsufficientFundsError,
    InvalidOperationTypeError,
    RecipientNotFoundError,
    SameAccountTransferError,
    TransientStorageError,
)
from src.bk_common.money import parse_amount
from src.bk_common.unit_of_work import UnitOfWork, UnitOfWorkProvider
from src.bk_ledger.domain.models import (
    DepositOp,
    LedgerOperation,
    NewTransaction,
    Transaction,
    TransactionRequest,
    TransferOp,
    WithdrawalOp,
    build_operation,
)
from src.bk_ledger.domain.repository import TransactionLogProtocol

logger = logging.getLogger(__name__)

_OPERATION_TYPES = (DepositOp, WithdrawalOp, TransferOp)


@dataclass(frozen=True)
class _Posting:
    account_id: int
    new_balance: Decimal


class LedgerEngine:
    def __init__(
        self,
        uow_provider: UnitOfWorkProvider,
        accounts: AccountStoreProtocol,
        transactions: TransactionLogProtocol,
    ) -> None:
        self._uow = uow_provider
        self._accounts = accounts
        self._transactions = transactions

    async def execute(self, request: TransactionRequest | LedgerOperation) -> Transaction:
        """Apply one operation atomically and return the persisted transaction.

        Raises:
            InvalidOperationTypeError, InvalidAmountError, RecipientRequiredError,
            SameAccountTransferError: before any unit of work is opened.
            AccountNotFoundError, RecipientNotFoundError, InsufficientFundsError:
            business rejection, unit rolled back.
            TransientStorageError: timeout/conflict, safe to retry.
            StorageError: any other storage failure.
        """
        if isinstance(request, TransactionRequest):
            op = build_operation(request)
        elif isinstance(request, _OPERATION_TYPES):
            op = request
        else:
            raise InvalidOperationTypeError(type(request).__name__)

        amount = parse_amount(op.amount)
        if op.from_account_id is not None and op.from_account_id == op.to_account_id:
            raise SameAccountTransferError()

        try:
            async with self._uow.transaction() as uow:
                accounts = await self._load(uow, op)
                for posting in self._plan(op, accounts, amount):
                    await self._accounts.set_balance(uow, posting.account_id, posting.new_balance)
                record = await self._transactions.append(
                    uow,
                    NewTransaction(
                        amount=amount,
                        transaction_type=op.transaction_type,
                        from_account_id=op.from_account_id,
                        to_account_id=op.to_account_id,
                        description=op.description,
                    ),
                )
        except TransientStorageError:
            logger.warning(
                "Ledger %s on account %d aborted by transient storage failure",
                op.transaction_type.value,
                op.account_id,
            )
            raise

        logger.info(
            "Ledger %s committed: tx=%d amount=%s from=%s to=%s",
            op.transaction_type.value,
            record.id,
            amount,
            op.from_account_id,
            op.to_account_id,
        )
        return record

    async def _load(self, uow: UnitOfWork, op: LedgerOperation) -> dict[int, Account]:
        """Lock-load involved accounts in ascending id order (no lock-order deadlocks)."""
        involved = sorted(
            {i for i in (op.from_account_id, op.to_account_id) if i is not None}
        )
        loaded: dict[int, Account] = {}
        for account_id in involved:
            account = await self._accounts.get(uow, account_id, for_update=True)
            if account is not None:
                loaded[account_id] = account

        if op.account_id not in loaded:
            raise AccountNotFoundError(op.account_id)
        if isinstance(op, TransferOp) and op.to_account_id not in loaded:
            raise RecipientNotFoundError(op.to_account_id)
        return loaded

    @staticmethod
    def _plan(
        op: LedgerOperation, accounts: dict[int, Account], amount: Decimal
    ) -> list[_Posting]:
        postings: list[_Posting] = []
        if op.from_account_id is not None:
            source = accounts[op.from_account_id]
            # Strict <: moving exactly the full balance is allowed
            if source.balance < amount:
                raise InsufficientFundsError(
                    op.transaction_type.value.lower(), amount, source.balance
                )
            postings.append(_Posting(source.id, source.balance - amount))
        if op.to_account_id is not None:
            target = accounts[op.to_account_id]
            postings.append(_Posting(target.id, target.balance + amount))
        return postings
