"""Unit of work — the single atomic boundary every ledger operation runs in.

A provider exposes begin/commit/rollback plus `transaction()`, an async context
manager that commits on normal exit and rolls back on any exception (including
task cancellation). Backend exceptions leaving a unit are translated into
TransientStorageError (safe to retry) or StorageError (not retryable);
AppErrors raised by business logic pass through untouched. A failure while
committing is only transient when the server reports it aborted the unit;
otherwise the outcome is unknown and CommitOutcomeUnknownError is raised.

Usage:
    async with provider.transaction() as uow:
        account = await accounts.get(uow, account_id, for_update=True)
        ...
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Any, NoReturn, Protocol

from sqlalchemy import exc as sa_exc
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from config.settings import settings
from src.bk_common.errors import (
    AppError,
    CommitOutcomeUnknownError,
    StorageError,
    TransientStorageError,
)

logger = logging.getLogger(__name__)

# Backend-specific handle: AsyncSession for SQL, MemoryUnitOfWork for in-memory.
UnitOfWork = Any

# serialization_failure, deadlock_detected, lock_not_available, query_canceled (statement_timeout)
_TRANSIENT_SQLSTATES = frozenset({"40001", "40P01", "55P03", "57014"})
# Raised by COMMIT only after the server has rolled the transaction back
_ABORTED_AT_COMMIT_SQLSTATES = frozenset({"40001", "40P01"})


class UnitOfWorkProvider(Protocol):
    async def begin(self, read_only: bool = False) -> UnitOfWork: ...

    async def commit(self, uow: UnitOfWork) -> None: ...

    async def rollback(self, uow: UnitOfWork) -> None: ...

    def transaction(
        self, read_only: bool = False
    ) -> AbstractAsyncContextManager[UnitOfWork]: ...


def _sqlstate(exc: sa_exc.DBAPIError) -> str | None:
    orig = exc.orig
    for candidate in (orig, getattr(orig, "__cause__", None)):
        code = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
        if code:
            return str(code)
    return None


def classify_storage_error(exc: BaseException) -> AppError | None:
    """Map a backend exception to TransientStorageError / StorageError.

    Returns None for exceptions that are not storage failures (business errors,
    programming errors), which callers re-raise unchanged.
    """
    if isinstance(exc, AppError):
        return None
    if isinstance(exc, (TimeoutError, asyncio.TimeoutError, sa_exc.TimeoutError)):
        logger.warning("Storage timeout: %s", exc)
        return TransientStorageError("Storage timeout, please retry")
    if isinstance(exc, sa_exc.DBAPIError):
        sqlstate = _sqlstate(exc)
        sqlite_busy = isinstance(exc, sa_exc.OperationalError) and "database is locked" in str(
            exc.orig
        )
        if exc.connection_invalidated or sqlstate in _TRANSIENT_SQLSTATES or sqlite_busy:
            logger.warning("Transient storage failure (sqlstate=%s): %s", sqlstate, exc.orig)
            return TransientStorageError("Storage conflict, please retry")
        if isinstance(exc, sa_exc.IntegrityError):
            logger.error("Constraint violation (sqlstate=%s): %s", sqlstate, exc.orig)
            return StorageError("Storage constraint violation")
        logger.error("Database error (sqlstate=%s): %s", sqlstate, exc.orig)
        return StorageError("Database error")
    if isinstance(exc, sa_exc.SQLAlchemyError):
        logger.error("Storage error: %s", exc)
        return StorageError("Storage error")
    return None


def classify_commit_error(exc: BaseException) -> AppError | None:
    """Map an exception raised by COMMIT itself.

    A dropped connection or timeout during COMMIT does not tell us whether the
    unit became durable, so it is never reported as retryable.
    """
    translated = classify_storage_error(exc)
    if not isinstance(translated, TransientStorageError):
        return translated
    if (
        isinstance(exc, sa_exc.DBAPIError)
        and not exc.connection_invalidated
        and _sqlstate(exc) in _ABORTED_AT_COMMIT_SQLSTATES
    ):
        return translated
    logger.error("Commit outcome unknown: %s", exc)
    return CommitOutcomeUnknownError()


class BaseUnitOfWorkProvider(ABC):
    """begin/commit/rollback are backend specific; `transaction()` is shared."""

    @abstractmethod
    async def begin(self, read_only: bool = False) -> UnitOfWork: ...

    @abstractmethod
    async def commit(self, uow: UnitOfWork) -> None: ...

    @abstractmethod
    async def rollback(self, uow: UnitOfWork) -> None: ...

    def translate_error(self, exc: BaseException) -> AppError | None:
        return classify_storage_error(exc)

    def translate_commit_error(self, exc: BaseException) -> AppError | None:
        return classify_commit_error(exc)

    @staticmethod
    def _raise(exc: Exception, translated: AppError | None) -> NoReturn:
        if translated is None:
            raise exc
        raise translated from exc

    async def _rollback_quietly(self, uow: UnitOfWork) -> None:
        try:
            await self.rollback(uow)
        except Exception:
            logger.exception("Rollback failed; re-raising the original error")

    @asynccontextmanager
    async def transaction(self, read_only: bool = False) -> AsyncIterator[UnitOfWork]:
        try:
            uow = await self.begin(read_only)
        except Exception as exc:
            self._raise(exc, self.translate_error(exc))

        try:
            yield uow
        except Exception as exc:
            await self._rollback_quietly(uow)
            self._raise(exc, self.translate_error(exc))
        except BaseException:
            # Cancellation: release the unit, never commit
            await self._rollback_quietly(uow)
            raise

        try:
            await self.commit(uow)
        except Exception as exc:
            self._raise(exc, self.translate_commit_error(exc))


class SqlAlchemyUnitOfWorkProvider(BaseUnitOfWorkProvider):
    """One AsyncSession with an open transaction per unit of work."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def begin(self, read_only: bool = False) -> AsyncSession:
        session = self._session_factory()
        session.info["read_only"] = read_only
        try:
            await session.begin()
        except Exception:
            await session.close()
            raise
        return session

    async def commit(self, uow: AsyncSession) -> None:
        try:
            if uow.info.get("read_only"):
                await uow.rollback()
            else:
                await uow.commit()
        finally:
            await uow.close()

    async def rollback(self, uow: AsyncSession) -> None:
        try:
            await uow.rollback()
        finally:
            await uow.close()


_provider: BaseUnitOfWorkProvider | None = None


def get_unit_of_work_provider() -> BaseUnitOfWorkProvider:
    """Process-wide provider for the configured STORAGE_BACKEND."""
    global _provider  # noqa: PLW0603
    if _provider is None:
        if settings.STORAGE_BACKEND == "memory":
            from src.bk_common.memory import InMemoryUnitOfWorkProvider

            _provider = InMemoryUnitOfWorkProvider()
        else:
            from src.bk_common.database import async_session_factory

            _provider = SqlAlchemyUnitOfWorkProvider(async_session_factory)
    return _provider
