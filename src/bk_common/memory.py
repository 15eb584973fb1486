"""In-memory transactional storage backend.

A process-local stand-in for the relational database, used by tests and local
runs: tables of rows keyed by integer id, per-table id sequences, and units of
work that stage writes and apply them on commit (or drop them on rollback).

Writing units are serialized by a single asyncio.Lock held for the unit's whole
life, so a unit always re-reads the value it is about to overwrite (serializable
by construction). Read-only units see committed state and never take the lock.
Ids are handed out immediately, like a database sequence: a rolled-back unit
leaves a gap.
"""

import asyncio
import copy
import itertools
from typing import Any

from src.bk_common.unit_of_work import BaseUnitOfWorkProvider

_DELETED = object()


async def suspend() -> None:
    """Yield to the event loop the way a network round trip would."""
    await asyncio.sleep(0)


class InMemoryDatabase:
    def __init__(self) -> None:
        self._tables: dict[str, dict[int, Any]] = {}
        self._sequences: dict[str, itertools.count[int]] = {}
        self.write_lock = asyncio.Lock()

    def table(self, name: str) -> dict[int, Any]:
        return self._tables.setdefault(name, {})

    def next_id(self, name: str) -> int:
        return next(self._sequences.setdefault(name, itertools.count(1)))


class MemoryUnitOfWork:
    def __init__(self, database: InMemoryDatabase, read_only: bool) -> None:
        self._database = database
        self._staged: dict[str, dict[int, Any]] = {}
        self.read_only = read_only
        self.active = True

    def _check_active(self) -> None:
        if not self.active:
            raise RuntimeError("Unit of work is closed")

    def _check_writable(self) -> None:
        self._check_active()
        if self.read_only:
            raise RuntimeError("Read-only unit of work cannot write")

    def get(self, table: str, row_id: int) -> Any | None:
        self._check_active()
        staged = self._staged.get(table, {})
        if row_id in staged:
            row = staged[row_id]
            return None if row is _DELETED else copy.copy(row)
        row = self._database.table(table).get(row_id)
        return copy.copy(row) if row is not None else None

    def rows(self, table: str) -> list[Any]:
        self._check_active()
        merged = dict(self._database.table(table))
        merged.update(self._staged.get(table, {}))
        return [copy.copy(row) for row in merged.values() if row is not _DELETED]

    def put(self, table: str, row_id: int, row: Any) -> None:
        self._check_writable()
        self._staged.setdefault(table, {})[row_id] = copy.copy(row)

    def delete(self, table: str, row_id: int) -> None:
        self._check_writable()
        self._staged.setdefault(table, {})[row_id] = _DELETED

    def next_id(self, table: str) -> int:
        self._check_writable()
        return self._database.next_id(table)

    def apply(self) -> None:
        for name, rows in self._staged.items():
            table = self._database.table(name)
            for row_id, row in rows.items():
                if row is _DELETED:
                    table.pop(row_id, None)
                else:
                    table[row_id] = row
        self._staged.clear()

    def discard(self) -> None:
        self._staged.clear()


class InMemoryUnitOfWorkProvider(BaseUnitOfWorkProvider):
    def __init__(self, database: InMemoryDatabase | None = None) -> None:
        self.database = database or InMemoryDatabase()

    async def begin(self, read_only: bool = False) -> MemoryUnitOfWork:
        if not read_only:
            await self.database.write_lock.acquire()
        return MemoryUnitOfWork(self.database, read_only)

    async def commit(self, uow: MemoryUnitOfWork) -> None:
        try:
            if not uow.read_only:
                uow.apply()
        finally:
            self._release(uow)

    async def rollback(self, uow: MemoryUnitOfWork) -> None:
        uow.discard()
        self._release(uow)

    def _release(self, uow: MemoryUnitOfWork) -> None:
        if not uow.active:
            return
        uow.active = False
        if not uow.read_only:
            self.database.write_lock.release()
