"""SQLAlchemy implementation of the store interface."""

import logging
from collections.abc import Callable, Mapping
from typing import Any

from sqlalchemy import Table, delete, insert, select, update
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.base import Executable

from eventpages.config.database import async_session_manager
from eventpages.models import BaseModel
from eventpages.store.client import UNDEFINED_TABLE, UNIQUE_VIOLATION, StoreClient, StoreError, StoreResponse

logger = logging.getLogger(__name__)

UNDEFINED_COLUMN = "42703"


def classify_db_error(error: DBAPIError, table: str) -> StoreError:
    """Turn a driver error into a StoreError keeping the SQLSTATE when present."""
    orig = error.orig
    # asyncpg exposes sqlstate, psycopg exposes pgcode
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    message = str(orig) if orig is not None else str(error)
    # sqlite reports no SQLSTATE, only the message
    if code is None and "no such table" in message:
        code = UNDEFINED_TABLE
    elif code is None and "UNIQUE constraint failed" in message:
        code = UNIQUE_VIOLATION
    return StoreError(message, code=code, table=table)


class SqlStoreClient(StoreClient):
    """Store client backed by the async engine. Returns plain dict rows."""

    def __init__(self, session_overwrite: AsyncSession | None = None) -> None:
        self.session_overwrite = session_overwrite

    def _table(self, name: str) -> Table:
        table = BaseModel.metadata.tables.get(name)
        if table is None:
            raise StoreError(f'relation "{name}" does not exist', code=UNDEFINED_TABLE, table=name)
        return table

    def _check_columns(self, table: Table, names) -> None:
        for name in names:
            if name not in table.c:
                raise StoreError(
                    f'column "{name}" of relation "{table.name}" does not exist',
                    code=UNDEFINED_COLUMN,
                    table=table.name,
                )

    def _where(self, table: Table, filters: Mapping[str, Any]) -> list:
        self._check_columns(table, filters)
        return [table.c[column] == value for column, value in filters.items()]

    async def _execute(self, table_name: str, build: Callable[[Table], Executable]) -> StoreResponse:
        try:
            statement = build(self._table(table_name))
            async with async_session_manager(session_overwrite=self.session_overwrite) as session:
                result = await session.execute(statement)
                rows = [dict(row) for row in result.mappings().all()]
        except StoreError as e:
            return StoreResponse(error=e)
        except DBAPIError as e:
            error = classify_db_error(e, table_name)
            logger.debug(f"Store call on {table_name} failed: {error}")
            return StoreResponse(error=error)
        return StoreResponse(data=rows)

    async def select(
        self,
        table: str,
        *,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> StoreResponse:
        def build(t: Table) -> Executable:
            stmt = select(t).where(*self._where(t, filters or {}))
            if order_by:
                self._check_columns(t, [order_by])
                column = t.c[order_by]
                stmt = stmt.order_by(column.desc() if descending else column.asc())
            return stmt

        return await self._execute(table, build)

    async def insert(self, table: str, values: Mapping[str, Any]) -> StoreResponse:
        def build(t: Table) -> Executable:
            self._check_columns(t, values)
            return insert(t).values(**values).returning(*t.c)

        return await self._execute(table, build)

    async def update(
        self, table: str, values: Mapping[str, Any], *, filters: Mapping[str, Any]
    ) -> StoreResponse:
        if not filters:
            return StoreResponse(error=StoreError("update requires at least one filter", table=table))

        def build(t: Table) -> Executable:
            self._check_columns(t, values)
            return update(t).where(*self._where(t, filters)).values(**values).returning(*t.c)

        return await self._execute(table, build)

    async def delete(self, table: str, *, filters: Mapping[str, Any]) -> StoreResponse:
        if not filters:
            return StoreResponse(error=StoreError("delete requires at least one filter", table=table))

        def build(t: Table) -> Executable:
            return delete(t).where(*self._where(t, filters)).returning(*t.c)

        return await self._execute(table, build)
