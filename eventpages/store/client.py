"""Generic relational store interface.

Every call returns a StoreResponse carrying either rows or a StoreError,
mirroring the ``{data, error}`` pairs a PostgREST-style backend hands back.
Callers decide whether to raise the error.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

# SQLSTATE / PostgREST codes the rest of the code base cares about
UNDEFINED_TABLE = "42P01"
SCHEMA_CACHE_MISS = "PGRST205"
INSUFFICIENT_PRIVILEGE = "42501"
UNIQUE_VIOLATION = "23505"

MISSING_RELATION_CODES = frozenset({UNDEFINED_TABLE, SCHEMA_CACHE_MISS})

Row = dict[str, Any]


class StoreError(Exception):
    """A failed store call, classified by code where the backend gave one."""

    def __init__(self, message: str, code: str | None = None, table: str | None = None) -> None:
        self.message = message
        self.code = code
        self.table = table
        super().__init__(message)

    @property
    def is_missing_relation(self) -> bool:
        return self.code in MISSING_RELATION_CODES

    @property
    def is_permission_denied(self) -> bool:
        return self.code == INSUFFICIENT_PRIVILEGE

    @property
    def is_unique_violation(self) -> bool:
        return self.code == UNIQUE_VIOLATION

    def __str__(self) -> str:
        if self.code:
            return f"{self.code}: {self.message}"
        return self.message


@dataclass(frozen=True)
class StoreResponse:
    data: list[Row] = field(default_factory=list)
    error: StoreError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def rows(self) -> list[Row]:
        """Return the rows or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.data


class StoreClient(ABC):
    """select/insert/update/delete with equality filters and ordering."""

    @abstractmethod
    async def select(
        self,
        table: str,
        *,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> StoreResponse:
        raise NotImplementedError

    @abstractmethod
    async def insert(self, table: str, values: Mapping[str, Any]) -> StoreResponse:
        """Insert one row and return it as stored."""
        raise NotImplementedError

    @abstractmethod
    async def update(
        self, table: str, values: Mapping[str, Any], *, filters: Mapping[str, Any]
    ) -> StoreResponse:
        """Update the rows matching every filter and return them."""
        raise NotImplementedError

    @abstractmethod
    async def delete(self, table: str, *, filters: Mapping[str, Any]) -> StoreResponse:
        """Delete the rows matching every filter and return them."""
        raise NotImplementedError
