from .client import (
    INSUFFICIENT_PRIVILEGE,
    UNDEFINED_TABLE,
    StoreClient,
    StoreError,
    StoreResponse,
)

__all__ = [
    "INSUFFICIENT_PRIVILEGE",
    "UNDEFINED_TABLE",
    "StoreClient",
    "StoreError",
    "StoreResponse",
]
