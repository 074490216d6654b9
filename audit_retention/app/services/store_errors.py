import asyncio
from typing import Awaitable, TypeVar

from audit_retention.libs.result import Error

T = TypeVar("T")


class StoreUnavailable(Exception):
    """The entity store or blob store could not complete an operation"""

    def __init__(self, message: str, store: str = "entity"):
        self.store = store
        super().__init__(message)


async def bounded(awaitable: Awaitable[T], timeout: float, store: str = "entity") -> T:
    """Await a store call, reporting a timeout as StoreUnavailable"""
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError as exc:
        raise StoreUnavailable(
            f"{store} store did not respond within {timeout}s", store=store
        ) from exc


def store_unavailable_error(exc: StoreUnavailable) -> Error:
    return Error(
        "STORE_UNAVAILABLE",
        "Store unavailable",
        reason=str(exc),
        details={"store": exc.store},
    )
