"""
Shared machinery for the in-memory state stores.

A store mirrors one server-held resource. Its lifecycle is

    idle -> loading -> populated | failed
    populated -> mutating -> populated

and every fetch re-enters ``loading``. Background fetches capture their
errors; caller-driven operations record theirs and re-raise. Each operation
records under its own key in ``errors`` so concurrent operations never
overwrite one another's failure.

Local updates are always written as transforms of the current state and run
between await points, so two mutations that resolve in any order both land.
"""

from contextlib import asynccontextmanager
from enum import Enum
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Generic, List, Optional, TypeVar

from loguru import logger
from pydantic import ValidationError

from ..api.client import APIError

T = TypeVar("T")
R = TypeVar("R")


class StoreStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    POPULATED = "populated"
    FAILED = "failed"
    MUTATING = "mutating"


def _message(error: Exception) -> str:
    if isinstance(error, APIError):
        return error.message
    return str(error)


def error_key(operation: str, record_id: Optional[str] = None) -> str:
    return operation if record_id is None else f"{operation}:{record_id}"


class BaseStore:
    """Status, per-operation errors and liveness shared by every store."""

    FETCH = "fetch"

    def __init__(self) -> None:
        self.errors: Dict[str, str] = {}
        self._settled_status = StoreStatus.IDLE
        self._fetches_in_flight = 0
        self._mutations_in_flight = 0
        self._fetch_generation = 0
        self._alive = True

    @property
    def status(self) -> StoreStatus:
        if self._mutations_in_flight:
            return StoreStatus.MUTATING
        if self._fetches_in_flight:
            return StoreStatus.LOADING
        return self._settled_status

    @property
    def loading(self) -> bool:
        return self._fetches_in_flight > 0

    @property
    def error(self) -> Optional[str]:
        """Banner-level error of the last collection fetch."""
        return self.errors.get(self.FETCH)

    @property
    def alive(self) -> bool:
        return self._alive

    def close(self) -> None:
        """Detach the store; results arriving afterwards are dropped."""
        self._alive = False

    def clear_error(self, key: Optional[str] = None) -> None:
        if key is None:
            self.errors.clear()
        else:
            self.errors.pop(key, None)

    async def _run_fetch(
        self,
        load: Callable[[], Awaitable[R]],
        apply: Callable[[R], None],
    ) -> Optional[R]:
        """
        Run a background fetch of the whole resource.

        Only the most recently started fetch may apply its result, and only
        while the store is alive. Failures are stored under ``errors["fetch"]``
        and the cached data is left as it was.
        """
        self._fetch_generation += 1
        generation = self._fetch_generation
        self._fetches_in_flight += 1
        try:
            result = await load()
        except (APIError, ValidationError) as e:
            if self._alive and generation == self._fetch_generation:
                self.errors[self.FETCH] = _message(e)
                self._settled_status = StoreStatus.FAILED
            logger.warning(f"{type(self).__name__} fetch failed: {_message(e)}")
            return None
        finally:
            self._fetches_in_flight -= 1

        if not self._alive or generation != self._fetch_generation:
            logger.debug(f"{type(self).__name__} dropped a stale fetch result")
            return None

        apply(result)
        self.errors.pop(self.FETCH, None)
        self._settled_status = StoreStatus.POPULATED
        return result

    async def _capture(self, key: str, call: Callable[[], Awaitable[R]]) -> Optional[R]:
        """Run a background read, storing any failure under ``key``."""
        try:
            result = await call()
        except (APIError, ValidationError) as e:
            if self._alive:
                self.errors[key] = _message(e)
            logger.warning(f"{type(self).__name__} {key} failed: {_message(e)}")
            return None
        if self._alive:
            self.errors.pop(key, None)
        return result

    @asynccontextmanager
    async def _recording(self, key: str) -> AsyncIterator[None]:
        """Record a caller-driven operation's failure under ``key`` and re-raise it."""
        self.errors.pop(key, None)
        try:
            yield
        except (APIError, ValidationError) as e:
            if self._alive:
                self.errors[key] = _message(e)
            logger.error(f"{type(self).__name__} {key} failed: {_message(e)}")
            raise

    @asynccontextmanager
    async def _mutation(self, operation: str, record_id: Optional[str] = None) -> AsyncIterator[None]:
        """Track a caller-driven mutation; the store reads as ``mutating`` meanwhile."""
        self._mutations_in_flight += 1
        try:
            async with self._recording(error_key(operation, record_id)):
                yield
            if self._settled_status is StoreStatus.IDLE:
                self._settled_status = StoreStatus.POPULATED
        finally:
            self._mutations_in_flight -= 1


class CollectionStore(BaseStore, Generic[T]):
    """A store mirroring a list of records keyed by ``id``."""

    def __init__(self) -> None:
        super().__init__()
        self._items: List[T] = []
        self.pagination: Dict[str, Any] = {}

    @property
    def items(self) -> List[T]:
        return list(self._items)

    def find(self, record_id: str) -> Optional[T]:
        for item in self._items:
            if item.id == record_id:
                return item
        return None

    def _update_items(self, transform: Callable[[List[T]], List[T]]) -> None:
        if not self._alive:
            return
        self._items = transform(self._items)

    def _replace(self, record_id: str, transform: Callable[[T], T]) -> None:
        self._update_items(
            lambda items: [transform(item) if item.id == record_id else item for item in items]
        )

    def _remove_where(self, predicate: Callable[[T], bool]) -> List[T]:
        """Drop matching records and return the ones removed."""
        if not self._alive:
            return []
        removed = [item for item in self._items if predicate(item)]
        self._update_items(lambda items: [item for item in items if not predicate(item)])
        return removed
