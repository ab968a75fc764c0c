"""
Local mirror of a remote collection with optimistic mutations.

A SyncedCollection holds the client-side copy of one remote collection
(watchlist items, alert log entries). Mutations are applied locally before
the server confirms them:

- add: appended immediately; removed again if the server rejects it, since
  a failed create leaves the server unchanged.
- remove: dropped immediately; on failure the collection reloads from the
  server instead of re-inserting its cached copy, since a failed delete
  leaves the server state unknown.

At most one mutation per key is in flight. Readers get immutable snapshots;
only the collection's own methods write to its items.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from .api_client import (
    APIConnectionError,
    APIError,
    APIValidationError,
    StockNotifierAPIClient,
)
from .exceptions import FetchError, MutationError
from .models import AlertLogEntry, WatchlistItem
from .sources import AlertLogSource, RemoteSource, WatchlistSource
from .state import CollectionStatus, MutationErrorKind, MutationKind

logger = logging.getLogger(__name__)

T = TypeVar("T")
K = TypeVar("K")


@dataclass(frozen=True)
class CollectionSnapshot(Generic[T, K]):
    """Immutable view of a collection at one point in time.

    Attributes:
        items: Entities in display order, unique by key
        status: Load status
        pending: Keys with a mutation awaiting server confirmation
        last_error: Error from the most recent failed load, if any
    """

    items: tuple[T, ...]
    status: CollectionStatus
    pending: frozenset[K]
    last_error: Optional[FetchError] = None

    @property
    def is_loading(self) -> bool:
        return self.status == CollectionStatus.LOADING

    @property
    def has_error(self) -> bool:
        return self.status == CollectionStatus.ERROR


Listener = Callable[[CollectionSnapshot], None]


class SyncedCollection(Generic[T, K]):
    """
    Client-side mirror of one remote collection.

    Args:
        source: Remote operations for the collection
        key: Function returning an entity's identity key
        name: Label used in logs and error messages
        sort_key: Optional ordering applied to items
        descending: Reverse the ordering given by ``sort_key``
    """

    def __init__(
        self,
        source: RemoteSource[T, K],
        key: Callable[[T], K],
        name: str = "collection",
        sort_key: Optional[Callable[[T], Any]] = None,
        descending: bool = False,
    ):
        self._source = source
        self._key = key
        self.name = name
        self._sort_key = sort_key
        self._descending = descending

        self._items: list[T] = []
        self._status = CollectionStatus.IDLE
        self._pending: dict[K, MutationKind] = {}
        self._last_error: Optional[FetchError] = None
        self._load_generation = 0
        self._listeners: list[Listener] = []

    # Read access

    @property
    def items(self) -> tuple[T, ...]:
        return tuple(self._items)

    @property
    def status(self) -> CollectionStatus:
        return self._status

    @property
    def pending(self) -> frozenset[K]:
        return frozenset(self._pending)

    @property
    def last_error(self) -> Optional[FetchError]:
        return self._last_error

    def snapshot(self) -> CollectionSnapshot[T, K]:
        """Return an immutable view of the current state."""
        return CollectionSnapshot(
            items=tuple(self._items),
            status=self._status,
            pending=frozenset(self._pending),
            last_error=self._last_error,
        )

    def keys(self) -> list[K]:
        return [self._key(item) for item in self._items]

    def get(self, key: K) -> Optional[T]:
        for item in self._items:
            if self._key(item) == key:
                return item
        return None

    def __contains__(self, key: object) -> bool:
        return any(self._key(item) == key for item in self._items)

    def __len__(self) -> int:
        return len(self._items)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called with a fresh snapshot after every change.

        Returns:
            Function that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # Remote operations

    async def load(self) -> list[T]:
        """
        Replace the local items with the server's collection.

        Only the most recently started load applies its result; a load
        overtaken by a newer one leaves state alone. Pending mutations stay
        reflected in the result until they are confirmed.

        Returns:
            Items after the load.

        Raises:
            FetchError: If the server could not be read. The collection
                status becomes ERROR.
        """
        self._load_generation += 1
        generation = self._load_generation
        previous_status = self._status
        self._status = CollectionStatus.LOADING
        self._notify()

        try:
            fetched = await self._source.fetch_all()
        except Exception as e:
            error = FetchError(f"load {self.name}", e)
            if generation == self._load_generation:
                self._status = CollectionStatus.ERROR
                self._last_error = error
                self._notify()
            logger.warning(f"Loading {self.name} failed: {e}")
            raise error from e
        except asyncio.CancelledError:
            if generation == self._load_generation:
                self._status = previous_status
                self._notify()
            raise

        if generation != self._load_generation:
            logger.debug(f"Discarding superseded {self.name} load")
            return list(self._items)

        self._items = self._reconcile(fetched)
        self._status = CollectionStatus.IDLE
        self._last_error = None
        logger.debug(f"Loaded {len(self._items)} {self.name} items")
        self._notify()
        return list(self._items)

    async def add(self, item: T) -> None:
        """
        Add an item optimistically, then create it remotely.

        Adding a key that is already present (or already being added) is a
        no-op that makes no network call.

        Raises:
            MutationError: ALREADY_PENDING if the key is being removed;
                REMOTE_REJECTED or TRANSPORT_FAILURE if the create failed,
                in which case the item has been taken out again.
        """
        key = self._key(item)
        if self._pending.get(key) == MutationKind.REMOVE:
            raise MutationError(MutationErrorKind.ALREADY_PENDING, "add", key)
        if key in self._pending or key in self:
            logger.debug(f"{key!r} already in {self.name}, skipping add")
            return

        self._items = self._ordered(self._items + [item])
        self._pending[key] = MutationKind.ADD
        self._notify()

        confirmed = False
        try:
            await self._source.create(item)
            confirmed = True
            logger.info(f"Added {key!r} to {self.name}")
        except MutationError:
            logger.warning(f"Adding {key!r} to {self.name} refused, rolling back")
            raise
        except Exception as e:
            logger.warning(f"Adding {key!r} to {self.name} failed, rolling back: {e}")
            raise MutationError(self._error_kind(e), "add", key, e) from e
        finally:
            self._pending.pop(key, None)
            if not confirmed:
                self._items = [i for i in self._items if self._key(i) != key]
            self._notify()

    async def remove(self, key: K) -> None:
        """
        Remove an item optimistically, then delete it remotely.

        Raises:
            MutationError: ALREADY_PENDING if a mutation on the key is in
                flight (no network call is made); REMOTE_REJECTED or
                TRANSPORT_FAILURE if the delete failed, after the collection
                has been reloaded from the server.
        """
        if key in self._pending:
            raise MutationError(MutationErrorKind.ALREADY_PENDING, "remove", key)

        self._items = [i for i in self._items if self._key(i) != key]
        self._pending[key] = MutationKind.REMOVE
        self._notify()

        try:
            await self._source.delete(key)
            logger.info(f"Removed {key!r} from {self.name}")
        except Exception as e:
            self._pending.pop(key, None)
            logger.warning(f"Removing {key!r} from {self.name} failed, resyncing: {e}")
            try:
                await self.load()
            except FetchError as load_error:
                logger.warning(f"Resync of {self.name} failed: {load_error}")
            raise MutationError(self._error_kind(e), "remove", key, e) from e
        finally:
            if self._pending.pop(key, None) is not None:
                self._notify()

    # Internal helpers

    def _reconcile(self, fetched: list[T]) -> list[T]:
        """Merge a fresh server copy with mutations still awaiting confirmation."""
        items: list[T] = []
        seen: set = set()
        for item in fetched:
            key = self._key(item)
            if key in seen or self._pending.get(key) == MutationKind.REMOVE:
                continue
            seen.add(key)
            items.append(item)

        for item in self._items:
            key = self._key(item)
            if self._pending.get(key) == MutationKind.ADD and key not in seen:
                seen.add(key)
                items.append(item)

        return self._ordered(items)

    def _ordered(self, items: list[T]) -> list[T]:
        if self._sort_key is None:
            return items
        return sorted(items, key=self._sort_key, reverse=self._descending)

    @staticmethod
    def _error_kind(error: Exception) -> MutationErrorKind:
        if isinstance(error, APIConnectionError):
            return MutationErrorKind.TRANSPORT_FAILURE
        if isinstance(error, APIError) and error.status_code is None and not isinstance(
            error, APIValidationError
        ):
            return MutationErrorKind.TRANSPORT_FAILURE
        return MutationErrorKind.REMOTE_REJECTED

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)


def watchlist_collection(client: StockNotifierAPIClient) -> SyncedCollection[WatchlistItem, str]:
    """Collection mirroring ``/watchlist``, keyed by canonical symbol."""
    return SyncedCollection(
        WatchlistSource(client),
        key=lambda item: item.symbol,
        name="watchlist",
    )


def alerts_collection(client: StockNotifierAPIClient) -> SyncedCollection[AlertLogEntry, int]:
    """Collection mirroring ``/logs``, keyed by id, newest first."""
    return SyncedCollection(
        AlertLogSource(client),
        key=lambda entry: entry.id,
        name="alerts",
        sort_key=lambda entry: entry.timestamp,
        descending=True,
    )
