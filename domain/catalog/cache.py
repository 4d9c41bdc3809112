"""Read-through cache of reference entities and client custom overrides.

Lookups never block: a miss schedules a fetch on the running event loop (or
queues the id for ``drain()`` when no loop is running) and returns ``None``.
When the fetch completes, per-id subscribers and global listeners are told.
"""

import asyncio
import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable, Iterable

from domain.schemas import CustomOverride, ReferenceEntity

logger = logging.getLogger(__name__)

FetchEntity = Callable[[str], Awaitable[ReferenceEntity | None]]
EntityCallback = Callable[[str, ReferenceEntity | None], None]
# Called with the id that changed, or None for a bulk change.
Listener = Callable[[str | None], None]


class ReferenceCache:
    """Cache with subscription over the reference catalog."""

    def __init__(self, fetch_entity: FetchEntity | None = None):
        self.fetch_entity = fetch_entity
        self.revision = 0

        self._entities: dict[str, ReferenceEntity] = {}
        self._missing: set[str] = set()
        self._overrides: dict[str, CustomOverride] = {}

        self._pending: dict[str, asyncio.Task] = {}
        self._queued: list[str] = []

        self._subscribers: dict[str, list[EntityCallback]] = defaultdict(list)
        self._listeners: list[Listener] = []

    # ---- lookups ----

    def get(self, ref_id: str) -> ReferenceEntity | None:
        """Return the cached entity, scheduling a fetch on a miss."""
        entity = self._entities.get(ref_id)
        if entity is not None or ref_id in self._missing:
            return entity
        self._schedule(ref_id)
        return None

    def peek(self, ref_id: str) -> ReferenceEntity | None:
        return self._entities.get(ref_id)

    def is_missing(self, ref_id: str) -> bool:
        """True once a fetch confirmed the id does not exist."""
        return ref_id in self._missing

    def is_pending(self, ref_id: str) -> bool:
        return ref_id in self._pending or ref_id in self._queued

    @property
    def has_pending(self) -> bool:
        return bool(self._pending or self._queued)

    def override_for(self, ref_id: str) -> CustomOverride | None:
        return self._overrides.get(ref_id)

    # ---- observers ----

    def subscribe(self, ref_id: str, callback: EntityCallback) -> Callable[[], None]:
        """
        Register a callback for fills of one id.

        Returns:
            A function that removes the subscription
        """
        self._subscribers[ref_id].append(callback)

        def unsubscribe() -> None:
            callbacks = self._subscribers.get(ref_id)
            if callbacks and callback in callbacks:
                callbacks.remove(callback)
            if not callbacks:
                self._subscribers.pop(ref_id, None)

        return unsubscribe

    def add_listener(self, callback: Listener) -> Callable[[], None]:
        """Register a callback for every cache change."""
        self._listeners.append(callback)

        def remove() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return remove

    # ---- filling ----

    def put_many(self, entities: Iterable[ReferenceEntity]) -> int:
        """Bulk-load entities (catalog lists); returns how many changed."""
        changed = 0
        for entity in entities:
            if self._entities.get(entity.id) == entity:
                continue
            self._entities[entity.id] = entity
            self._missing.discard(entity.id)
            changed += 1
        if changed:
            self.revision += 1
            self._notify_listeners(None)
        return changed

    def set_overrides(self, overrides: Iterable[CustomOverride]) -> None:
        """Replace the client override table."""
        self._overrides = {o.reference_id: o for o in overrides}
        self.revision += 1
        logger.debug("Loaded %d custom overrides", len(self._overrides))
        self._notify_listeners(None)

    async def fetch(self, ref_id: str) -> ReferenceEntity | None:
        """
        Fetch one id through ``fetch_entity`` and store the outcome.

        A failed fetch is logged and the id is marked missing, so lookups fall
        back to the raw text instead of retrying forever.
        """
        if self.fetch_entity is None:
            return self._entities.get(ref_id)
        try:
            entity = await self.fetch_entity(ref_id)
        except Exception as e:
            logger.warning("Reference lookup failed for %s: %s", ref_id, e)
            entity = None
        finally:
            self._pending.pop(ref_id, None)
        self._store(ref_id, entity)
        return entity

    async def drain(self) -> int:
        """
        Run queued and in-flight fetches until none are left.

        Returns:
            Number of fetches awaited
        """
        awaited = 0
        while self._queued or self._pending:
            queued, self._queued = self._queued, []
            for ref_id in queued:
                if ref_id in self._pending or ref_id in self._entities or ref_id in self._missing:
                    continue
                self._pending[ref_id] = asyncio.ensure_future(self.fetch(ref_id))
            tasks = list(self._pending.values())
            if not tasks:
                break
            await asyncio.gather(*tasks)
            awaited += len(tasks)
        return awaited

    def clear(self) -> None:
        for task in self._pending.values():
            task.cancel()
        self._pending.clear()
        self._queued.clear()
        self._entities.clear()
        self._missing.clear()
        self._overrides.clear()
        self.revision += 1

    # ---- internals ----

    def _schedule(self, ref_id: str) -> None:
        if self.fetch_entity is None or self.is_pending(ref_id):
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._queued.append(ref_id)
            return
        self._pending[ref_id] = loop.create_task(self.fetch(ref_id))

    def _store(self, ref_id: str, entity: ReferenceEntity | None) -> None:
        if entity is None:
            # A bulk load may have filled the id while the fetch was in flight.
            if ref_id in self._entities or ref_id in self._missing:
                return
            self._missing.add(ref_id)
        else:
            if self._entities.get(ref_id) == entity:
                return
            self._entities[ref_id] = entity
            self._missing.discard(ref_id)

        self.revision += 1
        for callback in list(self._subscribers.get(ref_id, ())):
            callback(ref_id, entity)
        self._notify_listeners(ref_id)

    def _notify_listeners(self, ref_id: str | None) -> None:
        for callback in list(self._listeners):
            callback(ref_id)
