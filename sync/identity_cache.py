"""Identity map guaranteeing one live domain instance per remote entity."""

import threading
from typing import Any, Callable, Optional, TypeVar
import structlog

logger = structlog.get_logger()

T = TypeVar('T')


class IdentityCache:
    """Thread-safe (type, id) -> instance map.

    Entries live until removed or until ``clear()``; there is no expiry.
    Create one per client session and pass it to whatever constructs
    entities.
    """

    def __init__(self):
        self._entries: dict[tuple[type, str], Any] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, entity: Any) -> bool:
        return self.find(type(entity), entity.id) is entity

    def find(self, entity_type: type[T], entity_id: str) -> Optional[T]:
        """Get the cached instance, if any."""
        with self._lock:
            return self._entries.get((entity_type, entity_id))

    def get_or_add(self, entity_type: type[T], entity_id: str, factory: Callable[[], T]) -> T:
        """Get the cached instance or build, cache and return a new one.

        ``factory`` runs outside the lock, so two callers may both build an
        instance; only the first one stored is ever returned.
        """
        existing = self.find(entity_type, entity_id)
        if existing is not None:
            return existing

        candidate = factory()
        with self._lock:
            winner = self._entries.setdefault((entity_type, entity_id), candidate)
        if winner is not candidate:
            logger.debug("identity_cache_race_lost", entity_type=entity_type.__name__, entity_id=entity_id)
        else:
            logger.debug("identity_cache_added", entity_type=entity_type.__name__, entity_id=entity_id)
        return winner

    def add(self, entity: T) -> T:
        """Cache ``entity`` unless an instance with its identity is already cached."""
        return self.get_or_add(type(entity), entity.id, lambda: entity)

    def remove(self, entity: Any) -> None:
        """Evict ``entity`` if it is the cached instance for its identity."""
        key = (type(entity), entity.id)
        with self._lock:
            if self._entries.get(key) is entity:
                del self._entries[key]
                logger.debug("identity_cache_removed", entity_type=key[0].__name__, entity_id=key[1])

    def rekey(self, entity: Any, old_id: str) -> None:
        """Move ``entity`` to its current id after the server corrected it."""
        with self._lock:
            if self._entries.get((type(entity), old_id)) is entity:
                del self._entries[(type(entity), old_id)]
            self._entries.setdefault((type(entity), entity.id), entity)

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._entries.clear()
        logger.info("identity_cache_cleared")
