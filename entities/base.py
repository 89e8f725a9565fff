"""Shared plumbing for Trello-backed entities and their contexts."""

from enum import Flag
from typing import Any, Callable, ClassVar, Optional, TypeVar
import structlog

from sync.context import SynchronizationContext, SyncState, TJson
from sync.identity_cache import IdentityCache
from trello import TrelloClient

logger = structlog.get_logger()

E = TypeVar("E", bound="TrelloEntity")
EntitySubscriber = Callable[["TrelloEntity", list[str]], None]


class RemoteContext(SynchronizationContext[TJson]):
    """Context whose snapshot lives at one Trello REST resource.

    Subclasses declare ``properties``, ``downloaded_fields`` and the
    resource path.
    """

    downloaded_fields: ClassVar[Flag]

    def __init__(
        self,
        entity_id: str,
        client: TrelloClient,
        cache: IdentityCache,
        *,
        submit_delay: float = 0.0,
        refresh_throttle: Optional[float] = None,
    ):
        super().__init__(submit_delay=submit_delay, refresh_throttle=refresh_throttle)
        self.client = client
        self.cache = cache
        self.data.id = entity_id

    @property
    def options(self) -> dict[str, Any]:
        """Keyword arguments for building related contexts the same way."""
        return {"submit_delay": self.submit_delay, "refresh_throttle": self.refresh_throttle}

    def _path(self) -> str:
        raise NotImplementedError

    def _fetch_params(self) -> dict[str, str]:
        return self.properties.fetch_params(type(self).downloaded_fields)

    async def _get_data(self) -> TJson:
        payload = await self.client.get_json(self._path(), params=self._fetch_params())
        return self.properties.snapshot_type.model_validate(payload)

    async def _submit_data(self, payload: TJson) -> TJson:
        body = payload.model_dump(by_alias=True, exclude_unset=True, mode="json")
        response = await self.client.put_json(self._path(), body)
        return self.properties.snapshot_type.model_validate(response)

    async def _delete_data(self) -> None:
        await self.client.delete(self._path())


class TrelloEntity:
    """Domain object wrapping exactly one context.

    Build instances through ``from_json``/``from_id`` (or EntityService) so the
    identity cache hands out one instance per remote id.
    """

    Fields: ClassVar[type[Flag]]
    _context_type: ClassVar[type[RemoteContext]]

    def __init__(self, context: RemoteContext):
        self._context = context
        self.id: str = context.data.id
        self._subscribers: list[EntitySubscriber] = []
        context.subscribe(self._synchronized)
        context.on_deleted(self._evict)

    @classmethod
    def get_downloaded_fields(cls) -> Flag:
        return cls._context_type.downloaded_fields

    @classmethod
    def set_downloaded_fields(cls, selection: Flag) -> None:
        """Limit which properties later fetches of this type request."""
        cls._context_type.downloaded_fields = selection

    @classmethod
    def _cached(cls: type[E], json: Any, cache: IdentityCache, factory: Callable[[], E]) -> E:
        if not json.id:
            raise ValueError(f"{cls.__name__} snapshot has no id")
        entity = cache.get_or_add(cls, json.id, factory)
        entity._context.merge(json)
        return entity

    @property
    def context(self) -> RemoteContext:
        return self._context

    @property
    def json(self) -> Any:
        """The current wire snapshot."""
        return self._context.data

    @property
    def state(self) -> SyncState:
        return self._context.state

    def subscribe(self, callback: EntitySubscriber) -> None:
        """Call ``callback(entity, changed_names)`` whenever data is updated."""
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: EntitySubscriber) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    async def refresh(self, force: bool = False) -> list[str]:
        """Bring the entity up to date; ``force`` refetches even when fresh."""
        if force:
            self._context.expire()
        return await self._context.ensure_fresh()

    def expire(self) -> None:
        """Mark the entity as changed remotely; the next read refetches."""
        self._context.expire()

    async def submit(self) -> list[str]:
        """Send pending edits now instead of waiting for the scheduled submit."""
        return await self._context.submit()

    async def delete(self) -> None:
        """Permanently delete the entity.

        The instance keeps its last known values but stops synchronizing and
        leaves the identity cache.
        """
        await self._context.delete()

    def _evict(self) -> None:
        self._context.cache.remove(self)

    def _synchronized(self, properties: list[str]) -> None:
        new_id = self._context.data.id
        if new_id != self.id:
            old_id, self.id = self.id, new_id
            self._context.cache.rekey(self, old_id)
        for callback in list(self._subscribers):
            try:
                callback(self, properties)
            except Exception as e:
                logger.warning("entity_subscriber_failed", entity=type(self).__name__, entity_id=self.id, error=str(e))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, state={self.state.value})"
