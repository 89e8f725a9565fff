"""Synchronization contexts.

A context owns the wire snapshot of one remote entity. It fetches the
snapshot lazily, keeps local edits in a dirty set until the server accepts
them, coalesces edits made close together into a single update, and merges
whatever the server sends back. Subscribers are told which properties changed
after every merge that changed something.

Subclasses supply the I/O through ``_get_data``, ``_submit_data`` and
``_delete_data``; everything else lives here.
"""

import asyncio
import time
import weakref
from enum import Enum
from typing import Any, Callable, ClassVar, Generic, Optional, TypeVar

import structlog
from pydantic import BaseModel

from sync.errors import NotFoundFault, SyncError
from sync.properties import PropertyRegistry
from sync.validation import VALID_ID

logger = structlog.get_logger()

TJson = TypeVar("TJson", bound=BaseModel)
Subscriber = Callable[[list[str]], None]


class SyncState(str, Enum):
    """Lifecycle state of a context."""
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    FRESH = "fresh"
    STALE = "stale"
    DIRTY = "dirty"
    DELETED = "deleted"


class SynchronizationContext(Generic[TJson]):
    """Keeps one snapshot in step with its remote entity."""

    properties: ClassVar[PropertyRegistry]

    def __init__(self, *, submit_delay: float = 0.0, refresh_throttle: Optional[float] = None):
        self.data: TJson = self.properties.snapshot_type()
        self.submit_delay = submit_delay
        self.refresh_throttle = refresh_throttle
        self._dirty: dict[str, Any] = {}
        self._subscribers: list[Subscriber] = []
        self._deleted_callbacks: list[Callable[[], None]] = []
        self._dependents: dict[str, "DependentContext"] = {}
        self._initialized = False
        self._synchronized_at: Optional[float] = None
        self._expired = False
        self._deleted = False
        # Bumped whenever a fetch already in flight may no longer reflect the server
        self._generation = 0
        self._refresh_task: Optional[asyncio.Task] = None
        self._refresh_generation = 0
        self._pending_submit: Optional[asyncio.Task] = None
        self._submit_lock = asyncio.Lock()
        # Set by delete() to run a scheduled submit without waiting out its delay
        self._flush = asyncio.Event()

    # ==================== State ====================

    @property
    def state(self) -> SyncState:
        if self._deleted:
            return SyncState.DELETED
        if self._refresh_task is not None:
            return SyncState.LOADING
        if self.has_changes:
            return SyncState.DIRTY
        if self._synchronized_at is None:
            return SyncState.UNINITIALIZED
        if not self.is_fresh:
            return SyncState.STALE
        return SyncState.FRESH

    @property
    def is_fresh(self) -> bool:
        """Whether the snapshot can be served without a fetch."""
        if self._synchronized_at is None or self._expired:
            return False
        if self.refresh_throttle is None:
            return True
        return time.monotonic() - self._synchronized_at < self.refresh_throttle

    @property
    def is_initialized(self) -> bool:
        """Whether at least one fetch has succeeded."""
        return self._initialized

    @property
    def is_deleted(self) -> bool:
        return self._deleted

    @property
    def has_changes(self) -> bool:
        return bool(self._dirty) or any(child.has_changes for child in self._dependents.values())

    @property
    def has_valid_id(self) -> bool:
        return VALID_ID.validate(None, getattr(self.data, "id", None)) is None

    def pending_changes(self) -> dict[str, Any]:
        """Copy of the unsubmitted local edits."""
        return dict(self._dirty)

    # ==================== Subscribers ====================

    def subscribe(self, callback: Subscriber) -> None:
        """Call ``callback`` with the changed property names after each merge."""
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def _notify(self, changed: list[str]) -> None:
        for callback in list(self._subscribers):
            try:
                callback(list(changed))
            except Exception as e:
                logger.warning("subscriber_failed", **self._log_fields(), error=str(e))

    def on_deleted(self, callback: Callable[[], None]) -> None:
        """Call ``callback`` once the context becomes deleted, locally or remotely."""
        if callback not in self._deleted_callbacks:
            self._deleted_callbacks.append(callback)

    # ==================== Dependents ====================

    def add_dependent(self, attribute: str, child: "DependentContext") -> None:
        """Nest ``child`` as the context for the ``attribute`` sub-resource."""
        self._dependents[attribute] = child
        setattr(self.data, attribute, child.data)

    def _apply_dependent_changes(self, payload: TJson, dependent_changes: dict[str, dict[str, Any]]) -> None:
        """Embed pending child edits into the parent's update payload."""
        for attribute, changes in dependent_changes.items():
            if changes:
                setattr(payload, attribute, self._dependents[attribute].build_payload(changes))

    # ==================== Values ====================

    def get_value(self, name: str) -> Any:
        """Current value of a property; a pending edit wins over the snapshot."""
        prop = self.properties[name]
        if name in self._dirty:
            value = self._dirty[name]
        else:
            value = prop.getter(self.data)
        if prop.resolver is not None:
            return prop.resolver(value, self)
        return value

    def set_value(self, name: str, value: Any) -> asyncio.Future:
        """Record a local edit and schedule it for submission."""
        if name not in self.properties:
            raise KeyError(name)
        if self._deleted:
            logger.warning("write_ignored_deleted", **self._log_fields(), property=name)
            return self._completed([])
        self._dirty[name] = value
        return self.request_submit()

    # ==================== Fetch ====================

    async def ensure_fresh(self) -> list[str]:
        """Fetch and merge the remote snapshot unless the local one is fresh.

        Concurrent callers share one fetch. Returns the changed property names.
        """
        while not self._deleted and not self.is_fresh:
            task = self._refresh_task
            if task is not None and self._refresh_generation != self._generation:
                # Started before a later submit or expiry; its result will be dropped
                await asyncio.wait({task})
                continue
            if task is None:
                self._refresh_generation = self._generation
                task = self._refresh_task = asyncio.create_task(self._refresh(self._generation))
            changed = await asyncio.shield(task)
            if changed is not None:
                return changed
        return []

    async def _refresh(self, generation: int) -> Optional[list[str]]:
        try:
            json = await self._get_data()
        except NotFoundFault:
            if not self._initialized:
                raise
            logger.info("entity_deleted_remotely", **self._log_fields())
            self._mark_deleted()
            return []
        finally:
            if self._refresh_task is asyncio.current_task():
                self._refresh_task = None

        self._initialized = True
        if self._deleted:
            return []
        if generation != self._generation:
            logger.debug("stale_fetch_discarded", **self._log_fields())
            return None
        changed = self.merge(json)
        self._mark_synchronized()
        logger.debug("entity_fetched", **self._log_fields(), changed=changed)
        return changed

    def _mark_synchronized(self) -> None:
        self._synchronized_at = time.monotonic()
        self._expired = False
        for child in self._dependents.values():
            child._mark_synchronized()

    def _mark_deleted(self) -> None:
        """Freeze this context and its dependents; unsubmitted edits are dropped."""
        if self._dirty:
            logger.info("pending_changes_discarded", **self._log_fields(), properties=sorted(self._dirty))
        self._deleted = True
        self._dirty.clear()
        for child in self._dependents.values():
            child._mark_deleted()
        for callback in list(self._deleted_callbacks):
            try:
                callback()
            except Exception as e:
                logger.warning("deleted_callback_failed", **self._log_fields(), error=str(e))

    def expire(self) -> None:
        """Force the next ``ensure_fresh`` to fetch again."""
        for child in self._dependents.values():
            child.expire()
        self._expired = True
        self._generation += 1

    # ==================== Merge ====================

    def merge(self, json: Optional[TJson]) -> list[str]:
        """Apply an incoming snapshot and return the names that changed.

        Only properties present in ``json`` are considered, and properties
        with an unsubmitted local edit keep the local value.
        """
        if json is None or self._deleted:
            return []

        changed: list[str] = []
        incoming_id = getattr(json, "id", None)
        if incoming_id is not None and incoming_id != self.data.id:
            self.data.id = incoming_id
            changed.append("id")

        for name, prop in self.properties.items():
            if name in self._dirty or not prop.is_present(json):
                continue
            incoming = prop.getter(json)
            if prop.equals(prop.getter(self.data), incoming):
                continue
            prop.setter(self.data, incoming)
            changed.append(name)

        for attribute, child in self._dependents.items():
            if attribute in json.model_fields_set:
                changed.extend(child.merge(getattr(json, attribute)))

        if changed:
            self._notify(changed)
        return changed

    # ==================== Submit ====================

    def request_submit(self) -> asyncio.Future:
        """Schedule a submit, joining the one already scheduled if any."""
        if self._deleted:
            return self._completed([])
        if self._pending_submit is None:
            self._pending_submit = asyncio.create_task(self._submit_after_delay())
            self._pending_submit.add_done_callback(self._consume_submit_result)
        return self._pending_submit

    async def _submit_after_delay(self) -> list[str]:
        try:
            await asyncio.wait_for(self._flush.wait(), self.submit_delay)
        except asyncio.TimeoutError:
            pass
        if self._pending_submit is asyncio.current_task():
            self._pending_submit = None
        return await self.submit()

    @staticmethod
    def _consume_submit_result(task: asyncio.Task) -> None:
        # Failures are logged by submit(); writers that never await the
        # returned future must not trigger "exception was never retrieved"
        if not task.cancelled():
            task.exception()

    def build_payload(self, changes: dict[str, Any]) -> TJson:
        """Partial snapshot carrying only ``changes``."""
        payload = self.properties.snapshot_type()
        for name, value in changes.items():
            self.properties[name].setter(payload, value)
        return payload

    def accept_changes(self, changes: dict[str, Any]) -> None:
        """Fold server-accepted edits into the snapshot and drop them from the dirty set."""
        for name, value in changes.items():
            self.properties[name].setter(self.data, value)
            # A newer edit made while the submit was in flight stays pending
            if name in self._dirty and self._dirty[name] is value:
                del self._dirty[name]

    async def submit(self) -> list[str]:
        """Send pending edits in one update and merge the response."""
        async with self._submit_lock:
            if self._deleted or not self.has_changes:
                return []

            changes = dict(self._dirty)
            dependent_changes = {
                attribute: child.pending_changes()
                for attribute, child in self._dependents.items()
            }
            payload = self.build_payload(changes)
            self._apply_dependent_changes(payload, dependent_changes)

            logger.debug("submitting_changes", **self._log_fields(), properties=sorted(changes))
            try:
                response = await self._submit_data(payload)
            except SyncError as e:
                logger.warning("submit_failed", **self._log_fields(), error=str(e))
                raise

            self.accept_changes(changes)
            for attribute, child_changes in dependent_changes.items():
                self._dependents[attribute].accept_changes(child_changes)
            self._generation += 1
            logger.info("changes_submitted", **self._log_fields(), properties=sorted(changes))
            return self.merge(response)

    # ==================== Delete ====================

    async def delete(self) -> None:
        """Delete the remote entity; the local snapshot stays readable."""
        if self._deleted:
            return
        # A scheduled submit wakes, waits for the lock and then finds nothing to send
        self._flush.set()
        async with self._submit_lock:
            if self._deleted:
                return
            try:
                await self._delete_data()
            except SyncError:
                self._flush.clear()
                raise
            self._mark_deleted()
        logger.info("entity_deleted", **self._log_fields())

    # ==================== I/O ====================

    async def _get_data(self) -> TJson:
        raise NotImplementedError

    async def _submit_data(self, payload: TJson) -> Optional[TJson]:
        raise NotImplementedError

    async def _delete_data(self) -> None:
        raise NotImplementedError

    # ==================== Helpers ====================

    @staticmethod
    def _completed(result: Any) -> asyncio.Future:
        future = asyncio.get_running_loop().create_future()
        future.set_result(result)
        return future

    def _log_fields(self) -> dict[str, Any]:
        return {"context": type(self).__name__, "entity_id": getattr(self.data, "id", None)}


class DependentContext(SynchronizationContext[TJson]):
    """Context for a sub-resource embedded in a parent entity.

    It performs no I/O of its own: refreshes and submits are requested from
    the parent through the callbacks it was given, and the parent merges,
    submits and expires it as part of its own operations.
    """

    def __init__(
        self,
        on_refresh_requested: Callable[[], Any],
        on_submit_requested: Callable[[], asyncio.Future],
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        # Weak so the child does not keep its parent alive
        self._refresh_requested = weakref.WeakMethod(on_refresh_requested)
        self._submit_requested = weakref.WeakMethod(on_submit_requested)

    async def ensure_fresh(self) -> list[str]:
        callback = self._refresh_requested()
        if callback is None:
            return []
        return await callback()

    def request_submit(self) -> asyncio.Future:
        callback = self._submit_requested()
        if callback is None:
            return self._completed([])
        return callback()

    async def submit(self) -> list[str]:
        return await self.request_submit()
