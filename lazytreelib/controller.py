"""Lazy tree data controller.

Decides when a node's children need fetching, runs the fetch through the
fetch provider, and merges the result back into an immutable snapshot.
Per-node loading and error state is tracked alongside, and results are
cached with a TTL so re-expanding a node does not hit the provider again.

Per-node lifecycle:

    Unloaded --expand--> Loading --ok--> Loaded --stale window passes--> (reload)
                            |
                            +--fail--> Errored --retry--> Loading

The controller is single-threaded and cooperative: everything except the
awaited provider call runs synchronously, so state changes made before a
fetch starts are visible to the very next caller in the same tick.
"""

import asyncio
import functools
import logging
import time
from types import MappingProxyType
from typing import (Any, Callable, Dict, FrozenSet, Iterable, List, Mapping,
                    Optional, Sequence, Set, Tuple)

from .cache import TTLCacheStore, cache_key_for
from .config import ControllerConfig
from .core.node import NodeLike, TreeNode, as_nodes
from .core.provider import FetchProvider
from .enhance import enhance_items_with_states
from .error_policies import ErrorPolicy, LogErrorsPolicy
from .errors import FetchError, error_message
from .tree import find_by_id, replace_children

logger = logging.getLogger(__name__)

Listener = Callable[["LazyTreeController"], None]


def _consume_exception(future: asyncio.Future) -> None:
    # Joiners are optional, so mark the exception retrieved to keep
    # asyncio from reporting it at garbage collection.
    if not future.cancelled():
        future.exception()


class LazyTreeController:
    """
    Orchestrates lazy loading of tree children.

    Example:
        controller = LazyTreeController(provider=MyProvider())
        await controller.load_children()              # root level
        task = controller.handle_item_expansion('a')  # user expanded 'a'
        render(controller.decorated_items)
    """

    def __init__(self,
                 provider: Optional[FetchProvider] = None,
                 cache: Optional[Any] = None,
                 initial_items: Iterable[NodeLike] = (),
                 config: Optional[ControllerConfig] = None,
                 clock: Optional[Callable[[], float]] = None,
                 error_policy: Optional[ErrorPolicy] = None,
                 *,
                 stale_time: Optional[float] = None,
                 clear_resets_freshness: Optional[bool] = None):
        """
        Initialize the controller.

        Args:
            provider: Fetch provider; without one every load is a no-op
            cache: Cache object with get/set/clear (delete/has optional).
                A TTLCacheStore is built from the config when omitted.
            initial_items: Starting snapshot (e.g. an eagerly supplied tree)
            config: Controller configuration
            clock: Zero-argument callable returning seconds, shared with
                the default cache
            error_policy: What to do with failures of background loads
            stale_time: Shortcut override for config.stale_time
            clear_resets_freshness: Shortcut override for
                config.clear_resets_freshness
        """
        self.config = (config or ControllerConfig()).with_overrides(
            stale_time=stale_time,
            clear_resets_freshness=clear_resets_freshness,
        )
        self.config.validate()

        self._clock = clock or time.monotonic
        self.provider = provider
        if cache is None:
            cache = TTLCacheStore(
                default_ttl=self.config.cache_ttl,
                max_entries=self.config.max_cache_entries,
                clock=self._clock,
            )
        self.cache = cache
        self.error_policy = error_policy or LogErrorsPolicy()

        self._items: Tuple[TreeNode, ...] = as_nodes(initial_items)
        self._loading: Set[str] = set()
        self._errors: Dict[str, str] = {}
        self._fetched_at: Dict[Optional[str], float] = {}
        self._in_flight: Dict[Optional[str], asyncio.Future] = {}
        self._tasks: Set[asyncio.Task] = set()
        self._listeners: List[Listener] = []

        self._version = 0
        self._decorated: Optional[Tuple[int, Tuple[TreeNode, ...]]] = None

        # Statistics
        self.fetch_count = 0
        self.cache_hits = 0
        self.failures = 0

    # Exposed state

    @property
    def items(self) -> Tuple[TreeNode, ...]:
        """The current raw snapshot."""
        return self._items

    @property
    def loading_items(self) -> FrozenSet[str]:
        """Ids with a children fetch in flight."""
        return frozenset(self._loading)

    @property
    def error_items(self) -> Mapping[str, str]:
        """Id -> message of the latest failed children fetch."""
        return MappingProxyType(dict(self._errors))

    @property
    def decorated_items(self) -> Tuple[TreeNode, ...]:
        """Snapshot with loading/error/placeholder children injected."""
        if self._decorated is None or self._decorated[0] != self._version:
            self._decorated = (self._version, self.decorate())
        return self._decorated[1]

    def decorate(self, provider: Optional[FetchProvider] = None) -> Tuple[TreeNode, ...]:
        """Decorate the snapshot using provider's child counts (default: the configured one)."""
        provider = self.provider if provider is None else provider
        count = provider.children_count if provider is not None else None
        return enhance_items_with_states(self._items, self._loading, self._errors, count)

    def is_loading(self, node_id: str) -> bool:
        return node_id in self._loading

    def error_for(self, node_id: str) -> Optional[str]:
        return self._errors.get(node_id)

    def fetched_at(self, node_id: Optional[str] = None) -> Optional[float]:
        """Time of the last successful fetch for node_id (None = root)."""
        return self._fetched_at.get(node_id)

    def is_stale(self, node_id: Optional[str]) -> bool:
        """True if node_id was never fetched or its stale window has passed."""
        fetched = self._fetched_at.get(node_id)
        if fetched is None:
            return True
        return self._clock() - fetched >= self.config.stale_time

    # Operations

    async def load_children(self,
                            parent_id: Optional[str] = None,
                            *,
                            provider: Optional[FetchProvider] = None) -> None:
        """
        Load the children of parent_id (the root level when None).

        A fresh cache entry is spliced in without touching the provider or
        the loading state. If a fetch for the same id is already running
        this call waits for it instead of starting another.

        Args:
            parent_id: Parent whose children to load, None for root
            provider: Use this provider instead of the configured one

        Raises:
            FetchError: The provider failed; the node's error state is set
        """
        provider = self._resolve_provider(provider)
        if provider is None:
            return

        prepared = self._prepare_load(parent_id)
        if prepared is None:
            return

        future, started = prepared
        if started:
            await self._run_fetch(parent_id, provider, future)
        else:
            logger.debug("Joining in-flight fetch for %s", parent_id)
            await asyncio.shield(future)

    async def retry_load_items(self,
                               parent_id: str,
                               *,
                               provider: Optional[FetchProvider] = None) -> None:
        """Drop the cached children of parent_id and load them again."""
        self._delete_cached(cache_key_for(parent_id))
        await self.load_children(parent_id, provider=provider)

    def handle_item_expansion(self,
                              item_id: str,
                              current_items: Optional[Sequence[TreeNode]] = None,
                              *,
                              provider: Optional[FetchProvider] = None
                              ) -> Optional[asyncio.Task]:
        """
        React to item_id being expanded in the presentation layer.

        Fetches only when the provider reports children and the node has
        no children loaded yet or its stale window has passed. A stale
        node's cache entry is dropped first so the load cannot be served
        from it. Must be called while an event loop is running.

        Args:
            item_id: The id that just went from collapsed to expanded
            current_items: Snapshot to look the item up in (defaults to
                the controller's own)
            provider: Use this provider instead of the configured one

        Returns:
            The background load task, or None when nothing was fetched
        """
        provider = self.provider if provider is None else provider
        if provider is None:
            logger.debug("handle_item_expansion: no fetch provider available")
            return None

        items = self._items if current_items is None else current_items
        item = find_by_id(items, item_id)
        if item is None:
            logger.debug("handle_item_expansion: item not found: %s", item_id)
            return None

        children_count = provider.children_count(item)
        if children_count == 0:
            return None

        if item_id in self._in_flight:
            logger.debug("handle_item_expansion: %s is already loading", item_id)
            return None

        stale = self.is_stale(item_id)
        if not (stale or not item.children):
            logger.debug("handle_item_expansion: %s already has fresh children", item_id)
            return None

        loop = asyncio.get_running_loop()
        if stale:
            self._delete_cached(cache_key_for(item_id))

        logger.debug("handle_item_expansion: loading children for %s (stale=%s)", item_id, stale)
        prepared = self._prepare_load(item_id)
        if prepared is None:
            return None

        future, _ = prepared
        task = loop.create_task(self._run_background(item_id, provider, future))
        self._tasks.add(task)
        task.add_done_callback(functools.partial(self._background_done, item_id, future))
        return task

    def handle_expanded_items_change(self,
                                     previous_ids: Iterable[str],
                                     current_ids: Iterable[str],
                                     current_items: Optional[Sequence[TreeNode]] = None,
                                     *,
                                     provider: Optional[FetchProvider] = None
                                     ) -> List[asyncio.Task]:
        """
        Feed an expansion-list change from the presentation layer.

        Every id in current_ids that was not in previous_ids is handed to
        handle_item_expansion() with the same current_items and provider;
        collapsed ids need no action.

        Returns:
            The background load tasks that were started
        """
        previous = set(previous_ids)
        tasks = []
        for item_id in current_ids:
            if item_id in previous:
                continue
            task = self.handle_item_expansion(item_id, current_items, provider=provider)
            if task is not None:
                tasks.append(task)
        return tasks

    def clear_cache(self) -> None:
        """
        Clear the cache and reset loading and error state.

        The snapshot is kept. Fetch timestamps are kept too unless the
        config asks for clear_resets_freshness.
        """
        self.cache.clear()
        self._loading.clear()
        self._errors.clear()
        if self.config.clear_resets_freshness:
            self._fetched_at.clear()
        self._changed()

    async def ensure_root_loaded(self) -> None:
        """Load the root level if the snapshot is empty and a provider is set."""
        if self.provider is not None and not self._items:
            await self.load_children()

    async def wait_idle(self) -> None:
        """Wait for every background load started by this controller."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def set_items(self, items: Iterable[NodeLike]) -> None:
        """Replace the whole snapshot (for eagerly supplied trees)."""
        self._items = as_nodes(items)
        self._changed()

    # Listeners

    def connect_listener(self, callback: Listener) -> None:
        """Register a callback invoked with the controller after every change."""
        if callback not in self._listeners:
            self._listeners.append(callback)
            logger.debug("Connected change listener: %r", callback)

    def disconnect_listener(self, callback: Listener) -> None:
        """Remove a previously connected callback."""
        if callback in self._listeners:
            self._listeners.remove(callback)
            logger.debug("Disconnected change listener: %r", callback)

    def get_stats(self) -> Dict[str, Any]:
        """
        Get controller statistics for monitoring and debugging.

        Returns:
            Dictionary of counters and current state sizes
        """
        return {
            'fetch_count': self.fetch_count,
            'cache_hits': self.cache_hits,
            'failures': self.failures,
            'in_flight': len(self._in_flight),
            'loading': len(self._loading),
            'errors': len(self._errors),
            'fetched_nodes': len(self._fetched_at),
            'background_tasks': len(self._tasks),
        }

    # Internals

    def _resolve_provider(self, provider: Optional[FetchProvider]) -> Optional[FetchProvider]:
        provider = self.provider if provider is None else provider
        if provider is None:
            logger.warning("LazyTreeController: a fetch provider is required for lazy loading")
        return provider

    def _prepare_load(self, parent_id: Optional[str]) -> Optional[Tuple[asyncio.Future, bool]]:
        """
        Synchronous half of a load.

        Returns None when the cache satisfied the load, otherwise the
        future of the fetch to await and whether this call started it.
        """
        cached = self.cache.get(cache_key_for(parent_id))
        if cached is not None:
            self.cache_hits += 1
            logger.debug("Serving children of %s from cache", parent_id)
            self._apply_children(parent_id, cached)
            self._changed()
            return None

        running = self._in_flight.get(parent_id)
        if running is not None:
            return running, False

        future = asyncio.get_running_loop().create_future()
        future.add_done_callback(_consume_exception)
        self._in_flight[parent_id] = future
        if parent_id is not None:
            self._loading.add(parent_id)
            self._errors.pop(parent_id, None)
            self._changed()
        return future, True

    async def _run_fetch(self,
                         parent_id: Optional[str],
                         provider: FetchProvider,
                         future: asyncio.Future) -> None:
        """Awaited half of a load: call the provider and merge the result."""
        self.fetch_count += 1
        try:
            children = as_nodes(await provider.list_children(parent_id))
        except asyncio.CancelledError:
            if parent_id is not None:
                self._loading.discard(parent_id)
            future.cancel()
            self._changed()
            raise
        except Exception as exc:
            message = error_message(exc)
            self.failures += 1
            if parent_id is not None:
                self._loading.discard(parent_id)
                self._errors[parent_id] = message
            logger.debug("Error loading tree items for %s: %s", parent_id, message)
            error = FetchError(parent_id, message)
            future.set_exception(error)
            self._changed()
            raise error from exc
        else:
            # Written after the await so overlapping loads resolve last-write-wins
            self.cache.set(cache_key_for(parent_id), children)
            self._fetched_at[parent_id] = self._clock()
            self._apply_children(parent_id, children)
            if parent_id is not None:
                self._loading.discard(parent_id)
            future.set_result(children)
            self._changed()
        finally:
            if self._in_flight.get(parent_id) is future:
                del self._in_flight[parent_id]

    async def _run_background(self,
                              item_id: str,
                              provider: FetchProvider,
                              future: asyncio.Future) -> None:
        try:
            await self._run_fetch(item_id, provider, future)
        except Exception as exc:
            self.error_policy.handle(exc, item_id)

    def _background_done(self,
                         item_id: str,
                         future: asyncio.Future,
                         task: asyncio.Task) -> None:
        self._tasks.discard(task)
        # A task cancelled before its first step never reached _run_fetch
        if task.cancelled() and not future.done():
            logger.debug("Background load for %s was cancelled before it started", item_id)
            future.cancel()
            self._loading.discard(item_id)
            if self._in_flight.get(item_id) is future:
                del self._in_flight[item_id]
            self._changed()

    def _apply_children(self, parent_id: Optional[str], children: Iterable[NodeLike]) -> None:
        if parent_id is None:
            self._items = as_nodes(children)
        else:
            self._items = replace_children(self._items, parent_id, children)

    def _delete_cached(self, key: str) -> None:
        delete = getattr(self.cache, "delete", None)
        if delete is not None:
            delete(key)

    def _changed(self) -> None:
        self._version += 1
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Change listener %r failed", listener)

    def __repr__(self) -> str:
        return (f"LazyTreeController(provider={self.provider!r}, "
                f"roots={len(self._items)}, loading={len(self._loading)}, "
                f"errors={len(self._errors)})")
