"""Read-through caching of server resources.

Each resource class gets a strategy chosen by ``select_strategy(path)``:
API data is fetched network-first and falls back to the cached copy when the
server is unreachable, while everything else is served cache-first. New
resource classes are added with ``register`` without touching dispatch.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, List, Optional, Tuple

from app.client.errors import SyncTransportError
from app.client.storage import HTTP_CACHE_KEY, KeyValueStore

logger = logging.getLogger(__name__)

Fetch = Callable[[str], Awaitable[Any]]
Strategy = Callable[[str, Fetch, "ResponseCache"], Awaitable[Any]]
Predicate = Callable[[str], bool]


class ResponseCache:
    """Cached bodies keyed by request path, kept under the ``http_cache`` key."""

    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    def _entries(self) -> dict:
        entries = self.kv.get(HTTP_CACHE_KEY, {})
        return entries if isinstance(entries, dict) else {}

    def get(self, path: str) -> Optional[Any]:
        entry = self._entries().get(path)
        if not isinstance(entry, dict) or "body" not in entry:
            return None
        return entry["body"]

    def put(self, path: str, body: Any) -> None:
        entries = self._entries()
        entries[path] = {"body": body, "stored_at": datetime.now(timezone.utc).isoformat()}
        self.kv.set(HTTP_CACHE_KEY, entries)


async def cache_first(path: str, fetch: Fetch, cache: ResponseCache) -> Any:
    cached = cache.get(path)
    if cached is not None:
        return cached
    body = await fetch(path)
    cache.put(path, body)
    return body


async def network_first(path: str, fetch: Fetch, cache: ResponseCache) -> Any:
    try:
        body = await fetch(path)
    except SyncTransportError:
        cached = cache.get(path)
        if cached is None:
            raise
        logger.info("Serving %s from cache while offline", path)
        return cached
    cache.put(path, body)
    return body


def is_api_path(path: str) -> bool:
    return path.startswith("/api/")


class StrategyRegistry:
    """Ordered (predicate, strategy) pairs; the first matching predicate wins."""

    def __init__(self, default: Strategy = cache_first):
        self.default = default
        self._entries: List[Tuple[Predicate, Strategy]] = []

    def register(self, predicate: Predicate, strategy: Strategy) -> None:
        self._entries.append((predicate, strategy))

    def select(self, path: str) -> Strategy:
        for predicate, strategy in self._entries:
            if predicate(path):
                return strategy
        return self.default


default_registry = StrategyRegistry()
default_registry.register(is_api_path, network_first)


def select_strategy(path: str) -> Strategy:
    return default_registry.select(path)


class CachingFetcher:
    """Fetches paths through the strategy selected for each one."""

    def __init__(self, fetch: Fetch, cache: ResponseCache,
                 registry: Optional[StrategyRegistry] = None):
        self.fetch = fetch
        self.cache = cache
        self.registry = registry or default_registry

    async def get(self, path: str) -> Any:
        strategy = self.registry.select(path)
        return await strategy(path, self.fetch, self.cache)
