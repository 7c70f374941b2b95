"""When to sync: reconnects, a fixed interval, and explicit requests."""
import asyncio
import logging
from typing import Optional, Set

from app.client.errors import ClientError
from app.client.network import NetworkMonitor
from app.client.storage import LocalResponseStore
from app.client.sync import SyncClient, SyncResult

logger = logging.getLogger(__name__)


class SyncScheduler:
    """
    Drives ``SyncClient.sync_pending`` from background triggers.

    Background attempts log failures and wait for the next trigger.
    Explicit requests return the result or raise to the caller.
    """

    def __init__(self, sync_client: SyncClient, network: NetworkMonitor,
                 store: LocalResponseStore, interval_seconds: float = 30.0):
        self.sync_client = sync_client
        self.network = network
        self.store = store
        self.interval_seconds = interval_seconds
        self._ticker: Optional[asyncio.Task] = None
        self._background: Set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._ticker is not None and not self._ticker.done()

    def start(self) -> None:
        if self.running:
            return
        self.network.add_listener(self._on_connectivity_change)
        self._ticker = asyncio.create_task(self._tick())

    async def stop(self) -> None:
        self.network.remove_listener(self._on_connectivity_change)
        tasks = list(self._background)
        if self._ticker is not None:
            tasks.append(self._ticker)
            self._ticker = None
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    async def request_sync(self) -> SyncResult:
        """Explicit user request."""
        return await self.sync_client.sync_pending()

    async def _tick(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                if self.network.is_online and self.store.pending_count():
                    await self._attempt("interval")
            except Exception:
                logger.exception("Interval sync failed unexpectedly, will retry")

    def _on_connectivity_change(self, online: bool) -> None:
        if not online:
            return
        task = asyncio.create_task(self._attempt("online"))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _attempt(self, trigger: str) -> Optional[SyncResult]:
        try:
            result = await self.sync_client.sync_pending()
        except ClientError as exc:
            logger.warning("Background sync (%s) failed, will retry: %s", trigger, exc)
            return None
        except Exception:
            logger.exception("Background sync (%s) failed unexpectedly", trigger)
            return None
        if result.skipped:
            logger.debug("Background sync (%s) skipped, another sync is running", trigger)
        return result
