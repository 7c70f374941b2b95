"""Pushing the pending queue to the server.

``SyncClient.sync_pending`` sends the queued responses in batches no larger
than the server accepts and applies the server's per-item outcomes to the
local records:

* ``created`` -> synced
* ``duplicate`` -> synced, with an "already synced" history entry
* ``rejected`` -> failed; never re-queued automatically, the record is kept
  for manual follow up

A transport or auth failure leaves the unsent part of the queue exactly as it
was; batches already acknowledged stay applied. Only one sync runs at a
time; a call made while another is in flight is dropped.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from app.client.api_client import SurveyApiClient
from app.client.errors import InvalidSyncTransition
from app.client.models import LocalResponse
from app.client.network import NetworkMonitor
from app.client.session import ClientSession
from app.client.storage import LocalResponseStore
from app.schemas.response import SyncItemOutcome, SyncItemState, SyncResultResponse, SyncStatus

logger = logging.getLogger(__name__)

MISSING_OUTCOME = "Server reported no outcome for this response"


@dataclass
class RejectedResponse:
    local_id: str
    device_id: str
    reason: str


@dataclass
class SyncResult:
    """
    What one ``sync_pending`` call did.

    ``failed`` counts duplicates as well as rejections, matching the
    server's own summary. ``skipped`` is set when another sync was running.
    """
    skipped: bool = False
    submitted: int = 0
    successful: List[str] = field(default_factory=list)
    duplicates: List[str] = field(default_factory=list)
    rejected: List[RejectedResponse] = field(default_factory=list)
    server_ids: Dict[str, int] = field(default_factory=dict)
    message: Optional[str] = None

    @property
    def failed(self) -> List[str]:
        return self.duplicates + [item.local_id for item in self.rejected]

    def merge(self, other: "SyncResult") -> None:
        self.submitted += other.submitted
        self.successful.extend(other.successful)
        self.duplicates.extend(other.duplicates)
        self.rejected.extend(other.rejected)
        self.server_ids.update(other.server_ids)
        self.message = other.message or self.message


class SyncClient:
    """Sends the pending queue and reconciles local records with the server."""

    def __init__(self, store: LocalResponseStore, api: SurveyApiClient,
                 network: NetworkMonitor, session: ClientSession, batch_size: int = 500):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.store = store
        self.api = api
        self.network = network
        self.session = session
        self.batch_size = batch_size
        self._lock = asyncio.Lock()

    @property
    def in_progress(self) -> bool:
        return self._lock.locked()

    async def sync_pending(self) -> SyncResult:
        """
        Sync the pending queue once.

        Raises:
            SyncTransportError: No usable answer from the server; queue unchanged
            SyncAuthError: Session refused; queue unchanged
            NotAuthenticatedError: No session to send with
        """
        if self._lock.locked():
            logger.debug("Sync already in progress, dropping request")
            return SyncResult(skipped=True)

        async with self._lock:
            return await self._sync()

    async def _sync(self) -> SyncResult:
        pending = self.store.pending()
        if not pending or not self.network.is_online:
            return SyncResult()

        token = self.session.require_token()
        logger.info("Syncing %d pending responses in batches of %d", len(pending), self.batch_size)

        result = SyncResult()
        for start in range(0, len(pending), self.batch_size):
            chunk = pending[start:start + self.batch_size]
            server_result = await self.api.sync_batch([response.to_candidate() for response in chunk], token)

            result.merge(self._apply(chunk, server_result))
            self.store.clear_queue([response.id for response in chunk])
            self.store.last_sync_timestamp = datetime.now(timezone.utc)

        logger.info(
            "Sync finished: %d successful, %d failed",
            len(result.successful), len(result.failed),
        )
        return result

    def _apply(self, pending: List[LocalResponse], server_result: SyncResultResponse) -> SyncResult:
        outcomes: Dict[int, SyncItemOutcome] = {item.index: item for item in server_result.items}
        result = SyncResult(submitted=len(pending), message=server_result.message or None)

        for index, response in enumerate(pending):
            outcome = outcomes.get(index)
            if outcome is None:
                self._record(response, SyncStatus.FAILED, MISSING_OUTCOME)
                result.rejected.append(RejectedResponse(response.id, response.device_id, MISSING_OUTCOME))
            elif outcome.status == SyncItemState.CREATED:
                self._record(response, SyncStatus.SYNCED, "Synced to server", outcome.server_id)
                result.successful.append(response.id)
                if outcome.server_id is not None:
                    result.server_ids[response.id] = outcome.server_id
            elif outcome.status == SyncItemState.DUPLICATE:
                self._record(response, SyncStatus.SYNCED, outcome.reason or "Response already synced")
                result.duplicates.append(response.id)
            else:
                reason = outcome.reason or "Rejected by server"
                self._record(response, SyncStatus.FAILED, reason)
                result.rejected.append(RejectedResponse(response.id, response.device_id, reason))
        return result

    def _record(self, response: LocalResponse, status: SyncStatus, message: str,
                server_id: Optional[int] = None) -> None:
        try:
            self.store.record_outcome(response.id, status, message, server_id=server_id)
        except InvalidSyncTransition as exc:
            logger.warning("Keeping existing status: %s", exc)
