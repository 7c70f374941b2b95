"""Durable local storage for the field client.

``KeyValueStore`` keeps one JSON document per key in a data directory and
replaces files atomically on write. A missing or unreadable entry reads back
as the caller's default. ``LocalResponseStore`` builds the response set and
the pending sync queue on top of it.
"""
import copy
import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, List, Optional, Union

from pydantic import ValidationError

from app.client.errors import DuplicateLocalIdError, InvalidSyncTransition, StorageError
from app.client.models import LocalResponse
from app.schemas.response import SyncHistoryEntry, SyncStatus, can_transition

logger = logging.getLogger(__name__)

RESPONSES_KEY = "responses"
PENDING_QUEUE_KEY = "pending_sync_queue"
DEVICE_ID_KEY = "device_id"
LAST_SYNC_KEY = "last_sync_timestamp"
HTTP_CACHE_KEY = "http_cache"


class KeyValueStore:
    """Namespaced JSON documents on disk, one file per key."""

    def __init__(self, directory: Union[str, Path], namespace: str = "survey"):
        self.directory = Path(directory)
        self.namespace = namespace
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.directory / f"{self.namespace}.{key}.json"

    def get(self, key: str, default: Any = None) -> Any:
        path = self._path(key)
        if not path.exists():
            return copy.deepcopy(default)
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning("Unreadable local entry %s, using default: %s", key, exc)
            return copy.deepcopy(default)

    def set(self, key: str, value: Any) -> None:
        fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(value, f, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self._path(key))
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            pass


class LocalResponseStore:
    """Locally captured responses plus the queue of ids awaiting sync."""

    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    # --- Response set -------------------------------------------------------

    def _load(self) -> List[LocalResponse]:
        raw = self.kv.get(RESPONSES_KEY, [])
        if not isinstance(raw, list):
            logger.warning("Local response set is not a list, ignoring it")
            return []

        responses = []
        for entry in raw:
            try:
                responses.append(LocalResponse.model_validate(entry))
            except ValidationError as exc:
                logger.warning("Skipping unreadable local response: %s", exc.errors()[:1])
        return responses

    def _save(self, responses: List[LocalResponse]) -> None:
        self.kv.set(RESPONSES_KEY, [response.model_dump(mode="json") for response in responses])

    def append(self, response: LocalResponse) -> None:
        """
        Persist a response under its local id.

        Appending the identical record again is a no-op.

        Raises:
            DuplicateLocalIdError: If a different response already uses the id
        """
        responses = self._load()
        for existing in responses:
            if existing.id == response.id:
                if existing.model_dump(mode="json") == response.model_dump(mode="json"):
                    return
                raise DuplicateLocalIdError(response.id)

        responses.append(response)
        self._save(responses)

    def list_all(self) -> List[LocalResponse]:
        """Every local response, in the order it was appended."""
        return self._load()

    def get(self, local_id: str) -> Optional[LocalResponse]:
        for response in self._load():
            if response.id == local_id:
                return response
        return None

    def clear(self, confirm: bool = False) -> None:
        """
        Delete every local response and the pending queue. Irrecoverable.

        Raises:
            StorageError: If confirm is not True
        """
        if confirm is not True:
            raise StorageError("Refusing to clear local responses without confirm=True")
        self.kv.delete(RESPONSES_KEY)
        self.kv.delete(PENDING_QUEUE_KEY)
        logger.warning("Local responses and pending queue cleared")

    def record_outcome(self, local_id: str, new_status: SyncStatus, message: str,
                       server_id: Optional[int] = None) -> LocalResponse:
        """
        Move a response forward to ``new_status`` and append the history entry.

        Raises:
            StorageError: If no response has the id
            InvalidSyncTransition: If the move is not pending -> synced/failed
        """
        responses = self._load()
        for response in responses:
            if response.id != local_id:
                continue
            if not can_transition(response.sync_status, new_status):
                raise InvalidSyncTransition(local_id, response.sync_status, new_status)

            response.sync_status = new_status
            response.sync_history.append(SyncHistoryEntry(
                timestamp=datetime.now(timezone.utc),
                status=new_status,
                message=message,
            ))
            if server_id is not None:
                response.server_id = server_id
            self._save(responses)
            return response

        raise StorageError(f"Unknown local response: {local_id}")

    # --- Pending queue ------------------------------------------------------

    def _queue_ids(self) -> List[str]:
        raw = self.kv.get(PENDING_QUEUE_KEY, [])
        if not isinstance(raw, list):
            return []
        return [item for item in raw if isinstance(item, str)]

    def enqueue(self, local_id: str) -> None:
        queue = self._queue_ids()
        if local_id not in queue:
            queue.append(local_id)
            self.kv.set(PENDING_QUEUE_KEY, queue)

    def pending(self) -> List[LocalResponse]:
        """Queued responses in queue order. Ids with no stored response are skipped."""
        by_id = {response.id: response for response in self._load()}
        return [by_id[local_id] for local_id in self._queue_ids() if local_id in by_id]

    def pending_count(self) -> int:
        return len(self.pending())

    def clear_queue(self, local_ids: Optional[Iterable[str]] = None) -> None:
        """Drop the given ids from the queue, or the whole queue when none are given."""
        if local_ids is None:
            self.kv.delete(PENDING_QUEUE_KEY)
            return
        drop = set(local_ids)
        self.kv.set(PENDING_QUEUE_KEY, [item for item in self._queue_ids() if item not in drop])

    # --- Sync bookkeeping ---------------------------------------------------

    @property
    def last_sync_timestamp(self) -> Optional[datetime]:
        raw = self.kv.get(LAST_SYNC_KEY)
        if not isinstance(raw, str):
            return None
        try:
            return datetime.fromisoformat(raw)
        except ValueError:
            return None

    @last_sync_timestamp.setter
    def last_sync_timestamp(self, value: datetime) -> None:
        self.kv.set(LAST_SYNC_KEY, value.isoformat())
