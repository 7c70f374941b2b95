"""Locally captured survey responses."""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from app.schemas.analytics import ResponseSnapshot
from app.schemas.response import (
    Answer,
    ContactInfo,
    DeviceInfo,
    Location,
    ResponseAnalytics,
    SyncHistoryEntry,
    SyncStatus,
    TopRankedItem,
)


class LocalResponse(BaseModel):
    """
    A response as kept on the device.

    ``id`` is the local id. It is sent to the server as ``client_id`` but the
    server deduplicates on device id and start time, never on this id.
    """
    id: str
    template_id: int
    device_info: DeviceInfo
    answers: Dict[str, Answer]
    top_ranked: List[TopRankedItem] = []
    analytics: ResponseAnalytics
    location: Optional[Location] = None
    contact_info: Optional[ContactInfo] = None
    sync_status: SyncStatus = SyncStatus.PENDING
    sync_history: List[SyncHistoryEntry] = []
    server_id: Optional[int] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def device_id(self) -> str:
        return self.device_info.device_id

    def to_candidate(self) -> Dict[str, Any]:
        """Payload accepted by the single-submit and sync endpoints."""
        payload = self.model_dump(
            mode="json",
            include={"template_id", "device_info", "answers", "top_ranked",
                     "analytics", "location", "contact_info"},
            exclude_none=True,
        )
        payload["client_id"] = self.id
        return payload

    def to_snapshot(self) -> ResponseSnapshot:
        return ResponseSnapshot(
            answers=self.answers,
            top_ranked=self.top_ranked,
            device_id=self.device_id,
            completion_time_seconds=self.analytics.completion_time_seconds,
            collected_on=self.created_at.date(),
        )
