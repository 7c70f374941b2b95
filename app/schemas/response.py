"""Survey response schemas.

Answers are a tagged union keyed by question type so that template-driven
answer shapes stay flexible while each value is still validated.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class SyncStatus(str, Enum):
    """Synchronization status of a response. Transitions only move forward."""
    PENDING = "pending"
    SYNCED = "synced"
    FAILED = "failed"


ALLOWED_TRANSITIONS = {
    SyncStatus.PENDING: frozenset({SyncStatus.SYNCED, SyncStatus.FAILED}),
    SyncStatus.SYNCED: frozenset(),
    SyncStatus.FAILED: frozenset(),
}


def can_transition(current: SyncStatus, new: SyncStatus) -> bool:
    return SyncStatus(new) in ALLOWED_TRANSITIONS[SyncStatus(current)]


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize a datetime to UTC; naive values are taken as UTC already."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# --- Answers -----------------------------------------------------------------

class TextAnswer(BaseModel):
    type: Literal["text"] = "text"
    value: str


class OpenEndedAnswer(BaseModel):
    type: Literal["open-ended"] = "open-ended"
    value: str


class RatingAnswer(BaseModel):
    """Single 1-5 rating; 0 means the question was left unrated."""
    type: Literal["rating"] = "rating"
    value: int = Field(..., ge=0, le=5)


class MultipleChoiceAnswer(BaseModel):
    type: Literal["multiple-choice"] = "multiple-choice"
    value: Union[str, List[str]]


class RankingAnswer(BaseModel):
    """Per-category ratings, kept in the order the respondent rated them."""
    type: Literal["ranking"] = "ranking"
    ratings: Dict[str, Annotated[int, Field(ge=0, le=5)]]


Answer = Annotated[
    Union[TextAnswer, OpenEndedAnswer, RatingAnswer, MultipleChoiceAnswer, RankingAnswer],
    Field(discriminator="type"),
]


# --- Nested documents --------------------------------------------------------

class TopRankedItem(BaseModel):
    category: str
    rating: int


class ResponseAnalytics(BaseModel):
    """Client-measured timing. completion_time_seconds is authoritative."""
    start_time: datetime
    end_time: Optional[datetime] = None
    completion_time_seconds: Optional[float] = Field(None, ge=0)
    sections_completed: List[str] = []

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_timezone(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_utc(value)


class DeviceInfo(BaseModel):
    device_id: str = Field(..., min_length=1, max_length=64)
    platform: Optional[str] = None
    user_agent: Optional[str] = None
    app_version: Optional[str] = None


class Location(BaseModel):
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    accuracy: Optional[float] = None
    address: Optional[str] = None


class ContactInfo(BaseModel):
    email: Optional[EmailStr] = None
    phone: Optional[str] = None


class SyncHistoryEntry(BaseModel):
    timestamp: datetime
    status: SyncStatus
    message: str


# --- Requests ----------------------------------------------------------------

class SurveyResponseCreate(BaseModel):
    """
    A response candidate as sent by a field device.

    Ownership fields are deliberately absent: team and collector always come
    from the authenticated session. Unknown keys are ignored.
    """
    template_id: int
    client_id: Optional[str] = Field(None, max_length=64)
    device_info: DeviceInfo
    answers: Dict[str, Answer]
    top_ranked: List[TopRankedItem] = Field(default_factory=list, max_length=3)
    analytics: ResponseAnalytics
    location: Optional[Location] = None
    contact_info: Optional[ContactInfo] = None

    model_config = ConfigDict(extra="ignore")


class SyncBatchRequest(BaseModel):
    """
    Offline sync batch. Items stay raw so that one malformed candidate is
    rejected on its own instead of failing the whole request.
    """
    responses: List[Any]


# --- Results -----------------------------------------------------------------

class SyncItemState(str, Enum):
    CREATED = "created"
    DUPLICATE = "duplicate"
    REJECTED = "rejected"


class SyncItemOutcome(BaseModel):
    index: int
    client_id: Optional[str] = None
    device_id: Optional[str] = None
    status: SyncItemState
    server_id: Optional[int] = None
    reason: Optional[str] = None


class SyncFailure(BaseModel):
    device_id: Optional[str] = None
    client_id: Optional[str] = None
    reason: str


class SyncResultResponse(BaseModel):
    """Per-item reconciliation result, in submission order."""
    successful_ids: List[int] = []
    failed: List[SyncFailure] = []
    items: List[SyncItemOutcome] = []
    message: str = ""


class SurveyResponseDetail(BaseModel):
    id: int
    template_id: int
    team_id: int
    collected_by_id: Optional[int] = None
    client_id: Optional[str] = None
    device_id: str
    start_time: datetime
    end_time: Optional[datetime] = None
    completion_time_seconds: Optional[float] = None
    sections_completed: List[str] = []
    device_info: Optional[Dict[str, Any]] = None
    location: Optional[Dict[str, Any]] = None
    contact_info: Optional[Dict[str, Any]] = None
    request_metadata: Optional[Dict[str, Any]] = None
    answers: Dict[str, Any] = {}
    top_ranked: List[TopRankedItem] = []
    sync_status: SyncStatus
    sync_history: List[SyncHistoryEntry] = []
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ResponseListSummary(BaseModel):
    total_responses: int = 0
    avg_completion_time: float = 0.0
    unique_devices: int = 0


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class SurveyResponseList(BaseModel):
    responses: List[SurveyResponseDetail]
    analytics: ResponseListSummary
    pagination: Pagination
