"""Offline sync reconciliation.

Each candidate in a batch is handled on its own: validated, matched against
the (device_id, start_time) natural key and, when new, inserted and committed
individually. One bad or duplicate item never aborts its siblings, and the
unique constraint on the natural key settles races between concurrent
batches carrying the same response.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from fastapi import HTTPException, status
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.analytics.ranking import derive_top_ranked
from app.core.config import settings
from app.models.response import SurveyResponse
from app.models.user import User
from app.repositories.response_repository import ResponseRepository
from app.repositories.template_repository import TemplateRepository
from app.schemas.response import (
    SurveyResponseCreate,
    SyncFailure,
    SyncItemOutcome,
    SyncItemState,
    SyncResultResponse,
    SyncStatus,
)

logger = logging.getLogger(__name__)

ALREADY_SYNCED = "Response already synced"
TEMPLATE_NOT_FOUND = "Survey template not found"


def build_response(candidate: SurveyResponseCreate, user: User,
                   request_metadata: Optional[Dict[str, Any]], message: str) -> SurveyResponse:
    """
    Build a new persisted response from a validated candidate.

    Ownership comes from the authenticated user and top_ranked is derived
    here from the answers; neither is taken from the submitted payload.
    """
    now = datetime.now(timezone.utc)
    analytics = candidate.analytics
    return SurveyResponse(
        template_id=candidate.template_id,
        team_id=user.team_id,
        collected_by_id=user.id,
        client_id=candidate.client_id,
        device_id=candidate.device_info.device_id,
        start_time=analytics.start_time,
        end_time=analytics.end_time or now,
        completion_time_seconds=analytics.completion_time_seconds,
        sections_completed=list(analytics.sections_completed),
        device_info=candidate.device_info.model_dump(mode="json"),
        location=candidate.location.model_dump(mode="json") if candidate.location else None,
        contact_info=candidate.contact_info.model_dump(mode="json") if candidate.contact_info else None,
        request_metadata=request_metadata,
        answers={key: answer.model_dump(mode="json") for key, answer in candidate.answers.items()},
        top_ranked=[item.model_dump() for item in derive_top_ranked(candidate.answers)],
        sync_status=SyncStatus.SYNCED,
        sync_history=[{
            "timestamp": now.isoformat(),
            "status": SyncStatus.SYNCED.value,
            "message": message,
        }],
    )


def _identify(raw: Any) -> Tuple[Optional[str], Optional[str]]:
    """Best-effort client_id/device_id of a raw item, for reporting only."""
    if not isinstance(raw, dict):
        return None, None
    client_id = raw.get("client_id")
    device_info = raw.get("device_info")
    device_id = device_info.get("device_id") if isinstance(device_info, dict) else None
    return (
        client_id if isinstance(client_id, str) else None,
        device_id if isinstance(device_id, str) else None,
    )


def _validation_reason(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        parts.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(parts)


class SyncService:
    """Reconciles offline batches against stored responses."""

    def __init__(self, db: Session):
        self.db = db
        self.response_repo = ResponseRepository(db)
        self.template_repo = TemplateRepository(db)

    def reconcile(self, batch: List[Any], current_user: User,
                  request_metadata: Optional[Dict[str, Any]] = None) -> SyncResultResponse:
        """
        Persist the batch items not already known, in submission order.

        Raises:
            HTTPException: If the batch exceeds SYNC_MAX_BATCH_SIZE
        """
        if len(batch) > settings.SYNC_MAX_BATCH_SIZE:
            raise HTTPException(
                status_code=status.HTTP_413_CONTENT_TOO_LARGE,
                detail=f"Batch exceeds {settings.SYNC_MAX_BATCH_SIZE} responses"
            )

        result = SyncResultResponse()
        for index, raw in enumerate(batch):
            outcome = self._reconcile_item(index, raw, current_user, request_metadata)
            result.items.append(outcome)
            if outcome.status == SyncItemState.CREATED:
                result.successful_ids.append(outcome.server_id)
            else:
                result.failed.append(SyncFailure(
                    device_id=outcome.device_id,
                    client_id=outcome.client_id,
                    reason=outcome.reason,
                ))

        result.message = (
            f"Sync completed: {len(result.successful_ids)} successful, {len(result.failed)} failed"
        )
        logger.info(
            "Reconciled batch of %d for team %s: %d created, %d failed",
            len(batch), current_user.team_id, len(result.successful_ids), len(result.failed),
        )
        return result

    def _reconcile_item(self, index: int, raw: Any, current_user: User,
                        request_metadata: Optional[Dict[str, Any]]) -> SyncItemOutcome:
        client_id, device_id = _identify(raw)

        def outcome(state: SyncItemState, reason: Optional[str] = None,
                    server_id: Optional[int] = None) -> SyncItemOutcome:
            return SyncItemOutcome(
                index=index, client_id=client_id, device_id=device_id,
                status=state, server_id=server_id, reason=reason,
            )

        try:
            candidate = SurveyResponseCreate.model_validate(raw)
        except ValidationError as exc:
            return outcome(SyncItemState.REJECTED, _validation_reason(exc))

        device_id = candidate.device_info.device_id
        start_time = candidate.analytics.start_time

        if not self.template_repo.get_for_team(candidate.template_id, current_user.team_id):
            return outcome(SyncItemState.REJECTED, TEMPLATE_NOT_FOUND)

        if self.response_repo.get_by_natural_key(device_id, start_time):
            return outcome(SyncItemState.DUPLICATE, ALREADY_SYNCED)

        response = build_response(candidate, current_user, request_metadata, "Synced from offline device")
        try:
            self.response_repo.add(response)
        except IntegrityError as exc:
            self.db.rollback()
            # Lost a race against another batch carrying the same response
            if self.response_repo.get_by_natural_key(device_id, start_time):
                logger.info("Concurrent duplicate for device %s at %s", device_id, start_time)
                return outcome(SyncItemState.DUPLICATE, ALREADY_SYNCED)
            logger.warning("Could not store response %s: %s", client_id, exc.orig)
            return outcome(SyncItemState.REJECTED, "Response violates a storage constraint")

        return outcome(SyncItemState.CREATED, server_id=response.id)
