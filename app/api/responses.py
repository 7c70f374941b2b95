"""Survey response router: online submit, offline sync, listing and analytics."""
from datetime import datetime
from typing import Annotated, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.analytics.aggregation import DashboardKeys
from app.repositories.response_repository import ResponseFilter
from app.services.response_service import ResponseService
from app.services.sync_service import SyncService
from app.schemas.analytics import DashboardSummary
from app.schemas.response import (
    SurveyResponseCreate,
    SurveyResponseDetail,
    SurveyResponseList,
    SyncBatchRequest,
    SyncResultResponse,
    SyncStatus,
)
from app.api.dependencies import AnyUser, Collector, RequestMetadata

router = APIRouter(prefix="/survey-responses", tags=["Survey Responses"])


@router.post("", response_model=SurveyResponseDetail, status_code=201)
def submit_response(
    data: SurveyResponseCreate,
    db: Annotated[Session, Depends(get_db)],
    current_user: Collector,
    metadata: RequestMetadata
):
    """
    Submit a single response while online.

    The template must be active. Resubmitting a response with the same
    device and start time returns 409.
    """
    return ResponseService(db).submit_response(data, current_user, metadata)


@router.post("/sync", response_model=SyncResultResponse)
def sync_responses(
    batch: SyncBatchRequest,
    db: Annotated[Session, Depends(get_db)],
    current_user: Collector,
    metadata: RequestMetadata
):
    """
    Reconcile a batch of responses collected offline.

    Each item is reported as created, duplicate or rejected. Already-known
    responses are never stored twice, so a batch can be resent safely.
    """
    return SyncService(db).reconcile(batch.responses, current_user, metadata)


@router.get("", response_model=SurveyResponseList)
def list_responses(
    db: Annotated[Session, Depends(get_db)],
    current_user: AnyUser,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    template_id: Optional[int] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    sync_status: Optional[SyncStatus] = None
):
    """
    List the team's responses, newest first, with a summary of all matches.
    """
    filters = ResponseFilter(
        current_user.team_id, template_id=template_id,
        start_date=start_date, end_date=end_date, sync_status=sync_status,
    )
    return ResponseService(db).get_responses(filters, page=page, limit=limit)


@router.get("/analytics", response_model=DashboardSummary)
def get_analytics(
    db: Annotated[Session, Depends(get_db)],
    current_user: AnyUser,
    template_id: Optional[int] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    sync_status: Optional[SyncStatus] = None,
    satisfaction_key: str = "satisfaction",
    adoption_key: str = "adoption_likelihood",
    payment_key: str = "willingness_to_pay",
    early_adopter_key: str = "interested_in_trying"
):
    """
    Dashboard statistics over the team's responses.

    Question keys default to the standard discovery template and can be
    overridden for templates that name their questions differently.
    """
    filters = ResponseFilter(
        current_user.team_id, template_id=template_id,
        start_date=start_date, end_date=end_date, sync_status=sync_status,
    )
    keys = DashboardKeys(
        satisfaction=satisfaction_key,
        adoption_likelihood=adoption_key,
        willingness_to_pay=payment_key,
        early_adopter=early_adopter_key,
    )
    return ResponseService(db).get_dashboard(filters, keys)


@router.get("/{response_id}", response_model=SurveyResponseDetail)
def get_response(
    response_id: int,
    db: Annotated[Session, Depends(get_db)],
    current_user: AnyUser
):
    return ResponseService(db).get_response(response_id, current_user.team_id)
