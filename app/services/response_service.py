"""Survey response service."""
import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.analytics.aggregation import DashboardKeys, aggregate
from app.models.response import SurveyResponse
from app.models.template import TemplateStatus
from app.models.user import User
from app.repositories.response_repository import ResponseFilter, ResponseRepository
from app.repositories.template_repository import TemplateRepository
from app.schemas.analytics import DashboardSummary, ResponseSnapshot
from app.schemas.response import (
    Pagination,
    ResponseListSummary,
    SurveyResponseCreate,
    SurveyResponseDetail,
    SurveyResponseList,
)
from app.services.sync_service import ALREADY_SYNCED, build_response

logger = logging.getLogger(__name__)


def to_snapshot(response: SurveyResponse) -> ResponseSnapshot:
    """Read-only aggregation view of a stored response."""
    return ResponseSnapshot.model_validate({
        "answers": response.answers or {},
        "top_ranked": response.top_ranked or [],
        "device_id": response.device_id,
        "completion_time_seconds": response.completion_time_seconds,
        "collected_on": response.created_at.date() if response.created_at else None,
    })


class ResponseService:
    """Survey response business logic."""

    def __init__(self, db: Session):
        self.db = db
        self.response_repo = ResponseRepository(db)
        self.template_repo = TemplateRepository(db)

    def submit_response(self, data: SurveyResponseCreate, current_user: User,
                        request_metadata: Optional[Dict[str, Any]] = None) -> SurveyResponse:
        """
        Store a single response submitted while online.

        Raises:
            HTTPException: If the template is not active in the caller's team,
                or the response was already stored
        """
        template = self.template_repo.get_for_team(data.template_id, current_user.team_id)
        if not template or template.status != TemplateStatus.ACTIVE:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Survey template not found or not active"
            )

        conflict = HTTPException(status_code=status.HTTP_409_CONFLICT, detail=ALREADY_SYNCED)
        if self.response_repo.get_by_natural_key(data.device_info.device_id, data.analytics.start_time):
            raise conflict

        response = build_response(data, current_user, request_metadata, "Submitted online")
        try:
            return self.response_repo.add(response)
        except IntegrityError:
            self.db.rollback()
            raise conflict

    def get_response(self, response_id: int, team_id: int) -> SurveyResponse:
        """
        Get response by ID within a team.

        Raises:
            HTTPException: If response not found
        """
        response = self.response_repo.get_for_team(response_id, team_id)
        if not response:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Survey response not found"
            )
        return response

    def get_responses(self, filters: ResponseFilter, page: int = 1, limit: int = 10) -> SurveyResponseList:
        """Page of responses plus a summary over every matching response."""
        responses, total = self.response_repo.list(filters, skip=(page - 1) * limit, limit=limit)
        count, avg_completion, devices = self.response_repo.summary(filters)

        return SurveyResponseList(
            responses=[SurveyResponseDetail.model_validate(response) for response in responses],
            analytics=ResponseListSummary(
                total_responses=count,
                avg_completion_time=round(avg_completion or 0.0, 1),
                unique_devices=devices,
            ),
            pagination=Pagination(
                page=page,
                limit=limit,
                total=total,
                pages=(total + limit - 1) // limit,
            ),
        )

    def get_dashboard(self, filters: ResponseFilter, keys: DashboardKeys = DashboardKeys()) -> DashboardSummary:
        """Aggregate every matching response, oldest first."""
        responses = self.response_repo.all_in_order(filters)
        return aggregate((to_snapshot(response) for response in responses), keys)
