"""Survey response data access."""
from datetime import datetime
from typing import List, Optional, Tuple
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.response import SurveyResponse
from app.schemas.response import SyncStatus


class ResponseFilter:
    """Team-scoped response filter shared by listing and analytics."""

    def __init__(self, team_id: int, template_id: Optional[int] = None,
                 start_date: Optional[datetime] = None, end_date: Optional[datetime] = None,
                 sync_status: Optional[SyncStatus] = None):
        self.team_id = team_id
        self.template_id = template_id
        self.start_date = start_date
        self.end_date = end_date
        self.sync_status = sync_status

    def apply(self, query):
        query = query.filter(SurveyResponse.team_id == self.team_id)
        if self.template_id:
            query = query.filter(SurveyResponse.template_id == self.template_id)
        if self.sync_status:
            query = query.filter(SurveyResponse.sync_status == self.sync_status)
        if self.start_date:
            query = query.filter(SurveyResponse.created_at >= self.start_date)
        if self.end_date:
            query = query.filter(SurveyResponse.created_at <= self.end_date)
        return query


class ResponseRepository:
    """Data access for survey responses."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_natural_key(self, device_id: str, start_time: datetime) -> Optional[SurveyResponse]:
        """Look up a response by (device_id, start_time), the deduplication key."""
        return self.db.query(SurveyResponse).filter(
            SurveyResponse.device_id == device_id,
            SurveyResponse.start_time == start_time,
        ).first()

    def get_for_team(self, response_id: int, team_id: int) -> Optional[SurveyResponse]:
        return self.db.query(SurveyResponse).filter(
            SurveyResponse.id == response_id,
            SurveyResponse.team_id == team_id,
        ).first()

    def count_for_template(self, template_id: int) -> int:
        return self.db.query(SurveyResponse).filter(SurveyResponse.template_id == template_id).count()

    def add(self, response: SurveyResponse) -> SurveyResponse:
        """
        Insert and commit a single response.

        Raises:
            IntegrityError: If the natural key already exists
        """
        self.db.add(response)
        self.db.commit()
        self.db.refresh(response)
        return response

    def list(self, filters: ResponseFilter, skip: int = 0, limit: int = 10) -> Tuple[List[SurveyResponse], int]:
        query = filters.apply(self.db.query(SurveyResponse))
        total = query.count()
        responses = query.order_by(SurveyResponse.created_at.desc(), SurveyResponse.id.desc()) \
            .offset(skip).limit(limit).all()
        return responses, total

    def all_in_order(self, filters: ResponseFilter) -> List[SurveyResponse]:
        """All matching responses in creation order, for aggregation."""
        query = filters.apply(self.db.query(SurveyResponse))
        return query.order_by(SurveyResponse.created_at.asc(), SurveyResponse.id.asc()).all()

    def summary(self, filters: ResponseFilter) -> Tuple[int, Optional[float], int]:
        """Total count, average completion time and distinct device count."""
        query = filters.apply(self.db.query(
            func.count(SurveyResponse.id),
            func.avg(SurveyResponse.completion_time_seconds),
            func.count(func.distinct(SurveyResponse.device_id)),
        ))
        total, avg_completion, devices = query.one()
        return total or 0, avg_completion, devices or 0
