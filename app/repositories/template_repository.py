"""Survey template data access."""
from typing import List, Optional, Tuple
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.models.template import SurveyTemplate, TemplateStatus, TemplateCategory


class TemplateRepository:
    """Data access for survey templates, always scoped to a team."""

    def __init__(self, db: Session):
        self.db = db

    def get_for_team(self, template_id: int, team_id: int) -> Optional[SurveyTemplate]:
        return self.db.query(SurveyTemplate).filter(
            SurveyTemplate.id == template_id,
            SurveyTemplate.team_id == team_id,
        ).first()

    def list_for_team(self, team_id: int, skip: int = 0, limit: int = 10,
                      status: Optional[TemplateStatus] = None,
                      category: Optional[TemplateCategory] = None,
                      search: Optional[str] = None) -> Tuple[List[SurveyTemplate], int]:
        query = self.db.query(SurveyTemplate).filter(SurveyTemplate.team_id == team_id)
        if status:
            query = query.filter(SurveyTemplate.status == status)
        if category:
            query = query.filter(SurveyTemplate.category == category)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                SurveyTemplate.name.ilike(pattern),
                SurveyTemplate.description.ilike(pattern),
            ))

        total = query.count()
        templates = query.order_by(SurveyTemplate.created_at.desc(), SurveyTemplate.id.desc()) \
            .offset(skip).limit(limit).all()
        return templates, total

    def create(self, **fields) -> SurveyTemplate:
        template = SurveyTemplate(**fields)
        self.db.add(template)
        self.db.commit()
        self.db.refresh(template)
        return template

    def update(self, template: SurveyTemplate, **fields) -> SurveyTemplate:
        for key, value in fields.items():
            setattr(template, key, value)
        self.db.commit()
        self.db.refresh(template)
        return template

    def delete(self, template: SurveyTemplate) -> None:
        self.db.delete(template)
        self.db.commit()
