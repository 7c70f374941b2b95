"""Survey template service."""
from typing import List, Optional, Tuple
from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.models.template import SurveyTemplate, TemplateStatus, TemplateCategory
from app.models.user import User
from app.repositories.template_repository import TemplateRepository
from app.repositories.response_repository import ResponseRepository
from app.schemas.template import TemplateCreate, TemplateUpdate


def _column_values(data, **dump_kwargs) -> dict:
    """JSON-safe column values; enum columns keep their enum members."""
    fields = data.model_dump(mode="json", **dump_kwargs)
    for name in ("status", "category"):
        if name in fields:
            fields[name] = getattr(data, name)
    return fields


class TemplateService:
    """Survey template business logic. Every operation is scoped to the caller's team."""

    def __init__(self, db: Session):
        self.db = db
        self.template_repo = TemplateRepository(db)
        self.response_repo = ResponseRepository(db)

    def get_template(self, template_id: int, team_id: int) -> SurveyTemplate:
        """
        Get template by ID within a team.

        Raises:
            HTTPException: If template not found
        """
        template = self.template_repo.get_for_team(template_id, team_id)

        if not template:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Survey template not found"
            )

        return template

    def get_templates(self, team_id: int, page: int = 1, limit: int = 10,
                      status_filter: Optional[TemplateStatus] = None,
                      category: Optional[TemplateCategory] = None,
                      search: Optional[str] = None) -> Tuple[List[SurveyTemplate], int]:
        return self.template_repo.list_for_team(
            team_id, skip=(page - 1) * limit, limit=limit,
            status=status_filter, category=category, search=search,
        )

    def create_template(self, data: TemplateCreate, current_user: User) -> SurveyTemplate:
        return self.template_repo.create(
            **_column_values(data),
            team_id=current_user.team_id,
            created_by_id=current_user.id,
        )

    def update_template(self, template_id: int, data: TemplateUpdate, team_id: int) -> SurveyTemplate:
        template = self.get_template(template_id, team_id)
        return self.template_repo.update(template, **_column_values(data, exclude_unset=True))

    def delete_template(self, template_id: int, team_id: int) -> None:
        """
        Delete a template that has never been answered.

        Raises:
            HTTPException: If template not found or responses reference it
        """
        template = self.get_template(template_id, team_id)

        if self.response_repo.count_for_template(template.id) > 0:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot delete template with existing responses. Archive it instead."
            )

        self.template_repo.delete(template)

    def duplicate_template(self, template_id: int, current_user: User) -> SurveyTemplate:
        """Copy a template as a new draft owned by the caller."""
        original = self.get_template(template_id, current_user.team_id)
        return self.template_repo.create(
            name=f"{original.name} (Copy)",
            description=original.description,
            version=original.version,
            questions=list(original.questions or []),
            settings=dict(original.settings or {}),
            status=TemplateStatus.DRAFT,
            category=original.category,
            tags=list(original.tags or []),
            team_id=current_user.team_id,
            created_by_id=current_user.id,
        )
