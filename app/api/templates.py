"""Survey template router."""
from typing import Annotated, List, Optional
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.services.template_service import TemplateService
from app.schemas.response import Pagination
from app.schemas.template import TemplateCreate, TemplateUpdate, TemplateResponse
from app.models.template import TemplateStatus, TemplateCategory
from app.api.dependencies import AnyUser, Collector

router = APIRouter(prefix="/survey-templates", tags=["Survey Templates"])


class TemplateListResponse(BaseModel):
    templates: List[TemplateResponse]
    pagination: Pagination


@router.get("", response_model=TemplateListResponse)
def list_templates(
    db: Annotated[Session, Depends(get_db)],
    current_user: AnyUser,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[TemplateStatus] = None,
    category: Optional[TemplateCategory] = None,
    search: Optional[str] = None
):
    """
    List the team's templates, newest first.
    """
    templates, total = TemplateService(db).get_templates(
        current_user.team_id, page=page, limit=limit,
        status_filter=status, category=category, search=search,
    )
    return TemplateListResponse(
        templates=[TemplateResponse.model_validate(template) for template in templates],
        pagination=Pagination(page=page, limit=limit, total=total, pages=(total + limit - 1) // limit),
    )


@router.get("/{template_id}", response_model=TemplateResponse)
def get_template(
    template_id: int,
    db: Annotated[Session, Depends(get_db)],
    current_user: AnyUser
):
    return TemplateService(db).get_template(template_id, current_user.team_id)


@router.post("", response_model=TemplateResponse, status_code=201)
def create_template(
    data: TemplateCreate,
    db: Annotated[Session, Depends(get_db)],
    current_user: Collector
):
    return TemplateService(db).create_template(data, current_user)


@router.put("/{template_id}", response_model=TemplateResponse)
def update_template(
    template_id: int,
    data: TemplateUpdate,
    db: Annotated[Session, Depends(get_db)],
    current_user: Collector
):
    return TemplateService(db).update_template(template_id, data, current_user.team_id)


@router.delete("/{template_id}", status_code=204)
def delete_template(
    template_id: int,
    db: Annotated[Session, Depends(get_db)],
    current_user: Collector
):
    """
    Delete a template. Refused while any response references it.
    """
    TemplateService(db).delete_template(template_id, current_user.team_id)


@router.post("/{template_id}/duplicate", response_model=TemplateResponse, status_code=201)
def duplicate_template(
    template_id: int,
    db: Annotated[Session, Depends(get_db)],
    current_user: Collector
):
    """
    Copy a template as a new draft.
    """
    return TemplateService(db).duplicate_template(template_id, current_user)
