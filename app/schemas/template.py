"""Survey template schemas."""
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, List, Optional
from datetime import datetime

from app.models.template import QuestionType, TemplateStatus, TemplateCategory


class QuestionOption(BaseModel):
    text: str
    value: Any = None


class QuestionValidation(BaseModel):
    min: Optional[float] = None
    max: Optional[float] = None
    pattern: Optional[str] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None


class QuestionSchema(BaseModel):
    """A template question. ``key`` is the answers-map key used by responses."""
    key: str = Field(..., min_length=1, max_length=100)
    type: QuestionType
    question_text: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = Field(None, max_length=1000)
    options: List[QuestionOption] = []
    required: bool = False
    validation: Optional[QuestionValidation] = None
    order: int


class TemplateSettings(BaseModel):
    allow_anonymous: bool = False
    multiple_responses: bool = False
    expiration_date: Optional[datetime] = None
    require_location: bool = False


class TemplateCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    version: str = "1.0.0"
    questions: List[QuestionSchema] = Field(..., min_length=1)
    settings: TemplateSettings = TemplateSettings()
    status: TemplateStatus = TemplateStatus.DRAFT
    category: TemplateCategory = TemplateCategory.STUDENT
    tags: List[str] = []


class TemplateUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    version: Optional[str] = None
    questions: Optional[List[QuestionSchema]] = Field(None, min_length=1)
    settings: Optional[TemplateSettings] = None
    status: Optional[TemplateStatus] = None
    category: Optional[TemplateCategory] = None
    tags: Optional[List[str]] = None


class TemplateResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    version: str
    questions: List[QuestionSchema]
    settings: TemplateSettings
    status: TemplateStatus
    category: TemplateCategory
    tags: List[str]
    team_id: int
    created_by_id: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
