"""Database models."""
from app.models.team import Team
from app.models.user import User, UserRole
from app.models.template import SurveyTemplate, QuestionType, TemplateStatus, TemplateCategory
from app.models.response import SurveyResponse, SyncStatus

__all__ = [
    "Team",
    "User",
    "UserRole",
    "SurveyTemplate",
    "QuestionType",
    "TemplateStatus",
    "TemplateCategory",
    "SurveyResponse",
    "SyncStatus",
]
