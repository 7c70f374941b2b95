"""Survey template models."""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from enum import Enum

from app.core.database import Base


class QuestionType(str, Enum):
    """Question types a template may contain."""
    TEXT = "text"
    RATING = "rating"
    MULTIPLE_CHOICE = "multiple-choice"
    RANKING = "ranking"
    OPEN_ENDED = "open-ended"


class TemplateStatus(str, Enum):
    """Template lifecycle status."""
    DRAFT = "draft"
    ACTIVE = "active"
    ARCHIVED = "archived"


class TemplateCategory(str, Enum):
    STUDENT = "student"
    CUSTOMER = "customer"
    EMPLOYEE = "employee"
    MARKET = "market"
    OTHER = "other"


class SurveyTemplate(Base):
    """
    Survey template model.
    Questions are stored as an ordered JSON list; responses reference the
    template and block its deletion.
    """

    __tablename__ = "survey_templates"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    version = Column(String(20), nullable=False, default="1.0.0")
    questions = Column(JSON, nullable=False, default=list)
    settings = Column(JSON, nullable=False, default=dict)
    status = Column(SQLEnum(TemplateStatus), nullable=False, default=TemplateStatus.DRAFT, index=True)
    category = Column(SQLEnum(TemplateCategory), nullable=False, default=TemplateCategory.STUDENT, index=True)
    tags = Column(JSON, nullable=False, default=list)

    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    team = relationship("Team", back_populates="templates")
    created_by = relationship("User")
    responses = relationship("SurveyResponse", back_populates="template")

    def __repr__(self):
        return f"<SurveyTemplate(id={self.id}, name={self.name}, status={self.status})>"
