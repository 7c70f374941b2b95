"""Survey response models."""
from sqlalchemy import Column, Integer, String, DateTime, Float, ForeignKey, JSON, UniqueConstraint, Index, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base
from app.schemas.response import SyncStatus


class SurveyResponse(Base):
    """
    Survey response model - a completed survey captured in the field.

    The pair (device_id, start_time) is the natural key used to recognise a
    re-submitted response; the unique constraint turns concurrent duplicate
    inserts into an IntegrityError instead of a second row.
    """

    __tablename__ = "survey_responses"

    id = Column(Integer, primary_key=True, index=True)
    template_id = Column(Integer, ForeignKey("survey_templates.id", ondelete="RESTRICT"), nullable=False)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    collected_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    # Offline sync support
    client_id = Column(String(64), nullable=True)  # local id from the field client
    device_id = Column(String(64), nullable=False, index=True)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=True)
    completion_time_seconds = Column(Float, nullable=True)
    sections_completed = Column(JSON, nullable=False, default=list)

    device_info = Column(JSON, nullable=True)  # platform, user_agent, app_version
    location = Column(JSON, nullable=True)  # latitude, longitude, accuracy, address
    contact_info = Column(JSON, nullable=True)
    request_metadata = Column(JSON, nullable=True)  # ip_address, language, timezone

    # Answers keyed by question id, each a tagged answer document
    answers = Column(JSON, nullable=False, default=dict)
    top_ranked = Column(JSON, nullable=False, default=list)

    sync_status = Column(SQLEnum(SyncStatus), nullable=False, default=SyncStatus.SYNCED)
    sync_history = Column(JSON, nullable=False, default=list)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    template = relationship("SurveyTemplate", back_populates="responses")
    collected_by = relationship("User", back_populates="survey_responses")

    __table_args__ = (
        UniqueConstraint("device_id", "start_time", name="uq_survey_responses_natural_key"),
        Index("ix_survey_responses_template_created", "template_id", "created_at"),
        Index("ix_survey_responses_team_status", "team_id", "sync_status"),
    )

    def __repr__(self):
        return f"<SurveyResponse(id={self.id}, device_id={self.device_id}, template_id={self.template_id})>"
