"""Team model."""
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base


def default_team_settings() -> dict:
    return {"allow_member_registration": True, "max_members": 50}


class Team(Base):
    """
    Team model - the ownership boundary for templates and responses.
    Every response belongs to exactly one team, fixed at creation.
    """

    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    # Not a foreign key: the creator is inserted after the team
    created_by = Column(Integer, nullable=True)
    settings = Column(JSON, nullable=False, default=default_team_settings)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    members = relationship("User", back_populates="team", cascade="all, delete-orphan")
    templates = relationship("SurveyTemplate", back_populates="team")

    def __repr__(self):
        return f"<Team(id={self.id}, name={self.name})>"
