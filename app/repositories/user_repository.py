"""User and team data access."""
from typing import List, Optional
from sqlalchemy.orm import Session

from app.models.team import Team
from app.models.user import User, UserRole


class UserRepository:
    """Data access for users and their teams."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email.lower()).first()

    def exists_by_email(self, email: str) -> bool:
        return self.get_by_email(email) is not None

    def get_team_members(self, team_id: int, skip: int = 0, limit: int = 100,
                         role: Optional[UserRole] = None) -> List[User]:
        query = self.db.query(User).filter(User.team_id == team_id)
        if role:
            query = query.filter(User.role == role)
        return query.order_by(User.id).offset(skip).limit(limit).all()

    def count_team_members(self, team_id: int) -> int:
        return self.db.query(User).filter(User.team_id == team_id, User.is_active.is_(True)).count()

    def create_team(self, name: str, description: Optional[str] = None) -> Team:
        team = Team(name=name, description=description)
        self.db.add(team)
        self.db.flush()
        return team

    def get_team(self, team_id: int) -> Optional[Team]:
        return self.db.query(Team).filter(Team.id == team_id).first()

    def create(self, **fields) -> User:
        fields["email"] = fields["email"].lower()
        user = User(**fields)
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user
