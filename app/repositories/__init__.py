"""Repository layer for data access."""
from app.repositories.user_repository import UserRepository
from app.repositories.template_repository import TemplateRepository
from app.repositories.response_repository import ResponseRepository, ResponseFilter

__all__ = [
    "UserRepository",
    "TemplateRepository",
    "ResponseRepository",
    "ResponseFilter",
]
