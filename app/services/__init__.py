"""Service layer for business logic."""
from app.services.auth_service import AuthService
from app.services.user_service import UserService
from app.services.template_service import TemplateService
from app.services.sync_service import SyncService
from app.services.response_service import ResponseService

__all__ = [
    "AuthService",
    "UserService",
    "TemplateService",
    "SyncService",
    "ResponseService",
]
