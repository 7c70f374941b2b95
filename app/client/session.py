"""Explicit client session state."""
from dataclasses import dataclass
from typing import Any, Dict, Optional

from app.client.errors import NotAuthenticatedError


@dataclass
class ClientSession:
    """Who is logged in and which template is being collected."""
    base_url: str
    token: Optional[str] = None
    user: Optional[Dict[str, Any]] = None
    template: Optional[Dict[str, Any]] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def require_token(self) -> str:
        if not self.token:
            raise NotAuthenticatedError("Log in before talking to the server")
        return self.token

    def clear(self) -> None:
        self.token = None
        self.user = None
        self.template = None
