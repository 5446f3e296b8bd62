"""
Identity models - raw identity from the auth backend and its projection.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field

from .base import utc_now


class UserRole(str, Enum):
    OWNER = "owner"
    EDITOR = "editor"
    MEMBER = "member"


class AuthUser(BaseModel):
    """Identity as the auth backend reports it. Metadata is free-form."""
    id: str = Field(min_length=1)
    email: str = ""
    user_metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utc_now)


class User(BaseModel):
    """
    Normalized identity handed to the rest of the app.

    Read-only by convention: only the session manager constructs these.
    """
    id: str
    login: str
    email: str = ""
    avatar_url: str = ""
    is_owner: bool = False
    role: UserRole = UserRole.MEMBER

    @property
    def can_tag_news(self) -> bool:
        """Owners and editors may flag articles for the news feed."""
        return self.role in (UserRole.OWNER, UserRole.EDITOR)

    @property
    def initials(self) -> str:
        return self.login[:2].upper()


class TeamRole(str, Enum):
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class TeamMember(BaseModel):
    """Someone tasks can be assigned to."""
    id: str = Field(min_length=1)
    name: str
    avatar: str = ""
    role: TeamRole = TeamRole.MEMBER


class NewTeamMember(BaseModel):
    name: str = Field(min_length=1)
    avatar: str = ""
    role: TeamRole = TeamRole.MEMBER
    id: Optional[str] = None
