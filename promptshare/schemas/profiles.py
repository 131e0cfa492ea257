"""Profile schemas."""

from datetime import datetime

from pydantic import BaseModel


class ProfileResponse(BaseModel):
    """Public user profile."""

    id: str
    username: str | None = None
    display_name: str | None = None
    avatar_url: str | None = None
    created_at: datetime
