"""Comment schemas."""

from datetime import datetime

from pydantic import BaseModel, field_validator


class CommentCreate(BaseModel):
    """Request body for posting or editing a comment."""

    comment_text: str

    @field_validator("comment_text")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("comment_text must not be blank")
        return value


class CommentResponse(BaseModel):
    """Comment with its author."""

    id: str
    prompt_id: str
    user_id: str
    comment_text: str
    created_at: datetime
    author_name: str = "Anonymous"
    avatar_url: str | None = None
