"""Prompt schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

SortOption = Literal["recent", "popular"]


class PromptCreate(BaseModel):
    """Request body for posting a new prompt."""

    title: str = Field(min_length=1)
    description: str | None = None
    prompt_text: str = Field(min_length=1)
    model: str | None = None
    preview_output_url: str | None = None
    category: str | None = None


class PromptUpdate(BaseModel):
    """Request body for editing a prompt. Omitted fields are left unchanged."""

    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    prompt_text: str | None = Field(default=None, min_length=1)
    model: str | None = None
    preview_output_url: str | None = None
    category: str | None = None


class PromptResponse(BaseModel):
    """A prompt row as stored."""

    id: str
    user_id: str
    title: str
    description: str | None = None
    prompt_text: str
    model: str | None = None
    preview_output_url: str | None = None
    category: str | None = None
    created_at: datetime


class PromptListItem(BaseModel):
    """Prompt card for listings, with author and aggregate counts."""

    id: str
    user_id: str
    title: str
    description: str | None = None
    prompt_text: str
    category: str | None = None
    created_at: datetime
    author_name: str = "Anonymous"
    avatar_url: str | None = None
    like_count: int = 0
    comment_count: int = 0
    is_liked: bool = False


class PromptDetail(PromptListItem):
    """Full prompt detail page."""

    model: str | None = None
    preview_output_url: str | None = None
    author_username: str | None = None


class CategoryCounts(BaseModel):
    """Number of prompts per category."""

    counts: dict[str, int]
    total: int
