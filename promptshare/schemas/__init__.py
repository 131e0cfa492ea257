"""Pydantic request/response schemas for all entities."""

from promptshare.schemas.comments import (
    CommentCreate,
    CommentResponse,
)
from promptshare.schemas.likes import (
    LikeStateResponse,
)
from promptshare.schemas.profiles import (
    ProfileResponse,
)
from promptshare.schemas.prompts import (
    CategoryCounts,
    PromptCreate,
    PromptDetail,
    PromptListItem,
    PromptResponse,
    PromptUpdate,
)

__all__ = [
    "CategoryCounts",
    "CommentCreate",
    "CommentResponse",
    "LikeStateResponse",
    "ProfileResponse",
    "PromptCreate",
    "PromptDetail",
    "PromptListItem",
    "PromptResponse",
    "PromptUpdate",
]
