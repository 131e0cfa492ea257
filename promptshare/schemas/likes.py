"""Like schemas."""

from pydantic import BaseModel


class LikeStateResponse(BaseModel):
    """The viewer's like state and the prompt's like count."""

    prompt_id: str
    is_liked: bool
    like_count: int
