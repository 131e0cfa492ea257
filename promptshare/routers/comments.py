"""Comment route handlers."""

import logging
from typing import Any, cast

from fastapi import APIRouter, Depends, HTTPException, status

from promptshare.auth import get_current_user_id
from promptshare.routers.prompts import assert_prompt_exists
from promptshare.schemas.comments import CommentCreate, CommentResponse
from promptshare.services.prompts import display_name
from promptshare.supabase_client import get_supabase_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["comments"])

_COMMENT_COLUMNS = (
    "id, prompt_id, user_id, comment_text, created_at, "
    "profiles!comments_user_id_fkey (username, display_name, avatar_url)"
)


def _shape_comment(row: dict[str, Any]) -> dict[str, Any]:
    """Flatten the embedded author profile of a comment row."""
    profile = cast(dict[str, Any] | None, row.get("profiles"))
    shaped = {k: v for k, v in row.items() if k != "profiles"}
    shaped["author_name"] = display_name(profile)
    shaped["avatar_url"] = profile.get("avatar_url") if profile else None
    return shaped


def _fetch_comment(client: Any, comment_id: str) -> dict[str, Any]:
    result = client.table("comments").select(_COMMENT_COLUMNS).eq("id", comment_id).execute()
    rows = cast(list[dict[str, Any]], result.data)
    if not rows:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Comment not found",
        )
    return _shape_comment(rows[0])


@router.get("/prompts/{prompt_id}/comments", response_model=list[CommentResponse])
async def list_comments(prompt_id: str) -> list[dict[str, Any]]:
    """Return a prompt's comments, newest first."""
    client = get_supabase_client()
    result = (
        client.table("comments")
        .select(_COMMENT_COLUMNS)
        .eq("prompt_id", prompt_id)
        .order("created_at", desc=True)
        .execute()
    )
    return [_shape_comment(row) for row in cast(list[dict[str, Any]], result.data)]


@router.post(
    "/prompts/{prompt_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    prompt_id: str,
    body: CommentCreate,
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    """Post a comment on a prompt as the caller.

    Raises:
        HTTPException: 404 if prompt not found.
    """
    client = get_supabase_client()
    assert_prompt_exists(client, prompt_id)

    result = (
        client.table("comments")
        .insert(
            {
                "prompt_id": prompt_id,
                "user_id": user_id,
                "comment_text": body.comment_text,
            }
        )
        .execute()
    )
    row = cast(dict[str, Any], result.data[0])
    logger.info("User %s commented on prompt %s", user_id, prompt_id)
    return _fetch_comment(client, row["id"])


@router.patch("/comments/{comment_id}", response_model=CommentResponse)
async def update_comment(
    comment_id: str,
    body: CommentCreate,
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    """Edit one of the caller's comments.

    Raises:
        HTTPException: 404 if the comment does not exist or belongs to
            someone else.
    """
    client = get_supabase_client()
    result = (
        client.table("comments")
        .update({"comment_text": body.comment_text})
        .eq("id", comment_id)
        .eq("user_id", user_id)
        .execute()
    )
    if not result.data:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Comment not found",
        )
    return _fetch_comment(client, comment_id)


@router.delete("/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(
    comment_id: str,
    user_id: str = Depends(get_current_user_id),
) -> None:
    """Delete one of the caller's comments.

    Raises:
        HTTPException: 404 if the comment does not exist or belongs to
            someone else.
    """
    client = get_supabase_client()

    existing = (
        client.table("comments")
        .select("id")
        .eq("id", comment_id)
        .eq("user_id", user_id)
        .execute()
    )
    if not existing.data:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Comment not found",
        )

    client.table("comments").delete().eq("id", comment_id).eq("user_id", user_id).execute()
