"""Like route handlers."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from promptshare.auth import get_current_user_id, get_optional_user_id
from promptshare.errors import RemoteWriteFailure
from promptshare.routers.prompts import assert_prompt_exists
from promptshare.schemas.likes import LikeStateResponse
from promptshare.services.likes import SupabaseLikeStore
from promptshare.supabase_client import get_supabase_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/prompts", tags=["likes"])


def _write_failure_to_http(exc: RemoteWriteFailure) -> HTTPException:
    if exc.is_duplicate:
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Prompt already liked",
        )
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=exc.message or "Failed to update like",
    )


@router.get("/{prompt_id}/like", response_model=LikeStateResponse)
async def get_like_state(
    prompt_id: str,
    viewer_id: str | None = Depends(get_optional_user_id),
) -> dict[str, Any]:
    """Return whether the viewer likes the prompt and its like count."""
    store = SupabaseLikeStore(get_supabase_client())
    is_liked = viewer_id is not None and await store.has_liked(prompt_id, viewer_id)
    return {
        "prompt_id": prompt_id,
        "is_liked": is_liked,
        "like_count": await store.count_likes(prompt_id),
    }


@router.post("/{prompt_id}/like", response_model=LikeStateResponse)
async def like_prompt(
    prompt_id: str,
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    """Like a prompt as the caller.

    Raises:
        HTTPException: 404 if prompt not found, 409 if already liked,
            502 if the store rejected the insert for another reason.
    """
    client = get_supabase_client()
    assert_prompt_exists(client, prompt_id)
    store = SupabaseLikeStore(client)

    try:
        await store.insert_like(prompt_id, user_id)
    except RemoteWriteFailure as exc:
        raise _write_failure_to_http(exc) from exc

    return {
        "prompt_id": prompt_id,
        "is_liked": True,
        "like_count": await store.count_likes(prompt_id),
    }


@router.delete("/{prompt_id}/like", response_model=LikeStateResponse)
async def unlike_prompt(
    prompt_id: str,
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    """Remove the caller's like from a prompt.

    Unliking a prompt the caller never liked is not an error.

    Raises:
        HTTPException: 502 if the store rejected the delete.
    """
    store = SupabaseLikeStore(get_supabase_client())

    try:
        await store.delete_like(prompt_id, user_id)
    except RemoteWriteFailure as exc:
        raise _write_failure_to_http(exc) from exc

    return {
        "prompt_id": prompt_id,
        "is_liked": False,
        "like_count": await store.count_likes(prompt_id),
    }
