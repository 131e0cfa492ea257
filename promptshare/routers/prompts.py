"""Prompt route handlers."""

import logging
from typing import Any, cast

from fastapi import APIRouter, Depends, HTTPException, Query, status

from promptshare.auth import get_current_user_id, get_optional_user_id
from promptshare.config import get_settings
from promptshare.schemas.prompts import (
    CategoryCounts,
    PromptCreate,
    PromptDetail,
    PromptListItem,
    PromptResponse,
    PromptUpdate,
    SortOption,
)
from promptshare.services.prompts import (
    PROMPT_DETAIL_COLUMNS,
    attach_like_flags,
    count_by_category,
    flatten_prompt_row,
    list_prompts,
)
from promptshare.supabase_client import get_supabase_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/prompts", tags=["prompts"])


def assert_prompt_exists(client: Any, prompt_id: str) -> dict[str, Any]:
    """Verify a prompt exists and return its row.

    Args:
        client: Supabase client instance.
        prompt_id: The prompt ID to look up.

    Returns:
        The prompt row dict.

    Raises:
        HTTPException: 404 if the prompt does not exist.
    """
    result = client.table("prompts").select("id, user_id").eq("id", prompt_id).execute()
    rows = cast(list[dict[str, Any]], result.data)
    if not rows:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Prompt not found",
        )
    return rows[0]


def _validate_category(category: str | None) -> None:
    """Reject categories that are not configured.

    Raises:
        HTTPException: 422 for an unknown category.
    """
    if category is None:
        return
    settings = get_settings()
    if category not in settings.categories:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unknown category: {category}",
        )


@router.get("", response_model=list[PromptListItem])
async def list_all_prompts(
    category: str = Query(default="all"),
    sort: SortOption | None = Query(default=None),
    viewer_id: str | None = Depends(get_optional_user_id),
) -> list[dict[str, Any]]:
    """Return prompts with author, like and comment counts.

    Args:
        category: Category name, or ``all``.
        sort: ``recent`` or ``popular``; defaults to ``prompts.default_sort``.
        viewer_id: Injected by the optional auth dependency.
    """
    if category != "all":
        _validate_category(category)

    client = get_supabase_client()
    return list_prompts(
        client,
        category=None if category == "all" else category,
        sort=sort or get_settings().prompts.default_sort,
        viewer_id=viewer_id,
    )


@router.get("/categories", response_model=CategoryCounts)
async def get_category_counts() -> dict[str, Any]:
    """Return the number of prompts in each category."""
    settings = get_settings()
    client = get_supabase_client()
    counts = count_by_category(
        client, settings.categories, settings.prompts.fallback_category
    )
    return {"counts": counts, "total": sum(counts.values())}


@router.get("/mine", response_model=list[PromptResponse])
async def list_my_prompts(
    user_id: str = Depends(get_current_user_id),
) -> list[dict[str, Any]]:
    """Return the caller's own prompts, newest first."""
    client = get_supabase_client()
    result = (
        client.table("prompts")
        .select("*")
        .eq("user_id", user_id)
        .order("created_at", desc=True)
        .execute()
    )
    return cast(list[dict[str, Any]], result.data)


@router.get("/{prompt_id}", response_model=PromptDetail)
async def get_prompt(
    prompt_id: str,
    viewer_id: str | None = Depends(get_optional_user_id),
) -> dict[str, Any]:
    """Return full prompt detail with counts and the viewer's like flag.

    Raises:
        HTTPException: 404 if prompt not found.
    """
    client = get_supabase_client()
    result = (
        client.table("prompts").select(PROMPT_DETAIL_COLUMNS).eq("id", prompt_id).execute()
    )
    rows = cast(list[dict[str, Any]], result.data)

    if not rows:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Prompt not found",
        )

    prompt = flatten_prompt_row(rows[0])
    attach_like_flags(client, [prompt], viewer_id)
    return prompt


@router.post("", response_model=PromptResponse, status_code=status.HTTP_201_CREATED)
async def create_prompt(
    body: PromptCreate,
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    """Post a new prompt as the caller."""
    _validate_category(body.category)

    client = get_supabase_client()
    result = (
        client.table("prompts")
        .insert({**body.model_dump(), "user_id": user_id})
        .execute()
    )
    row = cast(dict[str, Any], result.data[0])
    logger.info("User %s created prompt %s", user_id, row["id"])
    return row


@router.patch("/{prompt_id}", response_model=PromptResponse)
async def update_prompt(
    prompt_id: str,
    body: PromptUpdate,
    user_id: str = Depends(get_current_user_id),
) -> dict[str, Any]:
    """Edit one of the caller's prompts.

    Raises:
        HTTPException: 400 if the body changes nothing, 404 if the prompt
            does not exist or belongs to someone else.
    """
    changes = body.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No fields to update",
        )
    _validate_category(changes.get("category"))

    client = get_supabase_client()
    result = (
        client.table("prompts")
        .update(changes)
        .eq("id", prompt_id)
        .eq("user_id", user_id)
        .execute()
    )
    rows = cast(list[dict[str, Any]], result.data)
    if not rows:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Prompt not found",
        )
    return rows[0]


@router.delete("/{prompt_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_prompt(
    prompt_id: str,
    user_id: str = Depends(get_current_user_id),
) -> None:
    """Delete one of the caller's prompts.

    Raises:
        HTTPException: 404 if the prompt does not exist or belongs to
            someone else.
    """
    client = get_supabase_client()

    existing = (
        client.table("prompts")
        .select("id")
        .eq("id", prompt_id)
        .eq("user_id", user_id)
        .execute()
    )
    if not existing.data:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Prompt not found",
        )

    client.table("prompts").delete().eq("id", prompt_id).eq("user_id", user_id).execute()
    logger.info("User %s deleted prompt %s", user_id, prompt_id)
