"""Prompt listing queries and row shaping.

Listings embed the author profile and the like/comment aggregates in a single
PostgREST select; these helpers flatten those embedded objects into the flat
fields the API returns.
"""

from __future__ import annotations

import logging
from typing import Any, cast

from supabase import Client

logger = logging.getLogger(__name__)

PROMPT_LIST_COLUMNS = (
    "id, user_id, title, description, prompt_text, category, created_at, "
    "profiles!prompts_user_id_fkey (username, display_name, avatar_url), "
    "likes (count), comments (count)"
)

PROMPT_DETAIL_COLUMNS = (
    "id, user_id, title, description, prompt_text, model, preview_output_url, "
    "category, created_at, "
    "profiles!prompts_user_id_fkey (username, display_name, avatar_url), "
    "likes (count), comments (count)"
)


def display_name(profile: dict[str, Any] | None) -> str:
    """Resolve the name shown for a profile."""
    if not profile:
        return "Anonymous"
    return profile.get("display_name") or profile.get("username") or "Anonymous"


def _embedded_count(value: Any) -> int:
    """Read ``[{"count": n}]`` as returned for an embedded ``(count)`` select."""
    if isinstance(value, list) and value:
        return int(value[0].get("count") or 0)
    if isinstance(value, dict):
        return int(value.get("count") or 0)
    return 0


def flatten_prompt_row(row: dict[str, Any]) -> dict[str, Any]:
    """Replace embedded profile and aggregate objects with flat fields."""
    flat = {
        k: v for k, v in row.items() if k not in ("profiles", "likes", "comments")
    }
    profile = cast(dict[str, Any] | None, row.get("profiles"))
    flat["author_name"] = display_name(profile)
    flat["author_username"] = profile.get("username") if profile else None
    flat["avatar_url"] = profile.get("avatar_url") if profile else None
    flat["like_count"] = _embedded_count(row.get("likes"))
    flat["comment_count"] = _embedded_count(row.get("comments"))
    flat.setdefault("is_liked", False)
    return flat


def sort_by_popularity(prompts: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Order by like count, most liked first. Ties keep their input order."""
    return sorted(prompts, key=lambda p: p["like_count"], reverse=True)


def attach_like_flags(
    client: Client, prompts: list[dict[str, Any]], user_id: str | None
) -> list[dict[str, Any]]:
    """Set ``is_liked`` on each prompt for the given viewer.

    Args:
        client: Supabase client instance.
        prompts: Flattened prompt rows.
        user_id: Viewer, or None for anonymous viewers.

    Returns:
        The same prompts with ``is_liked`` set.
    """
    if not prompts or user_id is None:
        return prompts

    prompt_ids = [p["id"] for p in prompts]
    result = (
        client.table("likes")
        .select("prompt_id")
        .eq("user_id", user_id)
        .in_("prompt_id", prompt_ids)
        .execute()
    )
    liked_ids = {row["prompt_id"] for row in cast(list[dict[str, Any]], result.data)}

    for prompt in prompts:
        prompt["is_liked"] = prompt["id"] in liked_ids
    return prompts


def list_prompts(
    client: Client,
    *,
    category: str | None = None,
    sort: str = "recent",
    user_id: str | None = None,
    viewer_id: str | None = None,
) -> list[dict[str, Any]]:
    """Fetch prompts with author and aggregate counts.

    Args:
        client: Supabase client instance.
        category: Only prompts in this category, or all when None.
        sort: ``recent`` (newest first) or ``popular`` (most liked first).
        user_id: Only prompts posted by this user.
        viewer_id: Viewer for the ``is_liked`` flags.

    Returns:
        Flattened prompt rows.
    """
    query = client.table("prompts").select(PROMPT_LIST_COLUMNS)
    if category is not None:
        query = query.eq("category", category)
    if user_id is not None:
        query = query.eq("user_id", user_id)
    query = query.order("created_at", desc=True)

    result = query.execute()
    prompts = [
        flatten_prompt_row(row) for row in cast(list[dict[str, Any]], result.data)
    ]
    if sort == "popular":
        prompts = sort_by_popularity(prompts)

    logger.debug(
        "Listed %d prompt(s) (category=%s, sort=%s)", len(prompts), category, sort
    )
    return attach_like_flags(client, prompts, viewer_id)


def count_by_category(
    client: Client, categories: list[str], fallback: str = "Misc"
) -> dict[str, int]:
    """Count prompts per category. Uncategorized prompts count as ``fallback``.

    Every configured category appears in the result, with 0 if unused.
    """
    result = client.table("prompts").select("category").execute()
    counts = {name: 0 for name in categories}
    for row in cast(list[dict[str, Any]], result.data):
        name = row.get("category") or fallback
        counts[name] = counts.get(name, 0) + 1
    return counts
