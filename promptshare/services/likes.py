"""Like relation store.

Defines the ``LikeStore`` interface the like toggle controller mutates through,
and its Supabase-backed implementation used by the HTTP API.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol, cast

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from promptshare.errors import RemoteWriteFailure

logger = logging.getLogger(__name__)

LIKES_TABLE = "likes"


class LikeStore(Protocol):
    """Insert/delete/select over the ``likes`` relation."""

    async def insert_like(self, prompt_id: str, user_id: str) -> None: ...

    async def delete_like(self, prompt_id: str, user_id: str) -> None: ...

    async def has_liked(self, prompt_id: str, user_id: str) -> bool: ...

    async def count_likes(self, prompt_id: str) -> int: ...


class SupabaseLikeStore:
    """``LikeStore`` backed directly by the Supabase ``likes`` table."""

    def __init__(self, client: Client) -> None:
        self._client = client

    async def insert_like(self, prompt_id: str, user_id: str) -> None:
        """Insert a like row.

        Raises:
            RemoteWriteFailure: The insert was rejected, e.g. the
                ``(prompt_id, user_id)`` uniqueness constraint fired.
        """
        try:
            self._client.table(LIKES_TABLE).insert(
                {"prompt_id": prompt_id, "user_id": user_id}
            ).execute()
        except APIError as exc:
            logger.warning(
                "Like insert rejected: prompt=%s user=%s code=%s",
                prompt_id,
                user_id,
                exc.code,
            )
            raise RemoteWriteFailure(exc.message or "", exc.code) from exc
        except httpx.HTTPError as exc:
            logger.warning("Like insert failed: %s", exc)
            raise RemoteWriteFailure(str(exc)) from exc
        logger.info("Prompt %s liked by %s", prompt_id, user_id)

    async def delete_like(self, prompt_id: str, user_id: str) -> None:
        """Delete the like row for exactly this ``(prompt_id, user_id)`` pair."""
        try:
            (
                self._client.table(LIKES_TABLE)
                .delete()
                .eq("prompt_id", prompt_id)
                .eq("user_id", user_id)
                .execute()
            )
        except APIError as exc:
            logger.warning(
                "Like delete rejected: prompt=%s user=%s code=%s",
                prompt_id,
                user_id,
                exc.code,
            )
            raise RemoteWriteFailure(exc.message or "", exc.code) from exc
        except httpx.HTTPError as exc:
            logger.warning("Like delete failed: %s", exc)
            raise RemoteWriteFailure(str(exc)) from exc
        logger.info("Prompt %s unliked by %s", prompt_id, user_id)

    async def has_liked(self, prompt_id: str, user_id: str) -> bool:
        result = (
            self._client.table(LIKES_TABLE)
            .select("id")
            .eq("prompt_id", prompt_id)
            .eq("user_id", user_id)
            .execute()
        )
        rows = cast(list[dict[str, Any]], result.data)
        return bool(rows)

    async def count_likes(self, prompt_id: str) -> int:
        result = (
            self._client.table(LIKES_TABLE)
            .select("id", count="exact")  # type: ignore[arg-type]
            .eq("prompt_id", prompt_id)
            .execute()
        )
        if result.count is not None:
            return int(result.count)
        return len(cast(list[dict[str, Any]], result.data))
