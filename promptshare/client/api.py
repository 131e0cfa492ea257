"""Async HTTP client for the PromptShare API."""

from __future__ import annotations

import logging
from typing import Any, cast

import httpx

from promptshare.config import Settings, get_settings
from promptshare.context import ActorContext
from promptshare.errors import RemoteWriteFailure

logger = logging.getLogger(__name__)


def _error_detail(response: httpx.Response) -> str:
    """Pull the FastAPI ``detail`` message out of an error response."""
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and isinstance(body.get("detail"), str):
        return cast(str, body["detail"])
    return response.text


class PromptShareAPI:
    """Thin wrapper over the PromptShare HTTP API.

    Args:
        actor: Whose bearer token to send, if any.
        settings: Application settings; defaults to the cached singleton.
        transport: Optional httpx transport, e.g. for tests.
    """

    def __init__(
        self,
        actor: ActorContext,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if settings is None:
            settings = get_settings()
        headers: dict[str, str] = {}
        if actor.access_token:
            headers["Authorization"] = f"Bearer {actor.access_token}"
        self.actor = actor
        self._http = httpx.AsyncClient(
            base_url=settings.client.api_base_url,
            headers=headers,
            timeout=settings.client.request_timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> PromptShareAPI:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _get(self, path: str, **params: Any) -> Any:
        response = await self._http.get(path, params=params or None)
        response.raise_for_status()
        return response.json()

    # --- Prompts ---

    async def list_prompts(
        self, *, category: str = "all", sort: str = "recent"
    ) -> list[dict[str, Any]]:
        return cast(
            list[dict[str, Any]],
            await self._get("/api/prompts", category=category, sort=sort),
        )

    async def get_prompt(self, prompt_id: str) -> dict[str, Any]:
        return cast(dict[str, Any], await self._get(f"/api/prompts/{prompt_id}"))

    async def category_counts(self) -> dict[str, Any]:
        return cast(dict[str, Any], await self._get("/api/prompts/categories"))

    async def user_prompts(self, user_id: str) -> list[dict[str, Any]]:
        return cast(
            list[dict[str, Any]], await self._get(f"/api/profiles/{user_id}/prompts")
        )

    # --- Likes ---

    async def like_state(self, prompt_id: str) -> dict[str, Any]:
        return cast(dict[str, Any], await self._get(f"/api/prompts/{prompt_id}/like"))

    async def like(self, prompt_id: str) -> dict[str, Any]:
        return cast(
            dict[str, Any], await self._send("POST", f"/api/prompts/{prompt_id}/like")
        )

    async def unlike(self, prompt_id: str) -> dict[str, Any]:
        return cast(
            dict[str, Any], await self._send("DELETE", f"/api/prompts/{prompt_id}/like")
        )

    # --- My prompts ---

    async def my_prompts(self) -> list[dict[str, Any]]:
        return cast(list[dict[str, Any]], await self._get("/api/prompts/mine"))

    async def create_prompt(self, fields: dict[str, Any]) -> dict[str, Any]:
        return cast(dict[str, Any], await self._send("POST", "/api/prompts", fields))

    async def update_prompt(
        self, prompt_id: str, fields: dict[str, Any]
    ) -> dict[str, Any]:
        return cast(
            dict[str, Any],
            await self._send("PATCH", f"/api/prompts/{prompt_id}", fields),
        )

    async def delete_prompt(self, prompt_id: str) -> None:
        await self._send("DELETE", f"/api/prompts/{prompt_id}")

    # --- Comments ---

    async def list_comments(self, prompt_id: str) -> list[dict[str, Any]]:
        return cast(
            list[dict[str, Any]], await self._get(f"/api/prompts/{prompt_id}/comments")
        )

    async def add_comment(self, prompt_id: str, text: str) -> dict[str, Any]:
        return cast(
            dict[str, Any],
            await self._send(
                "POST", f"/api/prompts/{prompt_id}/comments", {"comment_text": text}
            ),
        )

    async def edit_comment(self, comment_id: str, text: str) -> dict[str, Any]:
        return cast(
            dict[str, Any],
            await self._send(
                "PATCH", f"/api/comments/{comment_id}", {"comment_text": text}
            ),
        )

    async def delete_comment(self, comment_id: str) -> None:
        await self._send("DELETE", f"/api/comments/{comment_id}")

    async def _send(
        self, method: str, path: str, body: dict[str, Any] | None = None
    ) -> Any:
        """Send a write, mapping every failure to ``RemoteWriteFailure``.

        Returns:
            The decoded JSON body, or None for 204 responses.
        """
        try:
            response = await self._http.request(method, path, json=body)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "%s %s returned HTTP %s", method, path, e.response.status_code
            )
            raise RemoteWriteFailure(
                _error_detail(e.response), str(e.response.status_code)
            ) from e
        except httpx.RequestError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise RemoteWriteFailure(str(e)) from e
        if response.status_code == httpx.codes.NO_CONTENT:
            return None
        return response.json()


class HttpLikeStore:
    """``LikeStore`` that goes through the PromptShare HTTP API.

    The API derives the user from the bearer token, so ``user_id`` is only
    checked against the API client's actor.
    """

    def __init__(self, api: PromptShareAPI) -> None:
        self._api = api

    def _check_actor(self, user_id: str) -> None:
        if self._api.actor.user_id != user_id:
            raise RemoteWriteFailure("Cannot change likes for another user", "403")

    async def insert_like(self, prompt_id: str, user_id: str) -> None:
        self._check_actor(user_id)
        await self._api.like(prompt_id)

    async def delete_like(self, prompt_id: str, user_id: str) -> None:
        self._check_actor(user_id)
        await self._api.unlike(prompt_id)

    async def has_liked(self, prompt_id: str, user_id: str) -> bool:
        state = await self._api.like_state(prompt_id)
        return bool(state["is_liked"])

    async def count_likes(self, prompt_id: str) -> int:
        state = await self._api.like_state(prompt_id)
        return int(state["like_count"])
