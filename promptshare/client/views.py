"""Client-side view models.

The listing card and the detail page both own a ``LikeToggleController``;
they differ only in where their initial like state comes from. The comment
thread and the my-prompts page write through the API and invalidate the
cached queries that embed what they changed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import Any

from promptshare.client.api import PromptShareAPI
from promptshare.client.like_toggle import LikeToggleController, ToggleOutcome
from promptshare.client.notifications import Notifier
from promptshare.client.query_cache import QueryCache, QueryKey
from promptshare.config import Settings, get_settings
from promptshare.context import ActorContext
from promptshare.errors import RemoteWriteFailure
from promptshare.services.likes import LikeStore

logger = logging.getLogger(__name__)


@dataclass
class ClientSession:
    """Everything a view model needs from the running client."""

    actor: ActorContext
    store: LikeStore
    cache: QueryCache = field(default_factory=QueryCache)
    notifier: Notifier = field(default_factory=Notifier)
    settings: Settings = field(default_factory=get_settings)

    def like_controller(
        self, prompt_id: str, *, is_liked: bool, like_count: int
    ) -> LikeToggleController:
        return LikeToggleController(
            prompt_id=prompt_id,
            actor=self.actor,
            store=self.store,
            cache=self.cache,
            notifier=self.notifier,
            initial_liked=is_liked,
            initial_count=like_count,
            refetch_count_on_success=self.settings.likes.refetch_count_on_success,
        )


class PromptCardView:
    """A prompt in a listing, seeded from one row of ``GET /api/prompts``."""

    def __init__(self, session: ClientSession, row: dict[str, Any]) -> None:
        self.id: str = str(row["id"])
        self.title: str = row["title"]
        self.description: str = row.get("description") or "No description provided"
        self.prompt_text: str = row["prompt_text"]
        self.category: str | None = row.get("category")
        self.user_id: str = str(row["user_id"])
        self.author_name: str = row.get("author_name") or "Anonymous"
        self.avatar_url: str | None = row.get("avatar_url")
        self.comment_count: int = int(row.get("comment_count") or 0)
        self.like = session.like_controller(
            self.id,
            is_liked=bool(row.get("is_liked")),
            like_count=int(row.get("like_count") or 0),
        )

    def toggle_like(self) -> asyncio.Future[ToggleOutcome]:
        return self.like.toggle(self.like.is_liked)

    def update_from(self, row: dict[str, Any]) -> None:
        """Apply a refetched listing row."""
        self.comment_count = int(row.get("comment_count") or 0)
        self.like.reset(
            is_liked=bool(row.get("is_liked")),
            like_count=int(row.get("like_count") or 0),
        )


class PromptDetailView:
    """The prompt detail page, loaded through the query cache."""

    def __init__(
        self, session: ClientSession, api: PromptShareAPI, prompt_id: str
    ) -> None:
        self._session = session
        self._api = api
        self.prompt_id = prompt_id
        self.prompt: dict[str, Any] | None = None
        self.like: LikeToggleController | None = None

    async def load(self) -> dict[str, Any]:
        """Fetch the prompt and the viewer's like state, reusing fresh cache entries.

        Returns:
            The prompt detail row.
        """
        self._seed_like(await self._fetch())
        return self.prompt or {}

    async def _fetch(self) -> bool:
        """Load the prompt into ``self.prompt`` and return the viewer's like flag."""
        cache = self._session.cache
        self.prompt = await cache.fetch(
            ("prompt", self.prompt_id),
            lambda: self._api.get_prompt(self.prompt_id),
        )
        user_like = await cache.fetch(
            ("userLike", self.prompt_id, self._session.actor.user_id),
            self._load_user_like,
        )
        return bool(user_like)

    def _seed_like(self, is_liked: bool) -> LikeToggleController:
        like_count = int((self.prompt or {}).get("like_count") or 0)
        if self.like is None:
            self.like = self._session.like_controller(
                self.prompt_id, is_liked=is_liked, like_count=like_count
            )
        else:
            self.like.reset(is_liked=is_liked, like_count=like_count)
        return self.like

    async def _load_user_like(self) -> bool:
        user_id = self._session.actor.user_id
        if user_id is None:
            return False
        return await self._session.store.has_liked(self.prompt_id, user_id)

    async def toggle_like(self) -> ToggleOutcome:
        """Toggle the like, wait for it to settle, and reload stale queries."""
        like = self.like
        if like is None:
            like = self._seed_like(await self._fetch())
        outcome = await like.toggle(like.is_liked)
        if outcome.status == "committed":
            await self.load()
        return outcome


class _WritingView:
    """Shared plumbing for views that write through the API and report back."""

    login_message = "You must be logged in"

    def __init__(self, session: ClientSession, api: PromptShareAPI) -> None:
        self._session = session
        self._api = api

    def _require_login(self) -> bool:
        if self._session.actor.is_authenticated:
            return True
        self._session.notifier.notify("Login required", self.login_message)
        return False

    async def _write(
        self,
        call: Awaitable[Any],
        *,
        invalidates: list[QueryKey],
        success: tuple[str, str],
        fallback_error: str,
    ) -> bool:
        """Run one write; on success invalidate and notify, on failure notify.

        Returns:
            True when the write went through.
        """
        notifier = self._session.notifier
        try:
            await call
        except RemoteWriteFailure as exc:
            notifier.notify("Error", exc.message or fallback_error, "destructive")
            return False

        for key in invalidates:
            self._session.cache.invalidate(key)
        notifier.notify(*success)
        return True


class CommentThreadView(_WritingView):
    """The comment section under a prompt."""

    login_message = "You must be logged in to comment"

    def __init__(
        self, session: ClientSession, api: PromptShareAPI, prompt_id: str
    ) -> None:
        super().__init__(session, api)
        self.prompt_id = prompt_id
        self.comments: list[dict[str, Any]] = []

    async def load(self) -> list[dict[str, Any]]:
        self.comments = await self._session.cache.fetch(
            ("comments", self.prompt_id),
            lambda: self._api.list_comments(self.prompt_id),
        )
        return self.comments

    def _after_count_change(self) -> list[QueryKey]:
        # comment_count is embedded in the prompt detail and listings
        return [("comments", self.prompt_id), ("prompt", self.prompt_id), ("prompts",)]

    async def post(self, text: str) -> bool:
        """Post a comment. Blank text is ignored without a round trip."""
        if not text.strip():
            return False
        if not self._require_login():
            return False
        posted = await self._write(
            self._api.add_comment(self.prompt_id, text),
            invalidates=self._after_count_change(),
            success=("Comment posted", "Your comment has been added successfully"),
            fallback_error="Failed to post comment",
        )
        if posted:
            await self.load()
        return posted

    async def edit(self, comment_id: str, text: str) -> bool:
        if not text.strip():
            return False
        if not self._require_login():
            return False
        edited = await self._write(
            self._api.edit_comment(comment_id, text),
            invalidates=[("comments", self.prompt_id)],
            success=("Comment updated", "Your comment has been updated successfully"),
            fallback_error="Failed to update comment",
        )
        if edited:
            await self.load()
        return edited

    async def delete(self, comment_id: str) -> bool:
        if not self._require_login():
            return False
        deleted = await self._write(
            self._api.delete_comment(comment_id),
            invalidates=self._after_count_change(),
            success=("Comment deleted", "Your comment has been deleted successfully"),
            fallback_error="Failed to delete comment",
        )
        if deleted:
            await self.load()
        return deleted


class MyPromptsView(_WritingView):
    """The signed-in user's own prompts, with create, edit and delete."""

    login_message = "You must be logged in to manage prompts"

    def __init__(self, session: ClientSession, api: PromptShareAPI) -> None:
        super().__init__(session, api)
        self.prompts: list[dict[str, Any]] = []

    async def load(self) -> list[dict[str, Any]]:
        if not self._session.actor.is_authenticated:
            self.prompts = []
            return self.prompts
        self.prompts = await self._session.cache.fetch(
            ("my-prompts", self._session.actor.user_id), self._api.my_prompts
        )
        return self.prompts

    async def create(self, fields: dict[str, Any]) -> bool:
        if not self._require_login():
            return False
        created = await self._write(
            self._api.create_prompt(fields),
            invalidates=[("my-prompts",), ("prompts",), ("category-counts",)],
            success=("Prompt created", "Your prompt has been created successfully."),
            fallback_error="Failed to create prompt. Please try again.",
        )
        if created:
            await self.load()
        return created

    async def update(self, prompt_id: str, fields: dict[str, Any]) -> bool:
        if not self._require_login():
            return False
        updated = await self._write(
            self._api.update_prompt(prompt_id, fields),
            invalidates=[
                ("my-prompts",),
                ("prompts",),
                ("category-counts",),
                ("prompt", prompt_id),
            ],
            success=("Prompt updated", "Your prompt has been updated successfully."),
            fallback_error="Failed to update prompt. Please try again.",
        )
        if updated:
            await self.load()
        return updated

    async def delete(self, prompt_id: str) -> bool:
        if not self._require_login():
            return False
        deleted = await self._write(
            self._api.delete_prompt(prompt_id),
            invalidates=[
                ("my-prompts",),
                ("prompts",),
                ("category-counts",),
                ("prompt", prompt_id),
            ],
            success=("Prompt deleted", "Your prompt has been deleted successfully."),
            fallback_error="Failed to delete prompt. Please try again.",
        )
        if deleted:
            await self.load()
        return deleted
