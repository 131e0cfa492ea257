"""Optimistic like toggling for one (prompt, viewer) pair.

The controller flips the displayed like state synchronously, then writes to
the like store in the background. Writes for one pair go through a single
in-flight slot: a toggle made while a write is outstanding is shown at once
and coalesced, so that when the outstanding write resolves only the latest
intent is sent. On failure the display reverts to the last confirmed state and
a destructive notification is raised; on success the affected cached queries
are invalidated and, unless disabled, the true like count is re-read.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Literal

from promptshare.client.notifications import Notifier
from promptshare.client.query_cache import QueryCache, QueryKey
from promptshare.context import ActorContext
from promptshare.errors import AuthenticationRequired, RemoteWriteFailure
from promptshare.services.likes import LikeStore

logger = logging.getLogger(__name__)

FALLBACK_ERROR_MESSAGE = "Failed to update like"

ToggleStatus = Literal["committed", "rolled_back", "unauthenticated", "unchanged"]


@dataclass(frozen=True)
class LikeViewState:
    is_liked: bool
    like_count: int


@dataclass(frozen=True)
class ToggleOutcome:
    """How a toggle (or a run of coalesced toggles) resolved."""

    status: ToggleStatus
    state: LikeViewState
    error: str | None = None


def affected_query_keys(prompt_id: str) -> list[QueryKey]:
    """Cached reads that embed the like state or count of ``prompt_id``."""
    return [
        ("prompt", prompt_id),
        ("userLike", prompt_id),
        ("prompts",),
        ("user-prompts",),
    ]


class LikeToggleController:
    """Owns the displayed ``(is_liked, like_count)`` for one prompt and viewer.

    Args:
        prompt_id: Prompt being liked.
        actor: Current viewer; anonymous viewers cannot toggle.
        store: Remote like relation.
        cache: Query cache to invalidate after successful writes.
        notifier: Sink for user-visible notifications.
        initial_liked: Whether the viewer has liked the prompt, per the server.
        initial_count: Like count per the server.
        refetch_count_on_success: Re-read the true count after a write.
    """

    def __init__(
        self,
        *,
        prompt_id: str,
        actor: ActorContext,
        store: LikeStore,
        cache: QueryCache,
        notifier: Notifier,
        initial_liked: bool = False,
        initial_count: int = 0,
        refetch_count_on_success: bool = True,
    ) -> None:
        self.prompt_id = prompt_id
        self.actor = actor
        self._store = store
        self._cache = cache
        self._notifier = notifier
        self._refetch_count_on_success = refetch_count_on_success

        count = max(0, initial_count)
        self._confirmed_liked = initial_liked
        self._confirmed_count = count
        self._desired_liked = initial_liked
        # Set by a toggle whose ``currently_liked`` disagrees with the display;
        # that write is sent even if it matches the confirmed state.
        self._forced_write: bool | None = None
        self._inflight: asyncio.Task[ToggleOutcome] | None = None

    @property
    def is_liked(self) -> bool:
        return self._desired_liked

    @property
    def like_count(self) -> int:
        """Confirmed count shifted by the one pending intent, if any."""
        if self._desired_liked == self._confirmed_liked:
            return self._confirmed_count
        return _shift(self._confirmed_count, self._desired_liked)

    @property
    def state(self) -> LikeViewState:
        return LikeViewState(is_liked=self.is_liked, like_count=self.like_count)

    @property
    def in_flight(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    def reset(self, *, is_liked: bool, like_count: int) -> bool:
        """Re-seed from freshly fetched server values.

        Ignored while a write is outstanding, since the fetched values may
        predate it.

        Returns:
            True if the state was replaced.
        """
        if self.in_flight:
            return False
        self._confirmed_liked = self._desired_liked = is_liked
        self._confirmed_count = max(0, like_count)
        self._forced_write = None
        return True

    def toggle(self, currently_liked: bool) -> asyncio.Future[ToggleOutcome]:
        """Flip the like state away from ``currently_liked``.

        The displayed state changes before this method returns. The returned
        future resolves once the write (and any writes coalesced into it)
        settles. Must be called from a running event loop.

        A ``currently_liked`` that disagrees with the displayed state still
        sends its write, so the store's uniqueness rule decides the outcome
        instead of the count drifting.

        Args:
            currently_liked: The state being transitioned away from.
        """
        loop = asyncio.get_running_loop()

        if not self.actor.is_authenticated:
            reason = AuthenticationRequired()
            self._notifier.notify("Login required", reason.message)
            rejected: asyncio.Future[ToggleOutcome] = loop.create_future()
            rejected.set_result(ToggleOutcome("unauthenticated", self.state))
            return rejected

        should_like = not currently_liked
        stale = currently_liked != self._desired_liked
        self._forced_write = should_like if stale else None
        self._desired_liked = should_like
        logger.debug(
            "Optimistic %s on prompt %s -> count %d%s",
            "like" if should_like else "unlike",
            self.prompt_id,
            self.like_count,
            " (stale input)" if stale else "",
        )

        if self._inflight is None or self._inflight.done():
            self._inflight = loop.create_task(self._drain())
        return self._inflight

    def _next_write(self) -> bool | None:
        if self._forced_write is not None:
            should_like, self._forced_write = self._forced_write, None
            return should_like
        if self._desired_liked != self._confirmed_liked:
            return self._desired_liked
        return None

    async def _drain(self) -> ToggleOutcome:
        committed = False
        while True:
            should_like = self._next_write()
            if should_like is None:
                break
            try:
                await self._write(should_like)
            except RemoteWriteFailure as exc:
                message = exc.message or FALLBACK_ERROR_MESSAGE
                self._rollback(message)
                if committed:
                    self._invalidate()
                return ToggleOutcome("rolled_back", self.state, error=message)

            committed = True
            if should_like != self._confirmed_liked:
                self._confirmed_count = _shift(self._confirmed_count, should_like)
                self._confirmed_liked = should_like

            settled = self._desired_liked == self._confirmed_liked
            if settled and self._forced_write is None:
                self._invalidate()
                if self._refetch_count_on_success:
                    await self._refetch_count()

        if not committed:
            return ToggleOutcome("unchanged", self.state)
        return ToggleOutcome("committed", self.state)

    async def _write(self, should_like: bool) -> None:
        user_id = self.actor.user_id
        if user_id is None:
            raise AuthenticationRequired()
        if should_like:
            await self._store.insert_like(self.prompt_id, user_id)
        else:
            await self._store.delete_like(self.prompt_id, user_id)

    def _rollback(self, message: str) -> None:
        logger.info(
            "Rolling back like state on prompt %s: %s", self.prompt_id, message
        )
        self._desired_liked = self._confirmed_liked
        self._forced_write = None
        self._notifier.notify("Error", message, variant="destructive")

    def _invalidate(self) -> None:
        for key in affected_query_keys(self.prompt_id):
            self._cache.invalidate(key)

    async def _refetch_count(self) -> None:
        try:
            count = await self._store.count_likes(self.prompt_id)
        except Exception:
            logger.warning(
                "Could not refresh like count for prompt %s",
                self.prompt_id,
                exc_info=True,
            )
            return
        self._confirmed_count = max(0, count)


def _shift(count: int, liked: bool) -> int:
    return count + 1 if liked else max(0, count - 1)
