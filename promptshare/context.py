"""Actor context passed explicitly to client-side operations."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ActorContext:
    """Who is acting, and with which access token.

    Immutable so that one operation sees the same actor from start to finish.
    """

    user_id: str | None = None
    access_token: str | None = None

    @classmethod
    def anonymous(cls) -> ActorContext:
        return cls()

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None
