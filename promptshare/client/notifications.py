"""User-visible notifications raised by client-side operations."""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class Notification(BaseModel):
    """A toast-style message for the presentation layer."""

    title: str
    description: str
    variant: Literal["default", "destructive"] = "default"


class Notifier:
    """Collects notifications until the presentation layer drains them."""

    def __init__(self) -> None:
        self._pending: list[Notification] = []

    def notify(
        self,
        title: str,
        description: str,
        variant: Literal["default", "destructive"] = "default",
    ) -> Notification:
        notification = Notification(
            title=title, description=description, variant=variant
        )
        if variant == "destructive":
            logger.warning("%s: %s", title, description)
        else:
            logger.info("%s: %s", title, description)
        self._pending.append(notification)
        return notification

    @property
    def pending(self) -> list[Notification]:
        return list(self._pending)

    def drain(self) -> list[Notification]:
        """Return and clear all pending notifications."""
        drained, self._pending = self._pending, []
        return drained
