"""User-facing notices raised by long-running operations."""

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from uuid import uuid4

DEFAULT_VARIANT = "default"
DESTRUCTIVE_VARIANT = "destructive"


@dataclass(frozen=True)
class Notice:
    """Short message shown to the user."""

    id: str
    title: str
    description: str
    variant: str = DEFAULT_VARIANT
    expires_at: float | None = None


@dataclass
class NoticeBoard:
    """Collection of active notices for one client."""

    clock: Callable[[], float] = time.monotonic
    notices: dict[str, Notice] = field(default_factory=dict)

    def post(
        self,
        title: str,
        description: str,
        variant: str = DEFAULT_VARIANT,
        duration_seconds: float | None = None,
    ) -> Notice:
        """Add a notice; ``duration_seconds`` makes it expire on its own."""
        expires_at = None
        if duration_seconds is not None:
            expires_at = self.clock() + duration_seconds
        notice = Notice(
            id=str(uuid4()),
            title=title,
            description=description,
            variant=variant,
            expires_at=expires_at,
        )
        self.notices[notice.id] = notice
        return notice

    def dismiss(self, notice_id: str) -> None:
        """Remove a notice if it is still shown."""
        self.notices.pop(notice_id, None)

    def active(self) -> list[Notice]:
        """Return notices that have not expired, oldest first."""
        now = self.clock()
        expired = [
            notice_id
            for notice_id, notice in self.notices.items()
            if notice.expires_at is not None and notice.expires_at <= now
        ]
        for notice_id in expired:
            del self.notices[notice_id]
        return list(self.notices.values())
