"""Suppression of backend change notifications during self-initiated writes."""

import logging
from dataclasses import dataclass

_logger = logging.getLogger(__name__)


@dataclass
class RealtimeGuard:
    """Per-client flag; while active, incoming change events are ignored."""

    client_id: str
    is_active: bool = False

    def activate(self) -> None:
        self.is_active = True

    def release(self) -> None:
        self.is_active = False

    def set(self, active: bool) -> None:
        """Set the flag explicitly."""
        self.is_active = active

    def should_ignore(self, table: str, event_type: str) -> bool:
        """Return True when a change event must not trigger a reload."""
        if self.is_active:
            _logger.info(
                "Ignoring realtime %s on %s for client %s",
                event_type,
                table,
                self.client_id,
            )
        return self.is_active
