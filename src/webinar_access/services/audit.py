"""Audit trail for roster and attendance changes."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

_logger = logging.getLogger(__name__)


class AuditRepository(Protocol):
    """Persistence interface for audit events."""

    def create_event(  # noqa: PLR0913
        self,
        actor_id: UUID | None,
        entity_type: str,
        entity_id: UUID,
        event_type: str,
        before: dict[str, object] | None,
        after: dict[str, object] | None,
    ) -> None:
        """Create an audit event row."""


@dataclass
class AuditService:
    """Service for recording audit events."""

    repository: AuditRepository

    async def record_event(  # noqa: PLR0913
        self,
        actor_id: UUID | None,
        entity_type: str,
        entity_id: UUID,
        event_type: str,
        before: dict[str, object] | None,
        after: dict[str, object] | None,
    ) -> None:
        """Persist an audit event for a change that has already committed.

        A failed write is logged and does not propagate, since the change it
        describes cannot be rolled back from here.
        """
        try:
            await asyncio.to_thread(
                self.repository.create_event,
                actor_id,
                entity_type,
                entity_id,
                event_type,
                before,
                after,
            )
        except Exception:
            _logger.exception(
                "Failed to record audit event %s for %s %s",
                event_type,
                entity_type,
                entity_id,
            )
