"""Admin service for roster and attendance reporting."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from webinar_access.domain.sessions import Participant
from webinar_access.services.locks import bounded_call
from webinar_access.services.roster import RosterWriter


class AdminRepository(Protocol):
    """Persistence interface for admin data."""

    def list_audit_events(
        self, entity_id: UUID, limit: int
    ) -> list[dict[str, object]]:
        """Return recent audit events for an entity."""


@dataclass
class AdminService:
    """Service for admin dashboards."""

    admin_repository: AdminRepository
    writer: RosterWriter

    async def get_roster_report(
        self, session_id: UUID, audit_limit: int = 50
    ) -> dict[str, object]:
        """Return a session's roster with attendance and its recent audit trail."""
        session = await self.writer.load(session_id)
        audits = await bounded_call(
            self.admin_repository.list_audit_events,
            session_id,
            audit_limit,
            timeout=self.writer.timeout_seconds,
            action=f"list_audit_events:{session_id}",
        )
        attended = [p for p in session.roster if p.attended]
        return {
            "session_id": str(session.id),
            "title": session.title,
            "capacity": session.capacity,
            "registered": len(session.roster),
            "attended": len(attended),
            "total_watch_seconds": sum(p.watch_duration_seconds for p in attended),
            "participants": [_serialize_participant(p) for p in session.roster],
            "audit_events": audits,
        }


def _serialize_participant(participant: Participant) -> dict[str, object]:
    return {
        "user_id": str(participant.user_id),
        "state": participant.state,
        "registered_at": participant.registered_at.isoformat(),
        "attended": participant.attended,
        "attendance_time": participant.attendance_time.isoformat()
        if participant.attendance_time
        else None,
        "exit_time": participant.exit_time.isoformat()
        if participant.exit_time
        else None,
        "watch_duration_seconds": participant.watch_duration_seconds,
    }
