"""Attendance lifecycle tracking for roster participants."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from uuid import UUID

from webinar_access.domain.errors import InvalidArgumentError, NotFoundError
from webinar_access.domain.sessions import Participant, WebinarSession
from webinar_access.services.audit import AuditService
from webinar_access.services.roster import Roster, RosterWriter

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def _require_participant(session: WebinarSession, user_id: UUID) -> Participant:
    participant = session.find_participant(user_id)
    if participant is None:
        raise NotFoundError(f"User {user_id} is not on the roster of {session.id}")
    return participant


def _swap(roster: Roster, updated: Participant) -> Roster:
    return tuple(
        updated if participant.user_id == updated.user_id else participant
        for participant in roster
    )


def plan_attendance(
    session: WebinarSession, user_id: UUID, at: datetime
) -> tuple[Roster | None, Participant]:
    """Mark a participant as attended; replays keep the first timestamp."""
    participant = _require_participant(session, user_id)
    if participant.attended:
        return None, participant
    updated = replace(participant, attended=True, attendance_time=at)
    return _swap(session.roster, updated), updated


def plan_exit(
    session: WebinarSession, user_id: UUID, at: datetime, watched_seconds: int
) -> tuple[Roster, Participant]:
    """Record a departure and accumulate watch time."""
    participant = _require_participant(session, user_id)
    if watched_seconds < 0:
        raise InvalidArgumentError("watched_seconds must be non-negative")
    if not participant.attended:
        raise InvalidArgumentError(
            f"User {user_id} has not attended session {session.id}"
        )
    if participant.attendance_time and at < participant.attendance_time:
        raise InvalidArgumentError("exit time precedes attendance time")
    updated = replace(
        participant,
        exit_time=at,
        watch_duration_seconds=participant.watch_duration_seconds + watched_seconds,
    )
    return _swap(session.roster, updated), updated


@dataclass
class AttendanceService:
    """Records attendance transitions: registered, attended, exited."""

    writer: RosterWriter
    audit_service: AuditService | None = None
    clock: Callable[[], datetime] = _utcnow

    async def mark_attended(
        self, session_id: UUID, user_id: UUID, at: datetime | None = None
    ) -> Participant:
        """Mark a roster participant as attended."""
        moment = at or self.clock()

        def change(
            session: WebinarSession,
        ) -> tuple[Roster | None, tuple[Participant, bool]]:
            roster, participant = plan_attendance(session, user_id, moment)
            return roster, (participant, roster is not None)

        participant, changed = await self.writer.commit(session_id, change)
        if changed and self.audit_service:
            await self.audit_service.record_event(
                actor_id=user_id,
                entity_type="session",
                entity_id=session_id,
                event_type="attendance.attended",
                before=None,
                after={"attendance_time": moment.isoformat()},
            )
        return participant

    async def mark_exited(
        self,
        session_id: UUID,
        user_id: UUID,
        watched_seconds: int,
        at: datetime | None = None,
    ) -> Participant:
        """Record that a participant left, adding to their watch duration."""
        moment = at or self.clock()
        participant = await self.writer.commit(
            session_id,
            lambda session: plan_exit(session, user_id, moment, watched_seconds),
        )
        _logger.info(
            "User %s left session %s after %ss", user_id, session_id, watched_seconds
        )
        if self.audit_service:
            await self.audit_service.record_event(
                actor_id=user_id,
                entity_type="session",
                entity_id=session_id,
                event_type="attendance.exited",
                before=None,
                after={
                    "exit_time": moment.isoformat(),
                    "watch_duration_seconds": participant.watch_duration_seconds,
                },
            )
        return participant
