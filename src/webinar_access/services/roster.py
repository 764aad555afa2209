"""Capacity-bounded roster management."""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol, TypeVar
from uuid import UUID

from webinar_access.domain.errors import (
    CapacityExceededError,
    NotFoundError,
    TransientError,
    parse_ids,
)
from webinar_access.domain.sessions import (
    Participant,
    RosterAddResult,
    RosterRemoveResult,
    WebinarSession,
)
from webinar_access.services.audit import AuditService
from webinar_access.services.locks import SessionLockRegistry, bounded_call

T = TypeVar("T")

Roster = tuple[Participant, ...]
RosterChange = Callable[[WebinarSession], tuple[Roster | None, T]]

_logger = logging.getLogger(__name__)


class SessionRepository(Protocol):
    """Persistence interface for webinar sessions."""

    def get_session(self, session_id: UUID) -> WebinarSession | None:
        """Return a session with its roster, if present."""

    def compare_and_swap_roster(
        self, session_id: UUID, expected_version: int, roster: Roster
    ) -> bool:
        """Replace the roster if its version still matches; return success."""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class RosterWriter:
    """Serialized, conditional roster commits for a session.

    A change function receives the freshly loaded session and returns the new
    roster (or ``None`` when nothing needs writing) plus a result. Changes run
    inside the session's lock and are committed with compare-and-swap, so a
    concurrent writer in another process forces a recompute rather than a lost
    update.
    """

    repository: SessionRepository
    locks: SessionLockRegistry
    timeout_seconds: float = 5.0
    conflict_retries: int = 3

    async def load(self, session_id: UUID) -> WebinarSession:
        """Load a session or raise ``NotFoundError``."""
        session = await bounded_call(
            self.repository.get_session,
            session_id,
            timeout=self.timeout_seconds,
            action=f"get_session:{session_id}",
        )
        if session is None:
            raise NotFoundError(f"Session {session_id} not found")
        return session

    async def commit(self, session_id: UUID, change: RosterChange[T]) -> T:
        """Apply a change to the session roster atomically."""
        async with self.locks.hold(session_id):
            attempt = 0
            while True:
                session = await self.load(session_id)
                roster, result = change(session)
                if roster is None:
                    return result
                committed = await bounded_call(
                    self.repository.compare_and_swap_roster,
                    session_id,
                    session.roster_version,
                    roster,
                    timeout=None,
                    action=f"compare_and_swap_roster:{session_id}",
                )
                if committed:
                    return result
                attempt += 1
                _logger.warning(
                    "Roster version conflict for session %s (attempt %s/%s)",
                    session_id,
                    attempt,
                    self.conflict_retries + 1,
                )
                if attempt > self.conflict_retries:
                    raise TransientError(
                        f"Roster for session {session_id} is busy, retry later"
                    )


def plan_additions(
    session: WebinarSession, user_ids: Iterable[UUID], now: datetime
) -> tuple[Roster | None, RosterAddResult]:
    """Compute the roster after registering users, enforcing capacity.

    All-or-nothing: if the new users do not fit, nothing is added.
    """
    present = session.roster_user_ids()
    added: list[UUID] = []
    already_present: list[UUID] = []
    for user_id in dict.fromkeys(user_ids):
        if user_id in present:
            already_present.append(user_id)
        else:
            added.append(user_id)
    result = RosterAddResult(added=added, already_present=already_present)
    if not added:
        return None, result
    if len(session.roster) + len(added) > session.capacity:
        raise CapacityExceededError(
            session.id,
            current=len(session.roster),
            requested=len(added),
            capacity=session.capacity,
        )
    new_entries = tuple(
        Participant(user_id=user_id, registered_at=now) for user_id in added
    )
    return session.roster + new_entries, result


def plan_removals(
    session: WebinarSession, user_ids: Iterable[UUID]
) -> tuple[Roster | None, RosterRemoveResult]:
    """Compute the roster after unregistering users; absent ids are ignored."""
    present = session.roster_user_ids()
    removed = [user_id for user_id in dict.fromkeys(user_ids) if user_id in present]
    if not removed:
        return None, RosterRemoveResult()
    dropped = set(removed)
    roster = tuple(p for p in session.roster if p.user_id not in dropped)
    return roster, RosterRemoveResult(removed=removed)


@dataclass
class RosterService:
    """Registers and unregisters users for a session."""

    writer: RosterWriter
    audit_service: AuditService | None = None
    clock: Callable[[], datetime] = _utcnow

    async def add_participants(
        self, session_id: UUID, user_ids: Iterable[object]
    ) -> RosterAddResult:
        """Register users, reporting which were new and which already present."""
        parsed = parse_ids(user_ids)
        now = self.clock()
        result = await self.writer.commit(
            session_id, lambda session: plan_additions(session, parsed, now)
        )
        if result.added:
            _logger.info(
                "Registered %s user(s) for session %s", len(result.added), session_id
            )
            if self.audit_service:
                await self.audit_service.record_event(
                    actor_id=None,
                    entity_type="session",
                    entity_id=session_id,
                    event_type="roster.added",
                    before=None,
                    after={"user_ids": [str(user_id) for user_id in result.added]},
                )
        return result

    async def remove_participants(
        self, session_id: UUID, user_ids: Iterable[object]
    ) -> RosterRemoveResult:
        """Unregister users; removing someone not on the roster is a no-op."""
        parsed = parse_ids(user_ids)
        result = await self.writer.commit(
            session_id, lambda session: plan_removals(session, parsed)
        )
        if result.removed:
            _logger.info(
                "Unregistered %s user(s) from session %s",
                len(result.removed),
                session_id,
            )
            if self.audit_service:
                await self.audit_service.record_event(
                    actor_id=None,
                    entity_type="session",
                    entity_id=session_id,
                    event_type="roster.removed",
                    before={"user_ids": [str(user_id) for user_id in result.removed]},
                    after=None,
                )
        return result
