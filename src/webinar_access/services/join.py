"""Join orchestration: eligibility, implicit registration, attendance, token."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from uuid import UUID

from webinar_access.domain.access import (
    AccessGrant,
    EligibilityBasis,
    EligibilityDecision,
)
from webinar_access.domain.errors import (
    CapacityExceededError,
    ForbiddenError,
    InvalidArgumentError,
)
from webinar_access.domain.sessions import WebinarSession
from webinar_access.services.attendance import plan_attendance
from webinar_access.services.audit import AuditService
from webinar_access.services.directory import DirectoryService
from webinar_access.services.eligibility import resolve
from webinar_access.services.roster import Roster, RosterWriter, plan_additions
from webinar_access.services.tokens import AccessTokenIssuer

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(frozen=True)
class _JoinPlan:
    grant: AccessGrant
    decision: EligibilityDecision
    registered: bool
    attended: bool


@dataclass
class SessionJoinService:
    """Admits a user into a live session and hands back an access grant."""

    writer: RosterWriter
    directory: DirectoryService
    token_issuer: AccessTokenIssuer
    audit_service: AuditService | None = None
    default_buffer_minutes: int = 30
    require_preregistration: bool = False
    clock: Callable[[], datetime] = _utcnow

    async def join(
        self, session_id: UUID, user_id: UUID, buffer_minutes: int | None = None
    ) -> AccessGrant:
        """Join a session.

        Eligibility, implicit registration and the attendance mark are decided
        and committed together inside the session's mutation scope, so two
        concurrent joins cannot both claim the last seat. Group-eligible users
        who are not yet registered are added to the roster on first join
        unless ``require_preregistration`` is set. The grant is signed before
        the roster write, so a signing failure leaves the roster untouched.
        """
        buffer = (
            self.default_buffer_minutes if buffer_minutes is None else buffer_minutes
        )
        if buffer < 0:
            raise InvalidArgumentError("buffer_minutes must be non-negative")

        profile, group_ids = await asyncio.gather(
            self.directory.get_user(user_id),
            self.directory.groups_of(user_id),
        )
        now = self.clock()

        def change(session: WebinarSession) -> tuple[Roster | None, _JoinPlan]:
            decision = resolve(session, user_id, group_ids)
            if not decision.allowed:
                raise ForbiddenError()
            roster: Roster | None = None
            working = session
            registered = False
            if decision.basis is EligibilityBasis.GROUP:
                if self.require_preregistration:
                    raise ForbiddenError()
                roster, _ = plan_additions(session, [user_id], now)
                working = replace(session, roster=roster)
                registered = True
            attended = False
            if decision.basis is not EligibilityBasis.SPEAKER:
                attended_roster, _ = plan_attendance(working, user_id, now)
                if attended_roster is not None:
                    roster = attended_roster
                    attended = True
            grant = self.token_issuer.issue(
                session,
                user_id,
                profile.display_name,
                decision.role,
                buffer,
                avatar_url=profile.avatar_url,
                email=profile.email,
                now=now,
            )
            return roster, _JoinPlan(
                grant=grant,
                decision=decision,
                registered=registered,
                attended=attended,
            )

        try:
            plan = await self.writer.commit(session_id, change)
        except ForbiddenError:
            _logger.info("Join denied for user %s in session %s", user_id, session_id)
            self.directory.forget_groups(user_id)
            raise
        except CapacityExceededError:
            _logger.info(
                "Join rejected for user %s: session %s is full", user_id, session_id
            )
            raise

        await self._record(session_id, user_id, plan, now)
        return plan.grant

    async def _record(
        self, session_id: UUID, user_id: UUID, plan: _JoinPlan, now: datetime
    ) -> None:
        if not self.audit_service:
            return
        if plan.registered:
            await self.audit_service.record_event(
                actor_id=user_id,
                entity_type="session",
                entity_id=session_id,
                event_type="roster.added",
                before=None,
                after={"user_ids": [str(user_id)], "basis": plan.decision.basis.value},
            )
        if plan.attended:
            await self.audit_service.record_event(
                actor_id=user_id,
                entity_type="session",
                entity_id=session_id,
                event_type="attendance.attended",
                before=None,
                after={"attendance_time": now.isoformat()},
            )
