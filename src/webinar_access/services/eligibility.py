"""Eligibility rules for joining a live session."""

from collections.abc import Iterable
from uuid import UUID

from webinar_access.domain.access import (
    EligibilityBasis,
    EligibilityDecision,
    SessionRole,
)
from webinar_access.domain.sessions import WebinarSession

NOT_ELIGIBLE = "not eligible"


def resolve(
    session: WebinarSession, user_id: UUID, user_group_ids: Iterable[UUID]
) -> EligibilityDecision:
    """Decide whether a user may join a session, and in which role.

    The first matching rule wins: the speaker moderates, roster members and
    members of an allowed group participate, everyone else is denied. Group
    membership grants access only; adding the user to the roster is left to
    the caller.
    """
    if user_id == session.speaker_id:
        return EligibilityDecision(
            allowed=True,
            role=SessionRole.MODERATOR,
            basis=EligibilityBasis.SPEAKER,
            reason="speaker",
        )
    if session.find_participant(user_id) is not None:
        return EligibilityDecision(
            allowed=True,
            role=SessionRole.PARTICIPANT,
            basis=EligibilityBasis.ROSTER,
            reason="registered",
        )
    if session.allowed_group_ids.intersection(user_group_ids):
        return EligibilityDecision(
            allowed=True,
            role=SessionRole.PARTICIPANT,
            basis=EligibilityBasis.GROUP,
            reason="group member",
        )
    return EligibilityDecision(
        allowed=False,
        role=None,
        basis=EligibilityBasis.NONE,
        reason=NOT_ELIGIBLE,
    )
