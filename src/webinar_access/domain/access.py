"""Access decision and grant models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID


class SessionRole(Enum):
    """Conferencing role granted to a joining user."""

    MODERATOR = "moderator"
    PARTICIPANT = "participant"


class EligibilityBasis(Enum):
    """Which rule produced an eligibility decision."""

    SPEAKER = "speaker"
    ROSTER = "roster"
    GROUP = "group"
    NONE = "none"


@dataclass(frozen=True)
class EligibilityDecision:
    """Result of checking whether a user may join a session."""

    allowed: bool
    role: SessionRole | None
    basis: EligibilityBasis
    reason: str


@dataclass(frozen=True)
class AccessGrant:
    """Signed, short-lived credential for the conferencing provider."""

    user_id: UUID
    session_id: UUID
    role: SessionRole
    room_name: str
    issued_at: datetime
    expires_at: datetime
    token: str
