"""Domain models for webinar sessions and their rosters."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class Participant:
    """A roster entry for one user in one session."""

    user_id: UUID
    registered_at: datetime
    attended: bool = False
    attendance_time: datetime | None = None
    exit_time: datetime | None = None
    watch_duration_seconds: int = 0

    @property
    def state(self) -> str:
        """Return the attendance lifecycle state."""
        if self.exit_time is not None:
            return "exited"
        if self.attended:
            return "attended"
        return "registered"


@dataclass(frozen=True)
class WebinarSession:
    """Represents a scheduled live session with its roster."""

    id: UUID
    title: str
    start_time: datetime
    end_time: datetime
    speaker_id: UUID
    capacity: int
    allowed_group_ids: frozenset[UUID] = frozenset()
    roster: tuple[Participant, ...] = ()
    roster_version: int = 0

    def find_participant(self, user_id: UUID) -> Participant | None:
        """Return the roster entry for a user, if present."""
        for participant in self.roster:
            if participant.user_id == user_id:
                return participant
        return None

    def roster_user_ids(self) -> set[UUID]:
        """Return the user ids currently on the roster."""
        return {participant.user_id for participant in self.roster}


@dataclass(frozen=True)
class RosterAddResult:
    """Outcome of adding users to a roster."""

    added: list[UUID] = field(default_factory=list)
    already_present: list[UUID] = field(default_factory=list)


@dataclass(frozen=True)
class RosterRemoveResult:
    """Outcome of removing users from a roster."""

    removed: list[UUID] = field(default_factory=list)
