"""Supabase-backed webinar session repository."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from webinar_access.domain.sessions import Participant, WebinarSession
from webinar_access.services.roster import Roster, SessionRepository

_SESSION_COLUMNS = (
    "id, title, start_time, end_time, speaker_id, capacity, "
    "allowed_group_ids, roster_json, roster_version"
)


@dataclass
class SupabaseSessionRepository(SessionRepository):
    """Supabase implementation for webinar sessions.

    The roster lives in a JSON column next to an integer version; writes are
    conditional on that version so concurrent writers cannot overwrite each
    other.
    """

    client: Client

    def get_session(self, session_id: UUID) -> WebinarSession | None:
        """Return a session by id, if present."""
        response = (
            self.client.table("webinar_sessions")
            .select(_SESSION_COLUMNS)
            .eq("id", str(session_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_session(response.data[0])

    def compare_and_swap_roster(
        self, session_id: UUID, expected_version: int, roster: Roster
    ) -> bool:
        """Replace the roster if the stored version is still ``expected_version``."""
        response = (
            self.client.table("webinar_sessions")
            .update(
                {
                    "roster_json": [_serialize_participant(p) for p in roster],
                    "roster_version": expected_version + 1,
                    "participant_count": len(roster),
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .eq("id", str(session_id))
            .eq("roster_version", expected_version)
            .execute()
        )
        return bool(response.data)


def _parse_time(value: object) -> datetime | None:
    if isinstance(value, str) and value:
        parsed = datetime.fromisoformat(value)
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return None


def _parse_session(row: dict[str, object]) -> WebinarSession:
    start_time = _parse_time(row["start_time"])
    end_time = _parse_time(row["end_time"])
    if start_time is None or end_time is None:
        raise RuntimeError(f"Session {row['id']} is missing its schedule")
    return WebinarSession(
        id=UUID(str(row["id"])),
        title=str(row.get("title") or ""),
        start_time=start_time,
        end_time=end_time,
        speaker_id=UUID(str(row["speaker_id"])),
        capacity=int(row["capacity"]),
        allowed_group_ids=frozenset(
            UUID(str(group_id)) for group_id in row.get("allowed_group_ids") or []
        ),
        roster=tuple(
            _parse_participant(entry) for entry in row.get("roster_json") or []
        ),
        roster_version=int(row.get("roster_version") or 0),
    )


def _parse_participant(entry: dict[str, object]) -> Participant:
    registered_at = _parse_time(entry.get("registered_at"))
    return Participant(
        user_id=UUID(str(entry["user_id"])),
        registered_at=registered_at or datetime.now(tz=UTC),
        attended=bool(entry.get("attended", False)),
        attendance_time=_parse_time(entry.get("attendance_time")),
        exit_time=_parse_time(entry.get("exit_time")),
        watch_duration_seconds=int(entry.get("watch_duration_seconds") or 0),
    )


def _serialize_participant(participant: Participant) -> dict[str, object]:
    return {
        "user_id": str(participant.user_id),
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
