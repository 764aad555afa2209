"""Session access endpoints: join, exit and roster changes."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Query, Request

from webinar_access.api.admin import require_admin
from webinar_access.api.auth import require_caller
from webinar_access.api.schemas import ExitRequest, ParticipantsRequest  # noqa: TC001

if TYPE_CHECKING:
    from webinar_access.containers import AppContainer

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.post("/{session_id}/join")
async def join_session(
    session_id: UUID,
    request: Request,
    buffer_minutes: int | None = Query(default=None, ge=0),
    caller_id: UUID = Depends(require_caller),
) -> dict[str, object]:
    """Admit the caller and return a conferencing access grant."""
    container: AppContainer = request.app.state.container
    grant = await container.join_service.join(session_id, caller_id, buffer_minutes)
    return {
        "token": grant.token,
        "roomName": grant.room_name,
        "role": grant.role.value,
        "issuedAt": grant.issued_at.isoformat(),
        "expiresAt": grant.expires_at.isoformat(),
        "conferencingUrl": container.settings.conferencing_url,
    }


@router.post("/{session_id}/exit")
async def exit_session(
    session_id: UUID,
    body: ExitRequest,
    request: Request,
    caller_id: UUID = Depends(require_caller),
) -> dict[str, object]:
    """Record that the caller left the session."""
    container: AppContainer = request.app.state.container
    participant = await container.attendance_service.mark_exited(
        session_id, caller_id, body.watched_seconds
    )
    return {
        "userId": str(participant.user_id),
        "state": participant.state,
        "exitTime": participant.exit_time.isoformat()
        if participant.exit_time
        else None,
        "watchDurationSeconds": participant.watch_duration_seconds,
    }


@router.post("/{session_id}/participants", dependencies=[Depends(require_admin)])
async def add_participants(
    session_id: UUID, body: ParticipantsRequest, request: Request
) -> dict[str, object]:
    """Register users for a session."""
    container: AppContainer = request.app.state.container
    result = await container.roster_service.add_participants(session_id, body.user_ids)
    return {
        "added": [str(user_id) for user_id in result.added],
        "alreadyPresent": [str(user_id) for user_id in result.already_present],
    }


@router.delete("/{session_id}/participants", dependencies=[Depends(require_admin)])
async def remove_participants(
    session_id: UUID, body: ParticipantsRequest, request: Request
) -> dict[str, object]:
    """Unregister users from a session."""
    container: AppContainer = request.app.state.container
    result = await container.roster_service.remove_participants(
        session_id, body.user_ids
    )
    return {"removed": [str(user_id) for user_id in result.removed]}
