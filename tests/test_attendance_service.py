"""Tests for attendance tracking."""

import asyncio
from uuid import uuid4

import pytest

from webinar_access.domain.errors import InvalidArgumentError, NotFoundError
from tests.conftest import Harness, at, make_session


def test_mark_attended_sets_time_once(harness: Harness) -> None:
    user = uuid4()
    session = harness.sessions.add(make_session(roster=[user]))

    first = asyncio.run(
        harness.attendance_service.mark_attended(session.id, user, at(10, 5))
    )
    replay = asyncio.run(
        harness.attendance_service.mark_attended(session.id, user, at(10, 20))
    )

    assert first.attended
    assert first.attendance_time == at(10, 5)
    assert replay.attendance_time == at(10, 5)
    assert first.state == "attended"
    assert harness.audit.event_types().count("attendance.attended") == 1


def test_mark_attended_uses_clock_by_default(harness: Harness) -> None:
    user = uuid4()
    session = harness.sessions.add(make_session(roster=[user]))

    participant = asyncio.run(
        harness.attendance_service.mark_attended(session.id, user)
    )

    assert participant.attendance_time == harness.clock.now


def test_mark_attended_requires_roster_entry(harness: Harness) -> None:
    session = harness.sessions.add(make_session())

    with pytest.raises(NotFoundError):
        asyncio.run(harness.attendance_service.mark_attended(session.id, uuid4()))


def test_exit_accumulates_watch_duration(harness: Harness) -> None:
    user = uuid4()
    session = harness.sessions.add(make_session(roster=[user]))
    service = harness.attendance_service
    asyncio.run(service.mark_attended(session.id, user, at(10)))

    asyncio.run(service.mark_exited(session.id, user, 600, at(10, 10)))
    participant = asyncio.run(service.mark_exited(session.id, user, 900, at(10, 40)))

    assert participant.watch_duration_seconds == 1500
    assert participant.exit_time == at(10, 40)
    assert participant.attendance_time == at(10)
    assert participant.state == "exited"


def test_exit_before_attending_is_rejected(harness: Harness) -> None:
    user = uuid4()
    session = harness.sessions.add(make_session(roster=[user]))

    with pytest.raises(InvalidArgumentError):
        asyncio.run(
            harness.attendance_service.mark_exited(session.id, user, 60, at(10, 5))
        )


def test_exit_cannot_precede_attendance(harness: Harness) -> None:
    user = uuid4()
    session = harness.sessions.add(make_session(roster=[user]))
    asyncio.run(harness.attendance_service.mark_attended(session.id, user, at(10, 30)))

    with pytest.raises(InvalidArgumentError):
        asyncio.run(
            harness.attendance_service.mark_exited(session.id, user, 60, at(10, 10))
        )


def test_negative_watch_time_is_rejected(harness: Harness) -> None:
    user = uuid4()
    session = harness.sessions.add(make_session(roster=[user]))
    asyncio.run(harness.attendance_service.mark_attended(session.id, user, at(10)))

    with pytest.raises(InvalidArgumentError):
        asyncio.run(
            harness.attendance_service.mark_exited(session.id, user, -5, at(10, 10))
        )

    stored = harness.sessions.sessions[session.id].find_participant(user)
    assert stored is not None
    assert stored.watch_duration_seconds == 0


def test_exit_for_unknown_participant(harness: Harness) -> None:
    session = harness.sessions.add(make_session())

    with pytest.raises(NotFoundError):
        asyncio.run(
            harness.attendance_service.mark_exited(session.id, uuid4(), 10, at(10))
        )


def test_audit_failure_does_not_undo_attendance(harness: Harness) -> None:
    user = uuid4()
    session = harness.sessions.add(make_session(roster=[user]))
    harness.audit.fail = True

    participant = asyncio.run(
        harness.attendance_service.mark_attended(session.id, user, at(10))
    )

    assert participant.attended
    stored = harness.sessions.sessions[session.id].find_participant(user)
    assert stored is not None
    assert stored.attended
