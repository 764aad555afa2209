"""Error taxonomy for session access operations."""

from collections.abc import Iterable
from uuid import UUID


class AccessError(Exception):
    """Base class for errors surfaced to callers of the access services."""

    code = "internal"
    retryable = False


class NotFoundError(AccessError):
    """A session, user or participant reference does not resolve."""

    code = "not_found"


class ForbiddenError(AccessError):
    """The caller is not eligible for the requested session."""

    code = "forbidden"

    def __init__(self, message: str = "not eligible") -> None:
        super().__init__(message)


class CapacityExceededError(AccessError):
    """The roster cannot take the requested users."""

    code = "capacity_exceeded"

    def __init__(self, session_id: UUID, current: int, requested: int, capacity: int):
        super().__init__(
            f"Session {session_id} cannot accommodate {requested} more user(s): "
            f"{current}/{capacity} registered"
        )
        self.session_id = session_id
        self.current = current
        self.requested = requested
        self.capacity = capacity


class InvalidArgumentError(AccessError):
    """A caller-supplied value is malformed or not allowed in this state."""

    code = "invalid_argument"


class TransientError(AccessError):
    """A collaborator timed out or the roster stayed contended; safe to retry."""

    code = "unavailable"
    retryable = True


class InternalError(AccessError):
    """Storage or signing failed in a way the caller cannot fix."""

    code = "internal"
    retryable = True


class SigningError(InternalError):
    """The access token could not be signed with the configured key."""


def parse_ids(raw_ids: Iterable[object]) -> list[UUID]:
    """Parse raw identifiers, naming the first malformed one."""
    parsed: list[UUID] = []
    for raw in raw_ids:
        if isinstance(raw, UUID):
            parsed.append(raw)
            continue
        try:
            parsed.append(UUID(str(raw).strip()))
        except ValueError:
            raise InvalidArgumentError(f"Invalid user id format: {raw}") from None
    return parsed
