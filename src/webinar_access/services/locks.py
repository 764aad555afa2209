"""Per-session serialization and bounded store calls."""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import TypeVar
from uuid import UUID

from webinar_access.domain.errors import AccessError, InternalError, TransientError

T = TypeVar("T")

_logger = logging.getLogger(__name__)


@dataclass
class _LockEntry:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    holders: int = 0


class SessionLockRegistry:
    """Hands out one FIFO lock per session id.

    Work on different sessions never contends; work on the same session is
    serviced in arrival order. Entries are dropped once no task holds or waits
    on them.
    """

    def __init__(self) -> None:
        self._entries: dict[UUID, _LockEntry] = {}

    @asynccontextmanager
    async def hold(self, session_id: UUID) -> AsyncIterator[None]:
        """Hold the mutation scope for a session."""
        entry = self._entries.get(session_id)
        if entry is None:
            entry = _LockEntry()
            self._entries[session_id] = entry
        entry.holders += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.holders -= 1
            if entry.holders == 0:
                self._entries.pop(session_id, None)

    def active_sessions(self) -> int:
        """Return how many sessions currently have holders or waiters."""
        return len(self._entries)


async def bounded_call(
    func: Callable[..., T], *args: object, timeout: float | None, action: str
) -> T:
    """Run a blocking store call in a worker thread with a deadline.

    Timeouts become ``TransientError``; any other failure from the store is
    logged and surfaced as ``InternalError`` without its details. Pass
    ``timeout=None`` for writes: an abandoned worker thread would still
    complete the write after the caller had been told it failed.
    """
    try:
        return await asyncio.wait_for(asyncio.to_thread(func, *args), timeout)
    except TimeoutError:
        _logger.warning("Store call timed out after %ss: %s", timeout, action)
        raise TransientError(f"Timed out during {action}") from None
    except AccessError:
        raise
    except Exception as exc:
        _logger.exception("Store call failed: %s", action)
        raise InternalError(f"Store failure during {action}") from exc
