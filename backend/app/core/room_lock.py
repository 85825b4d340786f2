from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import redis.asyncio as redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import LockError
from redis.exceptions import TimeoutError as RedisTimeoutError

from backend.app.core.config import settings
from backend.app.services.errors import BusyError, StoreUnavailableError

logger = logging.getLogger(__name__)


def _lock_key(room_number: int) -> str:
    return f"room-lock:{room_number}"


class RoomLocks:
    """Per-room write scopes held as Redis locks.

    Writers for different rooms never contend. A writer that cannot take the
    lock within ``wait_seconds`` gets ``BusyError``; the key expires after
    ``ttl_ms`` so a crashed holder cannot wedge a room. Release is
    token-checked server side, so an expired holder never frees a lock that
    another writer has since taken.
    """

    def __init__(
        self,
        client: redis.Redis,
        *,
        wait_seconds: float = settings.ROOM_LOCK_WAIT_SECONDS,
        ttl_ms: int = settings.ROOM_LOCK_TTL_MS,
        poll_seconds: float = settings.ROOM_LOCK_POLL_SECONDS,
    ) -> None:
        self.client = client
        self.wait_seconds = wait_seconds
        self.ttl_ms = ttl_ms
        self.poll_seconds = poll_seconds

    @asynccontextmanager
    async def hold(self, room_number: int, wait_seconds: float | None = None) -> AsyncIterator[None]:
        """Hold ``room_number``'s lock for the body of the ``async with``.

        ``wait_seconds`` overrides the configured wait, e.g. when the caller
        shares one deadline across several rooms.
        """
        key = _lock_key(room_number)
        wait = self.wait_seconds if wait_seconds is None else max(wait_seconds, 0.0)
        lock = self.client.lock(
            key,
            timeout=self.ttl_ms / 1000,
            sleep=self.poll_seconds,
            blocking_timeout=wait,
            thread_local=False,
        )
        try:
            acquired = await lock.acquire()
        except (RedisConnectionError, RedisTimeoutError) as exc:
            raise StoreUnavailableError("Lock service unavailable") from exc
        if not acquired:
            logger.info("Timed out waiting for room %s", room_number)
            raise BusyError(f"Room {room_number} is being booked by another request; retry shortly")

        try:
            yield
        finally:
            try:
                await lock.release()
            except LockError:
                # our key expired mid-write and may now belong to someone else
                logger.warning("Lock on %s expired before release", key)
            except (RedisConnectionError, RedisTimeoutError):
                logger.warning("Could not release %s; leaving it to expire", key)
