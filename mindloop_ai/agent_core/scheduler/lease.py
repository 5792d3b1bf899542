from __future__ import annotations

"""Single-flight cycle lease stored in the options store.

The lease replaces a bare "cycle running" flag with three keys:

- ``lock``: ``True`` while a cycle holds the lease,
- ``lock_owner``: identifier of the holder,
- ``lock_expires_at``: ISO-8601 UTC expiry.

A lease whose expiry has passed counts as free. This is the recovery path
for a worker that died mid-cycle and never released it.
"""

import logging
import os
import socket
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
from uuid import uuid4

from ..errors import LeaseError
from ..repos.interfaces import OptionsStore

logger = logging.getLogger(__name__)

LOCK_KEY = "lock"
LOCK_OWNER_KEY = "lock_owner"
LOCK_EXPIRES_KEY = "lock_expires_at"

DEFAULT_LEASE_TTL_SECONDS = 3600


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_owner_id() -> str:
    return f"{socket.gethostname()}:{os.getpid()}:{uuid4().hex[:8]}"


def _parse_expiry(raw: object) -> Optional[datetime]:
    if not raw:
        return None
    try:
        value = datetime.fromisoformat(str(raw))
    except ValueError:
        logger.warning("Unparseable lease expiry %r", raw)
        return None
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class LeaseState:
    held: bool
    owner: Optional[str] = None
    expires_at: Optional[datetime] = None
    expired: bool = False

    @property
    def locked(self) -> bool:
        return self.held and not self.expired


class CycleLease:
    def __init__(
        self,
        options: OptionsStore,
        *,
        ttl_seconds: int = DEFAULT_LEASE_TTL_SECONDS,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._options = options
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock

    async def state(self) -> LeaseState:
        if await self._options.get(LOCK_KEY, False) is not True:
            return LeaseState(held=False)
        owner = await self._options.get(LOCK_OWNER_KEY)
        expires_at = _parse_expiry(await self._options.get(LOCK_EXPIRES_KEY))
        expired = expires_at is not None and expires_at <= self._clock()
        if expired:
            logger.warning("Cycle lease held by %s expired at %s; treating it as free", owner, expires_at.isoformat())
        return LeaseState(held=True, owner=owner, expires_at=expires_at, expired=expired)

    async def is_locked(self) -> bool:
        return (await self.state()).locked

    async def acquire(self, owner: str) -> bool:
        """
        Take the lease for ``owner``.

        Returns:
            True when ``owner`` holds the lease after the write was read back.
        """
        if await self.is_locked():
            return False
        expires_at = self._clock() + self._ttl
        await self._options.set(LOCK_KEY, True)
        await self._options.set(LOCK_OWNER_KEY, owner)
        await self._options.set(LOCK_EXPIRES_KEY, expires_at.isoformat())
        confirmed = await self._options.get(LOCK_OWNER_KEY) == owner
        if confirmed:
            logger.debug("Lease acquired by %s until %s", owner, expires_at.isoformat())
        else:
            logger.info("Lease acquisition by %s lost a race", owner)
        return confirmed

    async def release(self, owner: Optional[str] = None) -> bool:
        """
        Clear the lease.

        Args:
            owner: When given, only this holder may release an unexpired lease.

        Returns:
            True when a lease was cleared.

        Raises:
            LeaseError: If ``owner`` is given and another holder owns the lease.
        """
        state = await self.state()
        if not state.held:
            return False
        if owner is not None and state.locked and state.owner != owner:
            raise LeaseError(f"Lease is held by {state.owner}, not {owner}")
        await self.clear()
        return True

    async def clear(self) -> None:
        await self._options.set(LOCK_KEY, False)
        await self._options.delete(LOCK_OWNER_KEY)
        await self._options.delete(LOCK_EXPIRES_KEY)
