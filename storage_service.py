from __future__ import annotations
import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional

from db import UserDataRepository
from errors import StorageError

logger = logging.getLogger(__name__)


class StorageService:
    """User-scoped key/value access that degrades instead of raising.

    Every backend call is bounded by ``timeout`` and retried on
    ``StorageError`` or timeout with exponential backoff. Writes for the same
    user are serialized. Failures are logged and reported through the return
    value: ``get`` yields ``None``, ``set``/``delete`` yield ``False`` and
    ``list`` yields ``[]``.
    """

    def __init__(
        self,
        backend: UserDataRepository,
        timeout: float = 10.0,
        retries: int = 2,
        backoff: float = 0.1,
    ) -> None:
        if retries < 0:
            raise ValueError("retries must be non-negative")
        self.backend = backend
        self.timeout = timeout
        self.retries = retries
        self.backoff = backoff
        self._write_locks: dict[str, asyncio.Lock] = {}

    @classmethod
    def from_settings(cls, backend: UserDataRepository, settings) -> "StorageService":
        return cls(
            backend,
            timeout=settings.storage_timeout,
            retries=settings.storage_retries,
            backoff=settings.storage_backoff,
        )

    def _lock_for(self, user_id: str) -> asyncio.Lock:
        lock = self._write_locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._write_locks[user_id] = lock
        return lock

    async def _call(self, op: str, factory: Callable[[], Awaitable[Any]]) -> Any:
        delay = self.backoff
        for attempt in range(self.retries + 1):
            try:
                return await asyncio.wait_for(factory(), self.timeout)
            except (StorageError, asyncio.TimeoutError) as e:
                reason = str(e) or type(e).__name__
                if attempt == self.retries:
                    raise StorageError(f"{op} failed: {reason}") from e
                logger.warning(
                    "%s failed (attempt %d/%d): %s",
                    op,
                    attempt + 1,
                    self.retries + 1,
                    reason,
                )
                await asyncio.sleep(delay)
                delay *= 2

    async def get(self, user_id: str, key: str) -> Optional[Any]:
        try:
            return await self._call(
                f"get {key}", lambda: self.backend.get(user_id, key)
            )
        except StorageError as e:
            logger.error("Error getting %s for %s: %s", key, user_id, e)
            return None

    async def set(self, user_id: str, key: str, value: Any) -> bool:
        async with self._lock_for(user_id):
            try:
                await self._call(
                    f"set {key}", lambda: self.backend.set(user_id, key, value)
                )
            except StorageError as e:
                logger.error("Storage error saving %s for %s: %s", key, user_id, e)
                return False
        return True

    async def list(self, user_id: str, prefix: str = "") -> List[str]:
        try:
            return await self._call(
                f"list {prefix!r}", lambda: self.backend.list(user_id, prefix)
            )
        except StorageError as e:
            logger.error("Storage error listing keys for %s: %s", user_id, e)
            return []

    async def delete(self, user_id: str, key: str) -> bool:
        async with self._lock_for(user_id):
            try:
                await self._call(
                    f"delete {key}", lambda: self.backend.delete(user_id, key)
                )
            except StorageError as e:
                logger.error("Storage error deleting %s for %s: %s", key, user_id, e)
                return False
        return True
