"""In-process cache implementations of CacheProtocol."""

import time
from typing import Any, Callable, Dict, Optional, Tuple


class TTLCache:
    """
    Process-local cache with per-entry expiry.

    Suitable for a single instance. Multi-instance deployments should inject
    a shared cache implementing the same protocol.
    """

    def __init__(
        self,
        default_ttl_seconds: Optional[int] = 30,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.default_ttl_seconds = default_ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[Any, Optional[float]]] = {}

    async def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    async def set(
        self,
        key: str,
        value: Any,
        expire_seconds: Optional[int] = None,
    ) -> None:
        ttl = expire_seconds if expire_seconds is not None else self.default_ttl_seconds
        expires_at = self._clock() + ttl if ttl is not None else None
        self._entries[key] = (value, expires_at)

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def exists(self, key: str) -> bool:
        return await self.get(key) is not None

    def clear(self) -> int:
        """Drop every entry, returning how many were held."""
        count = len(self._entries)
        self._entries.clear()
        return count


class NullCache:
    """Cache that stores nothing; every read is a miss."""

    async def get(self, key: str) -> Optional[Any]:
        return None

    async def set(
        self,
        key: str,
        value: Any,
        expire_seconds: Optional[int] = None,
    ) -> None:
        return None

    async def delete(self, key: str) -> None:
        return None

    async def exists(self, key: str) -> bool:
        return False
