"""
Base service classes and protocols.

Defines the cache capability injected into services and the shared
logging/cache plumbing.
"""

from abc import ABC
from typing import Any, Optional, Protocol, runtime_checkable
import logging


@runtime_checkable
class CacheProtocol(Protocol):
    """Protocol for cache implementations."""

    async def get(self, key: str) -> Optional[Any]:
        """Get value from cache."""
        ...

    async def set(
        self,
        key: str,
        value: Any,
        expire_seconds: Optional[int] = None,
    ) -> None:
        """Set value in cache."""
        ...

    async def delete(self, key: str) -> None:
        """Delete value from cache."""
        ...

    async def exists(self, key: str) -> bool:
        """Check if key exists in cache."""
        ...


class BaseService(ABC):
    """
    Abstract base class for all services.

    Provides common functionality:
    - Logging setup
    - Cache integration with errors downgraded to warnings
    """

    def __init__(
        self,
        cache: Optional[CacheProtocol] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._cache = cache
        self._logger = logger or logging.getLogger(self.__class__.__name__)

    @property
    def logger(self) -> logging.Logger:
        """Get the logger instance."""
        return self._logger

    @property
    def cache(self) -> Optional[CacheProtocol]:
        """Get the cache instance."""
        return self._cache

    async def _get_from_cache(self, key: str, default: Any = None) -> Any:
        """Get value from cache with fallback to default."""
        if self._cache is None:
            return default
        try:
            value = await self._cache.get(key)
            return value if value is not None else default
        except Exception as e:
            self._logger.warning(f"Cache get failed for key '{key}': {e}")
            return default

    async def _set_in_cache(
        self,
        key: str,
        value: Any,
        expire_seconds: Optional[int] = None,
    ) -> None:
        """Set value in cache, handling errors gracefully."""
        if self._cache is None:
            return
        try:
            await self._cache.set(key, value, expire_seconds)
        except Exception as e:
            self._logger.warning(f"Cache set failed for key '{key}': {e}")

    async def _delete_from_cache(self, key: str) -> None:
        """Delete value from cache, handling errors gracefully."""
        if self._cache is None:
            return
        try:
            await self._cache.delete(key)
        except Exception as e:
            self._logger.warning(f"Cache delete failed for key '{key}': {e}")
