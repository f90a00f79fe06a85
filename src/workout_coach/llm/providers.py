"""
LLM provider for the coach.

This module provides a single-shot completion interface with:
- Automatic retry with exponential backoff
- Rate limit handling
- Per-request timeouts
- Custom exceptions for every failure mode
- Request metrics
"""

from typing import Awaitable, Callable, Dict, Optional, TypeVar, Any
import asyncio
import logging
import os
import threading
import time

from openai import AsyncOpenAI, APIError, RateLimitError, APIConnectionError

from ..config import get_settings
from ..exceptions import (
    LLMServiceUnavailableError,
    LLMRateLimitError,
    LLMTimeoutError,
    LLMResponseInvalidError,
    LLMError,
)


logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryConfig:
    """Configuration for retry behavior."""

    def __init__(
        self,
        max_retries: int = 2,
        base_delay: float = 1.0,
        max_delay: float = 10.0,
        exponential_base: float = 2.0,
        retryable_status_codes: Optional[set[int]] = None,
    ) -> None:
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.retryable_status_codes = retryable_status_codes or {429, 500, 502, 503, 504}

    def get_delay(self, attempt: int) -> float:
        """Calculate delay for a given attempt number."""
        delay = self.base_delay * (self.exponential_base ** attempt)
        return min(delay, self.max_delay)


class LLMMetrics:
    """Track LLM usage metrics."""

    def __init__(self) -> None:
        self.total_requests = 0
        self.successful_requests = 0
        self.failed_requests = 0
        self.retried_requests = 0
        self._request_times: list[float] = []

    def record_request(
        self,
        success: bool,
        retried: bool = False,
        duration_ms: Optional[float] = None,
    ) -> None:
        """Record a request."""
        self.total_requests += 1
        if success:
            self.successful_requests += 1
        else:
            self.failed_requests += 1
        if retried:
            self.retried_requests += 1
        if duration_ms is not None:
            self._request_times.append(duration_ms)
            # Keep only last 100 request times
            if len(self._request_times) > 100:
                self._request_times = self._request_times[-100:]

    @property
    def avg_request_time_ms(self) -> float:
        """Average request time in milliseconds."""
        if not self._request_times:
            return 0.0
        return sum(self._request_times) / len(self._request_times)

    def to_dict(self) -> Dict[str, Any]:
        """Convert metrics to dictionary."""
        return {
            "total_requests": self.total_requests,
            "successful_requests": self.successful_requests,
            "failed_requests": self.failed_requests,
            "retried_requests": self.retried_requests,
            "avg_request_time_ms": round(self.avg_request_time_ms, 2),
        }


class LLMClient:
    """
    Chat-completion client with retry logic and error mapping.

    Every provider failure surfaces as an LLMError subclass so callers
    have one exception family to handle.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        retry_config: Optional[RetryConfig] = None,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        """
        Initialize the LLM client.

        Args:
            api_key: OpenAI API key (defaults to settings or env var)
            model: Model id (defaults to settings.llm_model)
            retry_config: Configuration for retry behavior
            client: Pre-built AsyncOpenAI client
        """
        settings = get_settings()

        if client is None:
            api_key = api_key or settings.openai_api_key or os.environ.get("OPENAI_API_KEY")
            if not api_key:
                raise LLMServiceUnavailableError(
                    message="OPENAI_API_KEY not configured",
                    details={"configuration_missing": "openai_api_key"},
                )
            client = AsyncOpenAI(api_key=api_key)

        self.client = client
        self.model = model or settings.llm_model
        self.retry_config = retry_config or RetryConfig()
        self.metrics = LLMMetrics()
        self._logger = logger

    async def _execute_with_retry(
        self,
        operation: Callable[[], Awaitable[T]],
        operation_name: str = "LLM request",
    ) -> T:
        """
        Execute an operation with retry logic.

        Args:
            operation: Async callable to execute
            operation_name: Name for logging

        Returns:
            The operation result

        Raises:
            LLMError: On unrecoverable failure
        """
        retried = False

        for attempt in range(self.retry_config.max_retries + 1):
            start_time = time.time()
            has_retries_left = attempt < self.retry_config.max_retries

            try:
                result = await operation()
                self.metrics.record_request(
                    success=True,
                    retried=retried,
                    duration_ms=(time.time() - start_time) * 1000,
                )
                return result

            except RateLimitError as e:
                retried = True
                retry_after = getattr(e, "retry_after", None)
                if not has_retries_left:
                    self.metrics.record_request(success=False, retried=True)
                    raise LLMRateLimitError(retry_after=retry_after) from e
                delay = retry_after or self.retry_config.get_delay(attempt)
                self._logger.warning(
                    f"{operation_name} rate limited. "
                    f"Retry {attempt + 1}/{self.retry_config.max_retries} in {delay:.1f}s"
                )
                await asyncio.sleep(delay)

            except APIConnectionError as e:
                retried = True
                if not has_retries_left:
                    self.metrics.record_request(success=False, retried=True)
                    raise LLMServiceUnavailableError(
                        message=f"Connection to LLM service failed: {e}",
                    ) from e
                delay = self.retry_config.get_delay(attempt)
                self._logger.warning(
                    f"{operation_name} connection error. "
                    f"Retry {attempt + 1}/{self.retry_config.max_retries} in {delay:.1f}s: {e}"
                )
                await asyncio.sleep(delay)

            except APIError as e:
                status = getattr(e, "status_code", 500)
                if status not in self.retry_config.retryable_status_codes:
                    self.metrics.record_request(success=False, retried=retried)
                    raise LLMError(
                        message=f"LLM API error: {e}",
                        details={"status_code": status},
                    ) from e
                retried = True
                if not has_retries_left:
                    self.metrics.record_request(success=False, retried=True)
                    raise LLMServiceUnavailableError(
                        message=f"LLM API error after retries: {e}",
                        details={"status_code": status},
                    ) from e
                delay = self.retry_config.get_delay(attempt)
                self._logger.warning(
                    f"{operation_name} API error (status {status}). "
                    f"Retry {attempt + 1}/{self.retry_config.max_retries} in {delay:.1f}s"
                )
                await asyncio.sleep(delay)

            except asyncio.TimeoutError as e:
                self.metrics.record_request(success=False, retried=retried)
                raise LLMTimeoutError() from e

            except LLMError:
                self.metrics.record_request(success=False, retried=retried)
                raise

            except Exception as e:
                self.metrics.record_request(success=False, retried=retried)
                self._logger.error(f"Unexpected error in {operation_name}: {e}")
                raise LLMError(message=f"Unexpected LLM error: {e}") from e

        raise LLMError(message=f"{operation_name} failed after all retries")

    async def completion(
        self,
        system: str,
        user: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        timeout: Optional[float] = None,
    ) -> str:
        """
        Get a completion from the LLM.

        Args:
            system: System prompt
            user: User message
            max_tokens: Maximum tokens in response
            temperature: Sampling temperature
            timeout: Per-attempt timeout in seconds

        Returns:
            The assistant's response text

        Raises:
            LLMError: On failure
        """
        settings = get_settings()
        max_tokens = max_tokens or settings.llm_max_tokens
        temperature = settings.llm_temperature if temperature is None else temperature
        timeout = timeout or settings.llm_timeout_seconds

        async def _make_request() -> str:
            response = await asyncio.wait_for(
                self.client.chat.completions.create(
                    model=self.model,
                    messages=[
                        {"role": "system", "content": system},
                        {"role": "user", "content": user},
                    ],
                    max_tokens=max_tokens,
                    temperature=temperature,
                ),
                timeout=timeout,
            )
            content = response.choices[0].message.content
            if content is None:
                raise LLMResponseInvalidError(message="Empty response from LLM")
            return content

        return await self._execute_with_retry(_make_request, "completion")

    def get_metrics(self) -> Dict[str, Any]:
        """Get current metrics."""
        return self.metrics.to_dict()


# Singleton instance with thread-safe locking
_llm_client: Optional[LLMClient] = None
_llm_client_lock = threading.Lock()


def get_llm_client() -> LLMClient:
    """
    Get the LLM client singleton (thread-safe).

    Returns:
        The LLM client instance
    """
    global _llm_client
    if _llm_client is None:
        with _llm_client_lock:
            if _llm_client is None:
                _llm_client = LLMClient()
    return _llm_client


def reset_llm_client() -> None:
    """Reset the LLM client singleton (for testing)."""
    global _llm_client
    with _llm_client_lock:
        _llm_client = None
