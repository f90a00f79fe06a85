"""LLM integration for the workout coach."""

from .context_builder import build_profile_context, build_system_prompt
from .providers import LLMClient, RetryConfig, get_llm_client, reset_llm_client

__all__ = [
    "build_profile_context",
    "build_system_prompt",
    "LLMClient",
    "RetryConfig",
    "get_llm_client",
    "reset_llm_client",
]
