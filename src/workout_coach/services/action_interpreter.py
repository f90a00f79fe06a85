"""
Action Interpreter: free-text utterance in, structured action out.

This service orchestrates:
- Conversation history (read, append, trim, write back)
- Prompt construction from profile and history
- The model call under a wall-clock budget
- Parsing the reply into a ParsedAction

It is the error boundary for interpretation: provider failures, timeouts
and malformed output all become a fitness_question fallback action.
"""

import asyncio
import logging
from datetime import date
from typing import Callable, List, Optional

from .base import BaseService
from ..config import get_settings
from ..db.repositories.base import HistoryStore, ProfileStore
from ..exceptions import ActionParseError
from ..llm.context_builder import build_system_prompt
from ..llm.prompts import MALFORMED_OUTPUT_REPLY, PROVIDER_ERROR_REPLY
from ..llm.providers import LLMClient, get_llm_client
from ..models.actions import CheckInAction, FitnessQuestionAction, ParsedAction, parse_action
from ..models.entities import UserProfile
from ..recommendations.intensity import adjust_intensity, describe_adjustment


def fallback_action(response: str) -> FitnessQuestionAction:
    """The safe default action returned when interpretation fails."""
    return FitnessQuestionAction(action="fitness_question", response=response)


class ActionInterpreter(BaseService):
    """
    Turns a user utterance into a ParsedAction via the coach model.

    Features:
    - Keeps the last ``history_limit`` turns per user
    - Personalizes the prompt with the user's profile when complete
    - Never raises; failures collapse into a fitness_question fallback
    """

    def __init__(
        self,
        history_store: HistoryStore,
        profile_store: Optional[ProfileStore] = None,
        llm_client: Optional[LLMClient] = None,
        history_limit: Optional[int] = None,
        timeout_seconds: Optional[float] = None,
        today: Callable[[], date] = date.today,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """
        Initialize the interpreter.

        Args:
            history_store: Store for recent conversation turns
            profile_store: Store for user fitness profiles
            llm_client: LLM client (defaults to the shared singleton)
            history_limit: Number of turns kept in history
            timeout_seconds: Wall-clock budget for the model call
            today: Provider for the default action date
            logger: Optional logger instance
        """
        super().__init__(logger=logger)
        settings = get_settings()
        self._history_store = history_store
        self._profile_store = profile_store
        self._llm_client = llm_client
        self.history_limit = history_limit or settings.history_limit
        self.timeout_seconds = timeout_seconds or settings.llm_timeout_seconds
        self._today = today

    async def interpret(self, utterance: str, user_id: str) -> ParsedAction:
        """
        Interpret one utterance.

        Args:
            utterance: The raw user message
            user_id: The authenticated user

        Returns:
            The parsed action, or a fitness_question fallback
        """
        history = await self._load_history(user_id)
        history.append(utterance)
        history = history[-self.history_limit:]
        await self._save_history(user_id, history)

        profile = await self._load_profile(user_id)
        today = self._today()
        system_prompt = build_system_prompt(profile, history, today=today)

        try:
            client = self._llm_client or get_llm_client()
            raw_output = await asyncio.wait_for(
                client.completion(system=system_prompt, user=utterance),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            self.logger.warning(
                f"Model call timed out after {self.timeout_seconds}s for user {user_id}"
            )
            return fallback_action(PROVIDER_ERROR_REPLY)
        except Exception as e:
            self.logger.error(f"Error during AI processing: {e}")
            return fallback_action(PROVIDER_ERROR_REPLY)

        try:
            action = parse_action(raw_output)
        except ActionParseError as e:
            self.logger.warning(f"Error parsing AI response: {e.message}")
            action = fallback_action(MALFORMED_OUTPUT_REPLY)

        if not action.date:
            action.date = today.isoformat()

        if isinstance(action, CheckInAction) and action.check_in is not None:
            multiplier = adjust_intensity(action.check_in)
            addition = describe_adjustment(multiplier)
            if addition:
                action.response = f"{action.response or ''}{addition}".strip()
            self.logger.debug(f"Check-in intensity multiplier {multiplier} for user {user_id}")

        return action

    # ========================================================================
    # Private Methods
    # ========================================================================

    async def _load_history(self, user_id: str) -> List[str]:
        try:
            return list(await self._history_store.get(user_id))
        except Exception as e:
            self.logger.warning(f"Error fetching history for user {user_id}: {e}")
            return []

    async def _save_history(self, user_id: str, history: List[str]) -> None:
        try:
            await self._history_store.put(user_id, history)
        except Exception as e:
            self.logger.warning(f"Error updating history for user {user_id}: {e}")

    async def _load_profile(self, user_id: str) -> Optional[UserProfile]:
        if self._profile_store is None:
            return None
        try:
            return await self._profile_store.get_profile(user_id)
        except Exception as e:
            self.logger.warning(f"Error fetching profile for user {user_id}: {e}")
            return None
