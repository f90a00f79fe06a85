"""
Coach service: one call per user message.

Runs the interpreter and then the dispatcher, and wires the default
SQLite stores and LLM client when no collaborators are injected.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .action_dispatcher import ActionDispatcher
from .action_interpreter import ActionInterpreter
from .base import BaseService
from .entity_resolver import EntityResolver
from ..db.repositories import (
    ConversationHistoryRepository,
    FitnessRepository,
    UserProfileRepository,
    get_fitness_repository,
    get_history_repository,
    get_profile_repository,
)
from ..exceptions import ValidationError
from ..llm.providers import LLMClient


@dataclass
class CoachReply:
    """Result of handling one user message."""

    response: str
    action: Dict[str, Any]

    @property
    def action_kind(self) -> str:
        return self.action.get("action", "")


class CoachService(BaseService):
    """Facade over interpretation and dispatch."""

    def __init__(
        self,
        interpreter: ActionInterpreter,
        dispatcher: ActionDispatcher,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__(logger=logger)
        self._interpreter = interpreter
        self._dispatcher = dispatcher

    @property
    def resolver(self) -> EntityResolver:
        return self._dispatcher.resolver

    async def handle_message(self, utterance: str, user_id: str) -> CoachReply:
        """
        Interpret and execute one user message.

        Args:
            utterance: The raw user message
            user_id: The authenticated user

        Returns:
            The reply text and the action that produced it

        Raises:
            ValidationError: If the user id or message is empty
            RoutineNotFoundError: If the action targets another user's routine
            DatabaseError: If the store fails during dispatch
        """
        if not user_id:
            raise ValidationError("A user id is required", field="user_id")
        if not utterance or not utterance.strip():
            raise ValidationError("Message is empty", field="utterance")

        action = await self._interpreter.interpret(utterance, user_id)
        response = await self._dispatcher.dispatch(action, user_id)
        self.logger.info(f"Handled '{action.action}' for user {user_id}")
        return CoachReply(response=response, action=action.to_wire())


def build_coach_service(
    db_path: Optional[str] = None,
    llm_client: Optional[LLMClient] = None,
) -> CoachService:
    """
    Build a CoachService backed by the SQLite repositories.

    Args:
        db_path: Database file (defaults to the configured path)
        llm_client: LLM client (defaults to the shared singleton on first use)

    Returns:
        A ready-to-use CoachService
    """
    if db_path:
        fitness = FitnessRepository(db_path=db_path)
        history = ConversationHistoryRepository(db_path=db_path)
        profiles = UserProfileRepository(db_path=db_path)
    else:
        fitness = get_fitness_repository()
        history = get_history_repository()
        profiles = get_profile_repository()

    resolver = EntityResolver(fitness)
    interpreter = ActionInterpreter(
        history_store=history,
        profile_store=profiles,
        llm_client=llm_client,
    )
    return CoachService(interpreter, ActionDispatcher(resolver))
