"""
Action Dispatcher: execute a parsed action and produce the reply text.

Every action string is normalized to its canonical kind before branching,
so all logging aliases ("log_workouts", "record_workout", ...) share one
code path. Storage failures and ownership violations propagate to the
caller; a dispatch that returns always returns non-empty text.
"""

import asyncio
import logging
from datetime import date
from typing import Awaitable, Callable, Dict, Optional, Union

from .base import BaseService
from .entity_resolver import DEFAULT_ROUTINE_NAME, DEFAULT_WORKOUT_NAME, EntityResolver, normalize_name
from ..llm.prompts import GENERIC_ACKNOWLEDGEMENT
from ..models.actions import (
    ActionKind,
    BaseAction,
    CheckInAction,
    CreateRoutineAction,
    DeleteRoutineAction,
    LogWorkoutAction,
    ParsedAction,
    RecommendationAction,
    canonical_kind,
    parse_action,
)


DEFAULT_NEW_ROUTINE_NAME = "New Routine"

Handler = Callable[[ParsedAction, str], Awaitable[Optional[str]]]


def _with_suggestion(reply: str, suggestion: Optional[str]) -> str:
    return f"{reply} Did you mean {suggestion}?" if suggestion else reply


class ActionDispatcher(BaseService):
    """Executes actions against the entity store through the resolver."""

    def __init__(
        self,
        resolver: EntityResolver,
        today: Callable[[], date] = date.today,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__(logger=logger)
        self._resolver = resolver
        self._store = resolver.store
        self._today = today
        self._handlers: Dict[ActionKind, Handler] = {
            ActionKind.LOG_WORKOUT: self._log_workout,
            ActionKind.CREATE_ROUTINE: self._create_routine,
            ActionKind.DELETE_ROUTINE: self._delete_routine,
            ActionKind.DELETE_WORKOUT: self._delete_workout,
            ActionKind.DELETE_SET: self._delete_sets,
            ActionKind.CHECK_IN: self._check_in,
            ActionKind.GET_RECOMMENDATION: self._recommendation,
        }

    @property
    def resolver(self) -> EntityResolver:
        return self._resolver

    async def dispatch(self, action: Union[ParsedAction, dict], user_id: str) -> str:
        """
        Execute an action on behalf of a user.

        Args:
            action: A parsed action, or a raw action object to parse first
            user_id: The authenticated user

        Returns:
            The reply text for the user, never empty

        Raises:
            ActionParseError: If a raw object cannot be parsed
            RoutineNotFoundError: If a routine is not owned by the user
            DatabaseError: If the store fails
        """
        if isinstance(action, dict):
            action = parse_action(action)

        kind = canonical_kind(action.action)
        handler = self._handlers.get(kind, self._reply_only)
        self.logger.debug(f"Dispatching {kind.value} ('{action.action}') for user {user_id}")

        reply = await handler(action, user_id)
        return reply or GENERIC_ACKNOWLEDGEMENT

    # ========================================================================
    # Workout management
    # ========================================================================

    async def _log_workout(self, action: LogWorkoutAction, user_id: str) -> Optional[str]:
        routine_id = await self._resolver.resolve_routine(user_id, action.routine_name)
        workout_id = await self._resolver.resolve_workout(
            user_id, routine_id, action.first_workout_name()
        )

        if action.total_calories:
            await self._store.update_workout_calories(workout_id, action.total_calories)
        if action.notes:
            await self._store.update_workout_notes(workout_id, action.notes)

        set_date = self._action_date(action)
        if action.sets:
            await asyncio.gather(*[
                self._store.create_set(
                    workout_id,
                    reps=s.reps,
                    weight=s.weight,
                    calories=s.calories or None,
                    set_date=set_date,
                )
                for s in action.sets
            ])

        self.logger.info(
            f"Logged {len(action.sets)} sets to workout {workout_id} for user {user_id}"
        )
        return action.reply_text()

    async def _create_routine(self, action: CreateRoutineAction, user_id: str) -> Optional[str]:
        name = normalize_name(action.routine_name, DEFAULT_NEW_ROUTINE_NAME)

        existing = await self._store.find_routine_by_name(user_id, name)
        if existing is not None:
            return f"You already have a routine named {existing.name}."

        await self._resolver.create_routine(user_id, name)
        return action.reply_text() or f"Routine {name} has been successfully created."

    async def _delete_routine(self, action: DeleteRoutineAction, user_id: str) -> Optional[str]:
        if not action.routine_name:
            return "Which routine would you like me to delete?"
        name = normalize_name(action.routine_name, DEFAULT_ROUTINE_NAME)

        routine_id = await self._resolver.find_routine(user_id, name, fuzzy=False)
        if routine_id is None:
            return await self._routine_miss(user_id, name)

        await self._store.delete_routine(user_id, routine_id)
        await self._resolver.invalidate_routines(user_id)
        await self._resolver.invalidate_workouts(routine_id)
        self.logger.info(f"Deleted routine {routine_id} for user {user_id}")
        return action.reply_text() or f"Routine {name} has been successfully deleted."

    async def _delete_workout(self, action: BaseAction, user_id: str) -> Optional[str]:
        found = await self._find_workout(action, user_id)
        if isinstance(found, str):
            return found
        routine_id, workout_id, name = found

        await self._store.delete_workout(workout_id)
        await self._resolver.invalidate_workouts(routine_id)
        self.logger.info(f"Deleted workout {workout_id} for user {user_id}")
        return action.reply_text() or f"Workout {name} has been successfully deleted."

    async def _delete_sets(self, action: BaseAction, user_id: str) -> Optional[str]:
        found = await self._find_workout(action, user_id)
        if isinstance(found, str):
            return found
        _, workout_id, name = found

        count = await self._store.delete_sets(workout_id)
        self.logger.info(f"Deleted {count} sets from workout {workout_id} for user {user_id}")
        return action.reply_text() or f"Sets for workout {name} have been successfully deleted."

    async def _find_workout(self, action, user_id: str):
        """Locate the targeted workout, or return the reply for a miss."""
        routine_name = normalize_name(action.routine_name, DEFAULT_ROUTINE_NAME)
        workout_name = normalize_name(action.first_workout_name(), DEFAULT_WORKOUT_NAME)

        routine_id = await self._resolver.find_routine(user_id, routine_name, fuzzy=False)
        if routine_id is None:
            return await self._routine_miss(user_id, routine_name)

        workout_id = await self._resolver.find_workout(
            user_id, routine_id, workout_name, fuzzy=False
        )
        if workout_id is None:
            reply = f"I couldn't find a workout named {workout_name} in {routine_name}."
            suggestion = await self._resolver.suggest_workout(routine_id, workout_name)
            return _with_suggestion(reply, suggestion)
        return routine_id, workout_id, workout_name

    async def _routine_miss(self, user_id: str, routine_name: str) -> str:
        reply = f"I couldn't find a routine named {routine_name}."
        suggestion = await self._resolver.suggest_routine(user_id, routine_name)
        return _with_suggestion(reply, suggestion)

    # ========================================================================
    # Conversational replies
    # ========================================================================

    async def _check_in(self, action: CheckInAction, user_id: str) -> Optional[str]:
        # The response already carries the intensity sentence
        return action.response or action.message

    async def _recommendation(self, action: RecommendationAction, user_id: str) -> Optional[str]:
        if action.recommendation is not None and action.recommendation.ai_message:
            return action.recommendation.ai_message
        return action.reply_text()

    async def _reply_only(self, action: BaseAction, user_id: str) -> Optional[str]:
        return action.reply_text()

    # ========================================================================
    # Private Methods
    # ========================================================================

    def _action_date(self, action: BaseAction) -> date:
        if action.date:
            try:
                return date.fromisoformat(action.date[:10])
            except ValueError:
                self.logger.warning(f"Ignoring unparseable action date '{action.date}'")
        return self._today()
