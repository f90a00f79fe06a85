"""
Entity Resolver: turn free-text routine/workout names into stored ids.

Resolution order for both levels:
1. Exact case-insensitive match in the owner scope (cheap, no fuzzy work)
2. Fuzzy match against the owner's cached candidate list
3. Create a new entity and invalidate the candidate cache

The fuzzy threshold is strict: "Arm Day" must never resolve to "Leg Day",
so weak matches fall through to creation. Destructive callers pass
``fuzzy=False`` and only ever act on an exact name.
"""

import logging
from difflib import SequenceMatcher
from typing import List, Optional, Sequence

from .base import BaseService, CacheProtocol
from .cache import TTLCache
from ..config import get_settings
from ..db.repositories.base import EntityStore
from ..exceptions import RoutineNotFoundError
from ..models.entities import NamedEntity


DEFAULT_ROUTINE_NAME = "General Workout"
DEFAULT_WORKOUT_NAME = "Workout"


def normalize_name(name: Optional[str], default: str) -> str:
    """Collapse whitespace and fall back to ``default`` for empty names."""
    if not name:
        return default
    normalized = " ".join(name.split())
    return normalized or default


def similarity(a: str, b: str) -> float:
    """Case-insensitive similarity ratio in [0, 1]."""
    return SequenceMatcher(None, a.lower(), b.lower()).ratio()


def name_distance(candidate: str, name: str) -> float:
    """
    Distance from the name being resolved to a stored name.

    Edit cost is counted against the length of ``candidate`` so a short
    stored name inside a longer one ("Bench Press" in "Incline Bench Press")
    stays far away. The symmetric ``1 - similarity`` acts as a floor.

    Returns:
        Distance in [0, 1+], lower is closer
    """
    a, b = candidate.lower(), name.lower()
    if not a:
        return 0.0 if not b else 1.0
    matcher = SequenceMatcher(None, a, b)
    edits = 0
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag != "equal":
            edits += max(i2 - i1, j2 - j1)
    return max(edits / len(a), 1.0 - matcher.ratio())


def fuzzy_match(
    candidate: str,
    entities: Sequence[NamedEntity],
    threshold: float = 0.3,
) -> Optional[NamedEntity]:
    """
    Find the closest entity by name.

    Args:
        candidate: Name to look for
        entities: Candidates to compare against
        threshold: Maximum accepted distance (see ``name_distance``)

    Returns:
        The closest entity within the threshold, or None
    """
    best: Optional[NamedEntity] = None
    best_distance = 0.0
    for entity in entities:
        distance = name_distance(candidate, entity.name)
        if distance <= threshold and (best is None or distance < best_distance):
            best = entity
            best_distance = distance
    return best


class EntityResolver(BaseService):
    """
    Find-or-create resolution for routines and workouts.

    Candidate lists are cached per owner with a short TTL. Any create goes
    through this service so the matching cache entry is dropped right away
    and the next lookup sees the new entity.
    """

    def __init__(
        self,
        store: EntityStore,
        cache: Optional[CacheProtocol] = None,
        threshold: Optional[float] = None,
        cache_ttl_seconds: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """
        Initialize the resolver.

        Args:
            store: Entity persistence store
            cache: Candidate-list cache (defaults to a process-local TTLCache)
            threshold: Maximum fuzzy distance accepted as a match
            cache_ttl_seconds: TTL for cached candidate lists
            logger: Optional logger instance
        """
        settings = get_settings()
        self.cache_ttl_seconds = (
            cache_ttl_seconds if cache_ttl_seconds is not None
            else settings.lookup_cache_ttl_seconds
        )
        super().__init__(
            cache=cache if cache is not None else TTLCache(self.cache_ttl_seconds),
            logger=logger,
        )
        self._store = store
        self.threshold = threshold if threshold is not None else settings.fuzzy_match_threshold

    @property
    def store(self) -> EntityStore:
        return self._store

    # ========================================================================
    # Routines
    # ========================================================================

    async def find_routine(
        self,
        user_id: str,
        routine_name: Optional[str],
        fuzzy: bool = True,
    ) -> Optional[str]:
        """
        Look up a routine by exact then fuzzy name without creating one.

        Args:
            user_id: Owner of the routine
            routine_name: Name to look for
            fuzzy: If False, only a case-insensitive exact match counts

        Returns:
            The routine id, or None if nothing matched
        """
        name = normalize_name(routine_name, DEFAULT_ROUTINE_NAME)

        exact = await self._store.find_routine_by_name(user_id, name)
        if exact is not None:
            return exact.id
        if not fuzzy:
            return None

        candidates = await self._routine_candidates(user_id)
        match = fuzzy_match(name, candidates, self.threshold)
        if match is not None:
            self.logger.debug(f"Fuzzy matched routine '{name}' to '{match.name}'")
            return match.id
        return None

    async def resolve_routine(self, user_id: str, routine_name: Optional[str]) -> str:
        """
        Return the id of the user's routine matching ``routine_name``,
        creating it when no existing routine is close enough.
        """
        name = normalize_name(routine_name, DEFAULT_ROUTINE_NAME)

        routine_id = await self.find_routine(user_id, name)
        if routine_id is not None:
            return routine_id

        return await self.create_routine(user_id, name)

    async def create_routine(self, user_id: str, routine_name: str) -> str:
        """Create a routine unconditionally and drop the cached candidates."""
        routine = await self._store.create_routine(user_id, routine_name)
        await self._delete_from_cache(self._routines_key(user_id))
        self.logger.info(f"Created routine '{routine_name}' for user {user_id}")
        return routine.id

    async def suggest_routine(self, user_id: str, routine_name: str) -> Optional[str]:
        """Name of the closest routine within the fuzzy threshold, if any."""
        match = fuzzy_match(routine_name, await self._routine_candidates(user_id), self.threshold)
        return match.name if match is not None else None

    # ========================================================================
    # Workouts
    # ========================================================================

    async def find_workout(
        self,
        user_id: str,
        routine_id: str,
        workout_name: Optional[str],
        fuzzy: bool = True,
    ) -> Optional[str]:
        """
        Look up a workout inside one of the user's routines without creating.

        Raises:
            RoutineNotFoundError: If the routine is not owned by the user
        """
        await self._require_routine(user_id, routine_id)
        name = normalize_name(workout_name, DEFAULT_WORKOUT_NAME)

        exact = await self._store.find_workout_by_name(routine_id, name)
        if exact is not None:
            return exact.id
        if not fuzzy:
            return None

        candidates = await self._workout_candidates(routine_id)
        match = fuzzy_match(name, candidates, self.threshold)
        if match is not None:
            self.logger.debug(f"Fuzzy matched workout '{name}' to '{match.name}'")
            return match.id
        return None

    async def resolve_workout(
        self,
        user_id: str,
        routine_id: str,
        workout_name: Optional[str],
    ) -> str:
        """
        Return the id of the workout matching ``workout_name`` in the routine,
        creating it when no existing workout is close enough.

        Raises:
            RoutineNotFoundError: If the routine is not owned by the user.
                Nothing is created in that case.
        """
        name = normalize_name(workout_name, DEFAULT_WORKOUT_NAME)

        workout_id = await self.find_workout(user_id, routine_id, name)
        if workout_id is not None:
            return workout_id

        workout = await self._store.create_workout(routine_id, name)
        await self._delete_from_cache(self._workouts_key(routine_id))
        self.logger.info(f"Created workout '{name}' in routine {routine_id}")
        return workout.id

    async def suggest_workout(self, routine_id: str, workout_name: str) -> Optional[str]:
        """Name of the closest workout in the routine within the fuzzy threshold."""
        match = fuzzy_match(workout_name, await self._workout_candidates(routine_id), self.threshold)
        return match.name if match is not None else None

    # ========================================================================
    # Cache maintenance
    # ========================================================================

    async def invalidate_routines(self, user_id: str) -> None:
        await self._delete_from_cache(self._routines_key(user_id))

    async def invalidate_workouts(self, routine_id: str) -> None:
        await self._delete_from_cache(self._workouts_key(routine_id))

    # ========================================================================
    # Private Methods
    # ========================================================================

    @staticmethod
    def _routines_key(user_id: str) -> str:
        return f"routines:{user_id}"

    @staticmethod
    def _workouts_key(routine_id: str) -> str:
        return f"workouts:{routine_id}"

    async def _require_routine(self, user_id: str, routine_id: str) -> None:
        routine = await self._store.get_routine(user_id, routine_id)
        if routine is None:
            self.logger.warning(
                f"Rejected access to routine {routine_id} by user {user_id}"
            )
            raise RoutineNotFoundError(routine_id, details={"user_id": user_id})

    async def _routine_candidates(self, user_id: str) -> List[NamedEntity]:
        key = self._routines_key(user_id)
        cached = await self._get_from_cache(key)
        if cached is not None:
            return cached

        routines = await self._store.list_routines(user_id)
        candidates = [NamedEntity(id=r.id, name=r.name) for r in routines]
        await self._set_in_cache(key, candidates, self.cache_ttl_seconds)
        return candidates

    async def _workout_candidates(self, routine_id: str) -> List[NamedEntity]:
        key = self._workouts_key(routine_id)
        cached = await self._get_from_cache(key)
        if cached is not None:
            return cached

        workouts = await self._store.list_workouts(routine_id)
        candidates = [NamedEntity(id=w.id, name=w.name) for w in workouts]
        await self._set_in_cache(key, candidates, self.cache_ttl_seconds)
        return candidates
