"""Service layer for the Workout Coach core."""

from .action_dispatcher import ActionDispatcher
from .action_interpreter import ActionInterpreter, fallback_action
from .base import BaseService, CacheProtocol
from .cache import NullCache, TTLCache
from .coach import CoachReply, CoachService, build_coach_service
from .entity_resolver import EntityResolver, fuzzy_match, name_distance, normalize_name, similarity

__all__ = [
    # Base classes
    "BaseService",
    "CacheProtocol",
    # Caches
    "TTLCache",
    "NullCache",
    # Services
    "EntityResolver",
    "ActionInterpreter",
    "ActionDispatcher",
    "CoachService",
    "CoachReply",
    "build_coach_service",
    # Helpers
    "fallback_action",
    "fuzzy_match",
    "name_distance",
    "normalize_name",
    "similarity",
]
