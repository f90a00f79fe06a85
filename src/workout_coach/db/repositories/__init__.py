"""Repository implementations for the Workout Coach store.

The services depend only on the abstract stores, so the SQLite
repositories here can be replaced by any other backend.
"""

from .base import EntityStore, HistoryStore, ProfileStore, SQLiteRepository
from .fitness_repository import FitnessRepository, get_fitness_repository
from .history_repository import ConversationHistoryRepository, get_history_repository
from .profile_repository import UserProfileRepository, get_profile_repository

__all__ = [
    # Store interfaces
    "EntityStore",
    "HistoryStore",
    "ProfileStore",
    "SQLiteRepository",
    # SQLite implementations
    "FitnessRepository",
    "get_fitness_repository",
    "ConversationHistoryRepository",
    "get_history_repository",
    "UserProfileRepository",
    "get_profile_repository",
]
