"""Base store interfaces and the shared SQLite repository plumbing.

The core only talks to the abstract stores below, so the SQLite
implementations can be swapped for any other backend.
"""

import asyncio
import os
import sqlite3
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import date
from pathlib import Path
from typing import Callable, Iterator, List, Optional, TypeVar

from ..schema import SCHEMA
from ...exceptions import DatabaseError, DataIntegrityError
from ...models.entities import Routine, SetRecord, UserProfile, Workout


T = TypeVar("T")


class EntityStore(ABC):
    """
    Persistence for routines, workouts and sets.

    Routine operations are scoped by owner. Workout operations are scoped by
    routine; callers confirm routine ownership first.
    """

    # Routines

    @abstractmethod
    async def find_routine_by_name(self, user_id: str, name: str) -> Optional[Routine]:
        """Case-insensitive exact name match within the user's routines."""

    @abstractmethod
    async def get_routine(self, user_id: str, routine_id: str) -> Optional[Routine]:
        """Get a routine only if it belongs to the user."""

    @abstractmethod
    async def list_routines(self, user_id: str) -> List[Routine]:
        """All routines owned by the user, newest first."""

    @abstractmethod
    async def create_routine(self, user_id: str, name: str) -> Routine:
        """Create a routine owned by the user."""

    @abstractmethod
    async def delete_routine(self, user_id: str, routine_id: str) -> bool:
        """Delete a routine with its workouts and sets."""

    # Workouts

    @abstractmethod
    async def find_workout_by_name(self, routine_id: str, name: str) -> Optional[Workout]:
        """Case-insensitive exact name match within a routine."""

    @abstractmethod
    async def get_workout(self, user_id: str, workout_id: str) -> Optional[Workout]:
        """Get a workout only if its routine belongs to the user."""

    @abstractmethod
    async def list_workouts(self, routine_id: str) -> List[Workout]:
        """All workouts in a routine."""

    @abstractmethod
    async def create_workout(
        self,
        routine_id: str,
        name: str,
        workout_date: Optional[date] = None,
    ) -> Workout:
        """Create a workout inside a routine."""

    @abstractmethod
    async def update_workout_calories(self, workout_id: str, total_calories: float) -> None:
        """Set the workout's total calories burned."""

    @abstractmethod
    async def update_workout_notes(self, workout_id: str, notes: str) -> None:
        """Replace the workout's notes."""

    @abstractmethod
    async def delete_workout(self, workout_id: str) -> bool:
        """Delete a workout with its sets."""

    # Sets

    @abstractmethod
    async def create_set(
        self,
        workout_id: str,
        reps: int,
        weight: float,
        calories: Optional[float] = None,
        set_date: Optional[date] = None,
    ) -> SetRecord:
        """Append a set to a workout."""

    @abstractmethod
    async def list_sets(self, workout_id: str) -> List[SetRecord]:
        """All sets logged against a workout, oldest first."""

    @abstractmethod
    async def delete_sets(self, workout_id: str) -> int:
        """Delete every set of a workout, returning how many were removed."""


class HistoryStore(ABC):
    """Ordered log of recent conversation turns per user."""

    @abstractmethod
    async def get(self, user_id: str) -> List[str]:
        """Get the stored turns, oldest first."""

    @abstractmethod
    async def put(self, user_id: str, messages: List[str]) -> None:
        """Replace the stored turns."""


class ProfileStore(ABC):
    """Read access to user fitness profiles."""

    @abstractmethod
    async def get_profile(self, user_id: str) -> Optional[UserProfile]:
        """Get the user's profile, or None if they never filled it in."""


def default_db_path() -> Path:
    """Resolve the database path from the environment or settings."""
    env_path = os.environ.get("WORKOUT_COACH_DB_PATH")
    if env_path:
        return Path(env_path)
    from ...config import get_settings

    return Path(get_settings().database_path)


class SQLiteRepository:
    """
    Connection handling shared by the SQLite-backed repositories.

    ``sqlite3`` blocks, so async store methods hand their statements to
    ``_run``, which executes them on a worker thread with a fresh connection.
    Calls on one repository are serialized; SQLite allows a single writer.
    """

    def __init__(self, db_path: Optional[str] = None):
        """
        Initialize the repository.

        Args:
            db_path: Path to SQLite database file. If None, uses
                    WORKOUT_COACH_DB_PATH or the configured database_path.
        """
        self.db_path = Path(db_path) if db_path else default_db_path()
        self._lock = threading.Lock()
        self._ensure_schema()

    @contextmanager
    def _get_connection(self) -> Iterator[sqlite3.Connection]:
        """Get database connection with context manager."""
        try:
            conn = sqlite3.connect(str(self.db_path))
        except sqlite3.Error as e:
            raise DatabaseError(
                message=f"Could not open database: {e}",
                operation="connect",
                details={"db_path": str(self.db_path)},
            ) from e
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
            conn.commit()
        except sqlite3.IntegrityError as e:
            conn.rollback()
            raise DataIntegrityError(message=f"Integrity constraint failed: {e}") from e
        except sqlite3.Error as e:
            conn.rollback()
            raise DatabaseError(message=f"Database operation failed: {e}") from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    async def _run(self, operation: Callable[[sqlite3.Connection], T]) -> T:
        """Run ``operation`` in a worker thread on its own committed connection."""

        def _do() -> T:
            with self._lock, self._get_connection() as conn:
                return operation(conn)

        return await asyncio.to_thread(_do)

    def _ensure_schema(self) -> None:
        """Create tables and indexes if they do not exist."""
        with self._get_connection() as conn:
            conn.executescript(SCHEMA)
