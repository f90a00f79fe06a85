"""SQLite-backed repository for routines, workouts and sets."""

import sqlite3
import uuid
from datetime import date, datetime
from typing import List, Optional

from .base import EntityStore, SQLiteRepository
from ...models.entities import Routine, SetRecord, Workout


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    return date.fromisoformat(value[:10])


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value)


class FitnessRepository(SQLiteRepository, EntityStore):
    """
    SQLite-backed store for Routine, Workout and Set entities.

    Each call runs on a worker thread and commits its own short-lived
    connection, so every create/update/delete is atomic on its own while
    multi-step sequences are not.
    """

    # ========================================================================
    # Row mapping
    # ========================================================================

    def _row_to_routine(self, row: sqlite3.Row) -> Routine:
        return Routine(
            id=row["id"],
            name=row["name"],
            owner_user_id=row["user_id"],
            created_at=_parse_datetime(row["created_at"]),
        )

    def _row_to_workout(self, row: sqlite3.Row) -> Workout:
        return Workout(
            id=row["id"],
            name=row["name"],
            routine_id=row["routine_id"],
            date=_parse_date(row["date"]),
            total_calories=row["total_calories"],
            duration_minutes=row["duration_minutes"],
            notes=row["notes"],
        )

    def _row_to_set(self, row: sqlite3.Row) -> SetRecord:
        return SetRecord(
            id=row["id"],
            workout_id=row["workout_id"],
            reps=row["reps"],
            weight=row["weight"],
            calories=row["calories"],
            date=_parse_date(row["date"]),
        )

    # ========================================================================
    # Routines
    # ========================================================================

    async def find_routine_by_name(self, user_id: str, name: str) -> Optional[Routine]:
        row = await self._run(lambda conn: conn.execute(
            """
            SELECT * FROM routines
            WHERE user_id = ? AND name = ? COLLATE NOCASE
            ORDER BY created_at
            LIMIT 1
            """,
            (user_id, name),
        ).fetchone())
        return self._row_to_routine(row) if row else None

    async def get_routine(self, user_id: str, routine_id: str) -> Optional[Routine]:
        row = await self._run(lambda conn: conn.execute(
            "SELECT * FROM routines WHERE id = ? AND user_id = ?",
            (routine_id, user_id),
        ).fetchone())
        return self._row_to_routine(row) if row else None

    async def list_routines(self, user_id: str) -> List[Routine]:
        rows = await self._run(lambda conn: conn.execute(
            "SELECT * FROM routines WHERE user_id = ? ORDER BY created_at DESC, rowid DESC",
            (user_id,),
        ).fetchall())
        return [self._row_to_routine(row) for row in rows]

    async def create_routine(self, user_id: str, name: str) -> Routine:
        routine_id = str(uuid.uuid4())
        now = datetime.now().isoformat()
        await self._run(lambda conn: conn.execute(
            "INSERT INTO routines (id, name, user_id, created_at) VALUES (?, ?, ?, ?)",
            (routine_id, name, user_id, now),
        ))
        return Routine(
            id=routine_id,
            name=name,
            owner_user_id=user_id,
            created_at=datetime.fromisoformat(now),
        )

    async def delete_routine(self, user_id: str, routine_id: str) -> bool:
        deleted = await self._run(lambda conn: conn.execute(
            "DELETE FROM routines WHERE id = ? AND user_id = ?",
            (routine_id, user_id),
        ).rowcount)
        return deleted > 0

    # ========================================================================
    # Workouts
    # ========================================================================

    async def find_workout_by_name(self, routine_id: str, name: str) -> Optional[Workout]:
        row = await self._run(lambda conn: conn.execute(
            """
            SELECT * FROM workouts
            WHERE routine_id = ? AND name = ? COLLATE NOCASE
            ORDER BY created_at
            LIMIT 1
            """,
            (routine_id, name),
        ).fetchone())
        return self._row_to_workout(row) if row else None

    async def get_workout(self, user_id: str, workout_id: str) -> Optional[Workout]:
        row = await self._run(lambda conn: conn.execute(
            """
            SELECT w.* FROM workouts w
            JOIN routines r ON r.id = w.routine_id
            WHERE w.id = ? AND r.user_id = ?
            """,
            (workout_id, user_id),
        ).fetchone())
        return self._row_to_workout(row) if row else None

    async def list_workouts(self, routine_id: str) -> List[Workout]:
        rows = await self._run(lambda conn: conn.execute(
            "SELECT * FROM workouts WHERE routine_id = ? ORDER BY created_at, rowid",
            (routine_id,),
        ).fetchall())
        return [self._row_to_workout(row) for row in rows]

    async def create_workout(
        self,
        routine_id: str,
        name: str,
        workout_date: Optional[date] = None,
    ) -> Workout:
        workout_id = str(uuid.uuid4())
        workout_date = workout_date or date.today()
        await self._run(lambda conn: conn.execute(
            """
            INSERT INTO workouts (id, name, routine_id, date, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (workout_id, name, routine_id, workout_date.isoformat(), datetime.now().isoformat()),
        ))
        return Workout(id=workout_id, name=name, routine_id=routine_id, date=workout_date)

    async def update_workout_calories(self, workout_id: str, total_calories: float) -> None:
        await self._run(lambda conn: conn.execute(
            "UPDATE workouts SET total_calories = ? WHERE id = ?",
            (total_calories, workout_id),
        ))

    async def update_workout_notes(self, workout_id: str, notes: str) -> None:
        await self._run(lambda conn: conn.execute(
            "UPDATE workouts SET notes = ? WHERE id = ?",
            (notes, workout_id),
        ))

    async def delete_workout(self, workout_id: str) -> bool:
        deleted = await self._run(lambda conn: conn.execute(
            "DELETE FROM workouts WHERE id = ?", (workout_id,)
        ).rowcount)
        return deleted > 0

    # ========================================================================
    # Sets
    # ========================================================================

    async def create_set(
        self,
        workout_id: str,
        reps: int,
        weight: float,
        calories: Optional[float] = None,
        set_date: Optional[date] = None,
    ) -> SetRecord:
        set_id = str(uuid.uuid4())
        set_date = set_date or date.today()
        await self._run(lambda conn: conn.execute(
            """
            INSERT INTO sets (id, workout_id, reps, weight, calories, date, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                set_id,
                workout_id,
                reps,
                weight,
                calories,
                set_date.isoformat(),
                datetime.now().isoformat(),
            ),
        ))
        return SetRecord(
            id=set_id,
            workout_id=workout_id,
            reps=reps,
            weight=weight,
            calories=calories,
            date=set_date,
        )

    async def list_sets(self, workout_id: str) -> List[SetRecord]:
        rows = await self._run(lambda conn: conn.execute(
            "SELECT * FROM sets WHERE workout_id = ? ORDER BY created_at, rowid",
            (workout_id,),
        ).fetchall())
        return [self._row_to_set(row) for row in rows]

    async def delete_sets(self, workout_id: str) -> int:
        return await self._run(lambda conn: conn.execute(
            "DELETE FROM sets WHERE workout_id = ?", (workout_id,)
        ).rowcount)


_fitness_repository: Optional[FitnessRepository] = None


def get_fitness_repository(db_path: Optional[str] = None) -> FitnessRepository:
    """Get or create the fitness repository singleton."""
    global _fitness_repository
    if _fitness_repository is None:
        _fitness_repository = FitnessRepository(db_path=db_path)
    return _fitness_repository
