"""SQLite-backed repository for user fitness profiles."""

import sqlite3
from datetime import datetime
from typing import Optional

from .base import ProfileStore, SQLiteRepository
from ...models.entities import UserProfile


class UserProfileRepository(SQLiteRepository, ProfileStore):
    """Stores the profile fields used to personalize coaching prompts."""

    def _row_to_profile(self, row: sqlite3.Row) -> UserProfile:
        return UserProfile(
            user_id=row["user_id"],
            current_weight=row["current_weight"],
            height=row["height"],
            goal_weight=row["goal_weight"],
            fitness_goal=row["fitness_goal"],
            profile_complete=bool(row["profile_complete"]),
        )

    async def get_profile(self, user_id: str) -> Optional[UserProfile]:
        row = await self._run(lambda conn: conn.execute(
            "SELECT * FROM user_profiles WHERE user_id = ?",
            (user_id,),
        ).fetchone())
        return self._row_to_profile(row) if row else None

    async def save_profile(self, profile: UserProfile) -> UserProfile:
        """
        Insert or replace a user's profile.

        Args:
            profile: The profile to store

        Returns:
            The stored profile
        """
        await self._run(lambda conn: conn.execute(
            """
            INSERT INTO user_profiles
            (user_id, current_weight, height, goal_weight, fitness_goal,
             profile_complete, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                current_weight = excluded.current_weight,
                height = excluded.height,
                goal_weight = excluded.goal_weight,
                fitness_goal = excluded.fitness_goal,
                profile_complete = excluded.profile_complete,
                updated_at = excluded.updated_at
            """,
            (
                profile.user_id,
                profile.current_weight,
                profile.height,
                profile.goal_weight,
                profile.fitness_goal,
                1 if profile.profile_complete else 0,
                datetime.now().isoformat(),
            ),
        ))
        return profile


_profile_repository: Optional[UserProfileRepository] = None


def get_profile_repository(db_path: Optional[str] = None) -> UserProfileRepository:
    """Get or create the user profile repository singleton."""
    global _profile_repository
    if _profile_repository is None:
        _profile_repository = UserProfileRepository(db_path=db_path)
    return _profile_repository
