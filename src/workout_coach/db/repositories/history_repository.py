"""SQLite-backed store for per-user conversation history."""

import json
from datetime import datetime
from typing import List, Optional

from .base import HistoryStore, SQLiteRepository


class ConversationHistoryRepository(SQLiteRepository, HistoryStore):
    """
    Keeps each user's recent conversation turns as one JSON array.

    The store does not interpret the strings; trimming to the most recent
    turns is the caller's job.
    """

    async def get(self, user_id: str) -> List[str]:
        row = await self._run(lambda conn: conn.execute(
            "SELECT messages_json FROM chat_history WHERE user_id = ?",
            (user_id,),
        ).fetchone())
        if row is None:
            return []
        messages = json.loads(row["messages_json"] or "[]")
        return [str(message) for message in messages]

    async def put(self, user_id: str, messages: List[str]) -> None:
        payload = json.dumps(list(messages))
        await self._run(lambda conn: conn.execute(
            """
            INSERT INTO chat_history (user_id, messages_json, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                messages_json = excluded.messages_json,
                updated_at = excluded.updated_at
            """,
            (user_id, payload, datetime.now().isoformat()),
        ))

    async def clear(self, user_id: str) -> None:
        """Forget a user's conversation history."""
        await self._run(lambda conn: conn.execute(
            "DELETE FROM chat_history WHERE user_id = ?", (user_id,)
        ))


_history_repository: Optional[ConversationHistoryRepository] = None


def get_history_repository(db_path: Optional[str] = None) -> ConversationHistoryRepository:
    """Get or create the conversation history repository singleton."""
    global _history_repository
    if _history_repository is None:
        _history_repository = ConversationHistoryRepository(db_path=db_path)
    return _history_repository
